from telechat.app_server import main

main()
