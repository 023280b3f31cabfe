import logging
from dataclasses import dataclass, field

from telechat.core.managers.channels import IntentChannel
from telechat.core.schemas.events import (
    ChatsLoaded,
    CodeSent,
    Configured,
    Error,
    LoggedIn,
    LoggedOut,
    MessagesLoaded,
    PasswordRequired,
)
from telechat.core.schemas.intents import (
    BackToChats,
    Configure,
    Intent,
    Login,
    Logout,
    RefreshChats,
    SelectChat,
    SendCode,
    SendMessage,
    SendPassword,
)
from telechat.core.schemas.records import ChatSummary
from telechat.ui.services.event_pump import EventPump
from telechat.ui.state.models import AppState, GuiStage

BUSY_STATUS = "Busy: request not sent, try again."


@dataclass
class SessionService:
    """
    Estado visible de la UI. Reacciona a los eventos del coordinador y
    convierte las acciones del usuario en intents. Sin pygame: se prueba solo.
    """
    intents: IntentChannel
    state: AppState = field(default_factory=AppState)

    def register_event_handlers(self, pump: EventPump) -> None:
        pump.subscribe_many({
            Configured: self.on_configured,
            CodeSent: self.on_code_sent,
            PasswordRequired: self.on_password_required,
            LoggedIn: self.on_logged_in,
            ChatsLoaded: self.on_chats_loaded,
            MessagesLoaded: self.on_messages_loaded,
            LoggedOut: self.on_logged_out,
            Error: self.on_error,
        })

    def _post(self, intent: Intent) -> bool:
        # Canal lleno o cerrado: el intent se pierde, la UI no se bloquea
        ok = self.intents.try_send(intent)
        if not ok:
            logging.debug("[UI] Intent no enviado: %r", intent)
            self.state.status = BUSY_STATUS
        return ok

    #  Eventos entrantes (coordinador -> UI)
    def on_configured(self, _evt: Configured):
        self.state.stage = GuiStage.LOGIN_PHONE
        self.state.status = "Configuration set. Enter phone number."

    def on_code_sent(self, _evt: CodeSent):
        self.state.stage = GuiStage.LOGIN_CODE
        self.state.status = "Code sent! Check Telegram."

    def on_password_required(self, _evt: PasswordRequired):
        self.state.stage = GuiStage.LOGIN_PASSWORD
        self.state.status = "2FA Password Required."

    def on_logged_in(self, _evt: LoggedIn):
        # la lista de chats la pide el coordinador por su cuenta
        self.state.stage = GuiStage.LOGGED_IN
        self.state.status = "Logged in successfully!"

    def on_chats_loaded(self, evt: ChatsLoaded):
        self.state.chats = list(evt.chats)
        self.state.status = "Chats loaded."

    def on_messages_loaded(self, evt: MessagesLoaded):
        self.state.messages = list(evt.messages)
        self.state.status = "Messages loaded."

    def on_logged_out(self, _evt: LoggedOut):
        self.state.stage = GuiStage.LOGIN_PHONE
        self.state.chats.clear()
        self.state.messages.clear()
        self.state.selected_chat = None
        self.state.status = "Logged out."

    def on_error(self, evt: Error):
        self.state.status = f"Error: {evt.message}"

    #  Acciones del usuario (UI -> coordinador)
    def configure(self, api_id_text: str, api_hash: str) -> bool:
        try:
            api_id = int(api_id_text.strip())
        except ValueError:
            self.state.status = "Invalid API ID (must be a number)"
            return False
        if self._post(Configure(api_id=api_id, api_hash=api_hash.strip())):
            self.state.status = "Saving configuration..."
            return True
        return False

    def request_code(self, phone: str) -> bool:
        self.state.status = "Sending code..."
        return self._post(Login(phone.strip()))

    def submit_code(self, code: str) -> bool:
        self.state.status = "Verifying code..."
        return self._post(SendCode(code.strip()))

    def submit_password(self, password: str) -> bool:
        self.state.status = "Verifying password..."
        return self._post(SendPassword(password))

    def refresh_chats(self) -> bool:
        self.state.status = "Loading chats..."
        return self._post(RefreshChats())

    def select_chat(self, chat: ChatSummary) -> bool:
        self.state.selected_chat = chat
        self.state.messages = []
        self.state.status = f"Loading messages for {chat.name}..."
        return self._post(SelectChat(chat.id))

    def send_text(self, text: str) -> bool:
        chat = self.state.selected_chat
        if chat is None or not text.strip():
            return False
        self.state.status = "Sending message..."
        return self._post(SendMessage(chat_id=chat.id, text=text))

    def back_to_chats(self) -> bool:
        self.state.selected_chat = None
        self.state.messages = []
        return self._post(BackToChats())

    def logout(self) -> bool:
        self.state.status = "Logging out..."
        return self._post(Logout())
