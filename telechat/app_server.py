import argparse
import contextlib
import logging
import signal
import sys
import threading
from typing import Optional

from telechat.coordinator.session_coordinator import SessionCoordinator
from telechat.core.managers.channels import EventChannel, IntentChannel
from telechat.core.managers.service_threads import WorkerThread
from telechat.core.schemas.intents import Configure
from telechat.prepare.runtime_config import RuntimeConfig, get_runtime_config
from telechat.remote.base import ServiceFactory


def configure_logging(level_name: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level_name.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - [%(threadName)s] %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )


def _telethon_factory() -> ServiceFactory:
    from telechat.remote.telethon_service import TelethonService
    return TelethonService.create


class AppServer:
    """
    Arranque del cliente:
      - canales UI <-> coordinador,
      - hilo de trabajo con el loop asyncio y el SessionCoordinator,
      - UI pygame en el hilo principal.
    """
    def __init__(self, config: RuntimeConfig, service_factory: Optional[ServiceFactory] = None):
        self.config = config
        self.intents = IntentChannel(config.channel_capacity)
        self.events = EventChannel(config.channel_capacity)
        self.coordinator = SessionCoordinator(
            self.intents,
            self.events,
            service_factory or _telethon_factory(),
            session_path=config.session_path,
        )
        self.worker = WorkerThread(self.coordinator.run, name="coordinator")
        self._stop_evt = threading.Event()

    def start(self) -> None:
        loop = self.worker.start()
        self.intents.attach(loop)
        logging.info("AppServer listo. Sesión=%s", self.config.session_path)

        if self.config.has_credentials:
            logging.info("Credenciales en el entorno: configuración automática (api_id=%s).", self.config.api_id)
            self.intents.try_send(Configure(api_id=self.config.api_id, api_hash=self.config.api_hash))

    def run_forever(self) -> None:
        # la UI importa pygame; sólo se carga si de verdad se abre la ventana
        from telechat.ui.app import run
        from telechat.ui.services.event_pump import EventPump
        from telechat.ui.services.session import SessionService

        with contextlib.suppress(Exception):
            signal.signal(signal.SIGTERM, lambda *_: self.stop())

        self.start()
        session = SessionService(self.intents)
        pump = EventPump()
        session.register_event_handlers(pump)

        defaults = {}
        if self.config.api_id:
            defaults["api_id"] = str(self.config.api_id)
        if self.config.api_hash:
            defaults["api_hash"] = self.config.api_hash

        try:
            run(
                self.events,
                pump,
                session,
                window_size=self.config.window_size,
                fps=self.config.ui_fps,
                defaults=defaults,
            )
        except KeyboardInterrupt:
            pass
        except Exception:
            logging.exception("Fallo inesperado en la UI")
        finally:
            self.stop()

    def stop(self) -> None:
        if self._stop_evt.is_set():
            return
        self._stop_evt.set()
        logging.info("Deteniendo AppServer...")
        self.intents.close()
        self.events.close()
        self.worker.stop()
        if self.intents.dropped:
            logging.info("Intents descartados por cola llena: %d", self.intents.dropped)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="telechat", description="Cliente de escritorio para Telegram.")
    p.add_argument("--session", dest="session_path", default=None,
                   help="Fichero de sesión (por defecto TELECHAT_SESSION o telechat.session).")
    p.add_argument("--api-id", dest="api_id", type=int, default=None, help="API ID de my.telegram.org.")
    p.add_argument("--api-hash", dest="api_hash", default=None, help="API hash de my.telegram.org.")
    p.add_argument("--log-level", dest="log_level", default=None, help="DEBUG, INFO, WARNING...")
    return p


def load_config(argv=None) -> RuntimeConfig:
    args = build_parser().parse_args(argv)
    cfg = get_runtime_config()
    if args.session_path:
        cfg.session_path = args.session_path
    if args.api_id is not None:
        cfg.api_id = args.api_id
    if args.api_hash:
        cfg.api_hash = args.api_hash
    if args.log_level:
        cfg.log_level = args.log_level.upper()
    return cfg


def main(argv=None):
    cfg = load_config(argv)
    configure_logging(cfg.log_level)
    logging.info("Iniciando telechat (LOG_LEVEL=%s)", cfg.log_level)
    AppServer(cfg).run_forever()


if __name__ == "__main__":
    main()
