import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, List, Optional, Tuple, Type

from telechat.coordinator import auth
from telechat.coordinator.auth import AuthState, Authenticated, AwaitingCode, AwaitingPassword
from telechat.coordinator.chat_cache import ChatCache
from telechat.core.managers.channels import EventChannel, IntentChannel
from telechat.core.schemas.events import ChatsLoaded, Error, Event, MessagesLoaded
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
from telechat.core.schemas.records import UNKNOWN_NAME, ChatSummary, MessageRecord
from telechat.core.schemas.results import Failure
from telechat.remote.base import Credentials, RemoteMessage, RemotePeer, RemoteService, ServiceFactory

DIALOG_LIMIT = 50
MESSAGE_LIMIT = 50
DATE_FORMAT = "%Y-%m-%d %H:%M:%S UTC"

CHAT_NOT_FOUND = "chat not found"
EMPTY_MESSAGE = "cannot send an empty message"


def format_date(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(DATE_FORMAT)


def to_record(msg: RemoteMessage) -> MessageRecord:
    return MessageRecord(
        id=msg.id,
        text=msg.text,
        sender=msg.sender_name or UNKNOWN_NAME,
        date=format_date(msg.date),
    )


class SessionCoordinator:
    """
    Actor único que posee la sesión:
      - estado de autenticación (auth.AuthState) y tokens,
      - caché chat_id -> peer,
      - el adaptador remoto (único llamador).
    Procesa un intent cada vez, esperando en línea sus llamadas remotas, y
    traduce cada resultado a un evento del vocabulario cerrado.
    """

    def __init__(
        self,
        intents: IntentChannel,
        events: EventChannel,
        service_factory: ServiceFactory,
        *,
        session_path: str = "telechat.session",
    ):
        self._intents = intents
        self._events = events
        self._service_factory = service_factory
        self._session_path = session_path

        self.state: AuthState = auth.Unconfigured()
        self.cache = ChatCache()
        self.selected_chat: Optional[str] = None
        self.service: Optional[RemoteService] = None

        self._handlers: Dict[Type, Callable[[Intent], Awaitable[None]]] = {
            Configure: self._on_configure,
            Login: self._on_login,
            SendCode: self._on_send_code,
            SendPassword: self._on_send_password,
            RefreshChats: self._on_refresh_chats,
            SelectChat: self._on_select_chat,
            SendMessage: self._on_send_message,
            Logout: self._on_logout,
            BackToChats: self._on_back_to_chats,
        }

    #  bucle principal
    async def run(self) -> None:
        logging.info("[Coordinator] Bucle iniciado.")
        try:
            while True:
                intent = await self._intents.recv()
                if intent is None:
                    break
                await self.handle(intent)
        finally:
            await self.shutdown()
            logging.info("[Coordinator] Bucle terminado.")

    async def handle(self, intent: Intent) -> None:
        """Procesa un intent completo. Nunca lanza: todo fallo acaba en un Error."""
        logging.debug("[Coordinator] %r (estado=%s)", intent, self.state.stage.name)

        refused = auth.refusal(self.state, intent)
        if refused is not None:
            logging.info("[Coordinator] %s rechazado en %s: %s",
                         type(intent).__name__, self.state.stage.name, refused.message)
            await self._emit(refused)
            return

        handler = self._handlers.get(type(intent))
        if handler is None:
            logging.warning("[Coordinator] Intent desconocido: %r", intent)
            await self._emit(Error(f"unknown intent: {type(intent).__name__}"))
            return

        try:
            await handler(intent)
        except Exception as e:
            logging.exception("[Coordinator] Error procesando %s", type(intent).__name__)
            await self._emit(Error(str(e) or type(e).__name__))

    async def shutdown(self) -> None:
        if self.service is not None:
            await self.service.disconnect()

    #  helpers
    async def _emit(self, event: Event) -> None:
        logging.debug("[Coordinator] -> %s", type(event).__name__)
        await self._events.send(event)

    async def _apply(self, transition: Tuple[AuthState, Optional[Event]]) -> None:
        new_state, event = transition
        entering = isinstance(new_state, Authenticated) and not isinstance(self.state, Authenticated)
        if type(new_state) is not type(self.state):
            logging.info("[Coordinator] %s -> %s", self.state.stage.name, new_state.stage.name)
        self.state = new_state
        if event is not None:
            await self._emit(event)
        if entering:
            # al entrar en Authenticated la lista de chats llega sola
            await self._refresh_chats()

    #  autenticación
    async def _on_configure(self, intent: Configure) -> None:
        api_id = intent.api_id
        if isinstance(api_id, bool) or not isinstance(api_id, int) or api_id <= 0:
            await self._emit(Error("invalid API ID (must be a positive number)"))
            return
        api_hash = (intent.api_hash or "").strip()
        if not api_hash:
            await self._emit(Error("API hash is required"))
            return

        service = self._service_factory(Credentials(api_id=api_id, api_hash=api_hash,
                                                    session_path=self._session_path))
        connected = await service.connect()
        if isinstance(connected, Failure):
            # el cliente ya abrió el fichero de sesión: se cierra antes de reintentar
            await service.disconnect()
            await self._emit(Error(connected.message))
            return
        self.service = service
        await self._apply(auth.after_configure(self.state))

        # atajo de arranque: sesión persistida ya autorizada (se mira una sola vez)
        try:
            authorized = await service.is_authorized()
        except Exception as e:
            logging.warning("[Coordinator] No se pudo comprobar la sesión guardada: %s", e)
            authorized = False
        if authorized:
            logging.info("[Coordinator] Sesión guardada ya autorizada.")
        await self._apply(auth.after_authorized_session(self.state, authorized))

    async def _on_login(self, intent: Login) -> None:
        phone = (intent.phone or "").strip()
        if not phone:
            await self._emit(Error("phone number is required"))
            return
        result = await self.service.request_login_code(phone)
        await self._apply(auth.after_login_code(self.state, result))

    async def _on_send_code(self, intent: SendCode) -> None:
        state: AwaitingCode = self.state
        result = await self.service.sign_in(state.login_token, intent.code.strip())
        await self._apply(auth.after_sign_in(state, result))

    async def _on_send_password(self, intent: SendPassword) -> None:
        state: AwaitingPassword = self.state
        result = await self.service.check_password(state.password_token, intent.password)
        await self._apply(auth.after_check_password(state, result))

    async def _on_logout(self, intent: Logout) -> None:
        result = await self.service.sign_out()
        if not isinstance(result, Failure):
            self.cache.clear()
            self.selected_chat = None
        await self._apply(auth.after_sign_out(self.state, result))

    #  chats y mensajes
    async def _on_refresh_chats(self, intent: RefreshChats) -> None:
        await self._refresh_chats()

    async def _refresh_chats(self) -> None:
        peers: List[RemotePeer] = []
        try:
            async for peer in self.service.iter_dialogs().limit(DIALOG_LIMIT):
                peers.append(peer)
        except Exception as e:
            if not peers:
                logging.warning("[Coordinator] Fallo listando chats: %s", e)
                await self._emit(Error(f"Failed to load chats: {e}"))
                return
            logging.warning("[Coordinator] Lista de chats parcial (%d) por fallo: %s", len(peers), e)

        self.cache.replace(peers)
        chats = tuple(ChatSummary(name=p.name or UNKNOWN_NAME, id=p.chat_id) for p in peers)
        await self._emit(ChatsLoaded(chats))

    async def _on_select_chat(self, intent: SelectChat) -> None:
        peer = self.cache.get(intent.chat_id)
        if peer is None:
            await self._emit(Error(CHAT_NOT_FOUND))
            return
        if await self._load_messages(peer):
            self.selected_chat = intent.chat_id

    async def _on_send_message(self, intent: SendMessage) -> None:
        peer = self.cache.get(intent.chat_id)
        if peer is None:
            await self._emit(Error(CHAT_NOT_FOUND))
            return
        if not (intent.text or "").strip():
            await self._emit(Error(EMPTY_MESSAGE))
            return

        result = await self.service.send_message(peer, intent.text)
        if isinstance(result, Failure):
            await self._emit(Error(f"Failed to send: {result.message}"))
            return
        # sin eco local: el historial mostrado siempre es una lectura nueva
        await self._load_messages(peer)

    async def _on_back_to_chats(self, intent: BackToChats) -> None:
        logging.debug("[Coordinator] Volviendo a la lista (selección=%s)", self.selected_chat)
        self.selected_chat = None

    async def _load_messages(self, peer: RemotePeer) -> bool:
        """Emite el lote más reciente; False si no se pudo leer ningún mensaje."""
        fetched: List[RemoteMessage] = []
        try:
            async for msg in self.service.iter_messages(peer).limit(MESSAGE_LIMIT):
                fetched.append(msg)
        except Exception as e:
            if not fetched:
                logging.warning("[Coordinator] Fallo cargando mensajes de %s: %s", peer.chat_id, e)
                await self._emit(Error(f"Failed to load messages: {e}"))
                return False
            logging.warning("[Coordinator] Mensajes parciales (%d) de %s: %s", len(fetched), peer.chat_id, e)

        # llegan del más nuevo al más viejo
        fetched.reverse()
        fetched.sort(key=lambda m: m.date)
        await self._emit(MessagesLoaded(tuple(to_record(m) for m in fetched)))
        return True
