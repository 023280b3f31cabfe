import logging
from typing import Any, AsyncIterator, Optional

from telethon import TelegramClient, utils
from telethon.errors import RPCError, SessionPasswordNeededError

from telechat.core.schemas.results import Failure, Ok, PasswordNeeded, Result, SignInResult
from telechat.remote.base import (
    Credentials,
    LoginToken,
    PasswordToken,
    RemoteMessage,
    RemotePeer,
    RemoteSequence,
    RemoteService,
)

# Errores "esperables" que se devuelven como Failure en vez de propagarse
_REMOTE_ERRORS = (RPCError, ConnectionError, OSError, ValueError, TypeError)


def _display_name(entity: Any) -> Optional[str]:
    if entity is None:
        return None
    name = utils.get_display_name(entity)
    return name or None


class TelethonService(RemoteService):
    """
    Adaptador sobre Telethon. El fichero de sesión (SQLite) lo abre y lo
    mantiene el propio TelegramClient; aquí no se toca.
    """

    def __init__(self, client: Any):
        self._client = client

    @classmethod
    def create(cls, credentials: Credentials) -> "TelethonService":
        client = TelegramClient(credentials.session_path, credentials.api_id, credentials.api_hash)
        return cls(client)

    #  ciclo de vida
    async def connect(self) -> Result:
        try:
            await self._client.connect()
            logging.info("[Telethon] Conectado.")
            return Ok()
        except _REMOTE_ERRORS as e:
            logging.warning("[Telethon] No se pudo conectar: %s", e)
            return Failure(str(e))

    async def disconnect(self) -> None:
        try:
            await self._client.disconnect()
            logging.info("[Telethon] Desconectado.")
        except _REMOTE_ERRORS:
            logging.debug("[Telethon] Error desconectando", exc_info=True)

    async def is_authorized(self) -> bool:
        return bool(await self._client.is_user_authorized())

    #  autenticación
    async def request_login_code(self, phone: str) -> Result:
        try:
            sent = await self._client.send_code_request(phone)
            return Ok(LoginToken(phone=phone, phone_code_hash=sent.phone_code_hash))
        except _REMOTE_ERRORS as e:
            return Failure(str(e))

    async def sign_in(self, token: LoginToken, code: str) -> SignInResult:
        try:
            await self._client.sign_in(phone=token.phone, code=code, phone_code_hash=token.phone_code_hash)
            return Ok()
        except SessionPasswordNeededError:
            return PasswordNeeded(PasswordToken(phone=token.phone))
        except _REMOTE_ERRORS as e:
            return Failure(str(e))

    async def check_password(self, token: PasswordToken, password: str) -> Result:
        try:
            await self._client.sign_in(password=password)
            return Ok()
        except _REMOTE_ERRORS as e:
            return Failure(str(e))

    async def sign_out(self) -> Result:
        try:
            if await self._client.log_out():
                return Ok()
            return Failure("log out was rejected by the server")
        except _REMOTE_ERRORS as e:
            return Failure(str(e))

    #  listados
    def iter_dialogs(self) -> RemoteSequence[RemotePeer]:
        async def dialogs() -> AsyncIterator[RemotePeer]:
            async for dialog in self._client.iter_dialogs():
                yield RemotePeer(id=dialog.id, name=dialog.name or None, handle=dialog.entity)
        return RemoteSequence(dialogs)

    def iter_messages(self, peer: RemotePeer) -> RemoteSequence[RemoteMessage]:
        def messages(limit: Optional[int] = None):
            async def gen() -> AsyncIterator[RemoteMessage]:
                async for msg in self._client.iter_messages(peer.handle, limit=limit):
                    sender = msg.sender
                    if sender is None and getattr(msg, "sender_id", None) is not None:
                        try:
                            sender = await msg.get_sender()
                        except _REMOTE_ERRORS:
                            logging.debug("[Telethon] No se pudo resolver el remitente de %s", msg.id, exc_info=True)
                    yield RemoteMessage(
                        id=msg.id,
                        text=msg.message or "",
                        date=msg.date,
                        sender_name=_display_name(sender),
                    )
            return gen()
        return _MessageSequence(messages)

    async def send_message(self, peer: RemotePeer, text: str) -> Result:
        try:
            await self._client.send_message(peer.handle, text)
            return Ok()
        except _REMOTE_ERRORS as e:
            return Failure(str(e))


class _MessageSequence(RemoteSequence[RemoteMessage]):
    """Pasa el límite a iter_messages para que el servidor no envíe de más."""

    def __init__(self, factory, limit: Optional[int] = None):
        super().__init__(lambda: factory(limit), limit)
        self._raw_factory = factory

    def limit(self, n: int) -> "_MessageSequence":
        if n < 0:
            raise ValueError("limit must be >= 0")
        cap = n if self._limit is None else min(n, self._limit)
        return _MessageSequence(self._raw_factory, cap)
