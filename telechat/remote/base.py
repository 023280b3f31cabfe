from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, AsyncIterator, Callable, Generic, Optional, TypeVar

from telechat.core.schemas.results import Failure, Ok, Result, SignInResult

T = TypeVar("T")


@dataclass(frozen=True)
class Credentials:
    api_id: int
    api_hash: str = field(repr=False)
    session_path: str = "telechat.session"


@dataclass(frozen=True)
class LoginToken:
    """Emitido al pedir el código; un único uso."""
    phone: str
    phone_code_hash: str = field(repr=False)


@dataclass(frozen=True)
class PasswordToken:
    """Emitido cuando sign_in exige contraseña (2FA); un único uso."""
    phone: str
    hint: Optional[str] = None


@dataclass(frozen=True)
class RemotePeer:
    id: int
    name: Optional[str]
    handle: Any = field(default=None, compare=False, repr=False)

    @property
    def chat_id(self) -> str:
        return str(self.id)


@dataclass(frozen=True)
class RemoteMessage:
    id: int
    text: str
    date: datetime
    sender_name: Optional[str] = None


class RemoteSequence(Generic[T]):
    """
    Secuencia perezosa del servidor (pull). Cada `async for` arranca una
    iteración nueva a partir de la factoría; `limit(n)` acota cuántos
    elementos se piden como máximo.
    """

    def __init__(self, factory: Callable[[], AsyncIterator[T]], limit: Optional[int] = None):
        self._factory = factory
        self._limit = limit

    def limit(self, n: int) -> "RemoteSequence[T]":
        if n < 0:
            raise ValueError("limit must be >= 0")
        cap = n if self._limit is None else min(n, self._limit)
        return RemoteSequence(self._factory, cap)

    async def __aiter__(self) -> AsyncIterator[T]:
        if self._limit == 0:
            return
        count = 0
        async for item in self._factory():
            yield item
            count += 1
            if self._limit is not None and count >= self._limit:
                break


class RemoteService(ABC):
    """
    Contrato del adaptador al servicio remoto. Las operaciones de login y
    envío devuelven resultados etiquetados (Ok / PasswordNeeded / Failure)
    en vez de lanzar; los listados son RemoteSequence y pueden fallar a mitad.
    """

    @abstractmethod
    async def connect(self) -> Result: ...

    @abstractmethod
    async def disconnect(self) -> None: ...

    @abstractmethod
    async def is_authorized(self) -> bool: ...

    @abstractmethod
    async def request_login_code(self, phone: str) -> Result: ...

    @abstractmethod
    async def sign_in(self, token: LoginToken, code: str) -> SignInResult: ...

    @abstractmethod
    async def check_password(self, token: PasswordToken, password: str) -> Result: ...

    @abstractmethod
    async def sign_out(self) -> Result: ...

    @abstractmethod
    def iter_dialogs(self) -> RemoteSequence[RemotePeer]: ...

    @abstractmethod
    def iter_messages(self, peer: RemotePeer) -> RemoteSequence[RemoteMessage]: ...

    @abstractmethod
    async def send_message(self, peer: RemotePeer, text: str) -> Result: ...


ServiceFactory = Callable[[Credentials], RemoteService]

__all__ = [
    "Credentials", "LoginToken", "PasswordToken", "RemotePeer", "RemoteMessage",
    "RemoteSequence", "RemoteService", "ServiceFactory", "Ok", "Failure",
]
