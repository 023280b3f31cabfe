from dataclasses import dataclass
from typing import Union

# Peticiones UI -> coordinador. Conjunto cerrado.

@dataclass(frozen=True)
class Configure:
    api_id: int
    api_hash: str

    def __repr__(self) -> str:
        # el hash no debe acabar en los logs
        return f"Configure(api_id={self.api_id}, api_hash='***')"

@dataclass(frozen=True)
class Login:
    phone: str

@dataclass(frozen=True)
class SendCode:
    code: str

    def __repr__(self) -> str:
        return "SendCode(code='***')"

@dataclass(frozen=True)
class SendPassword:
    password: str

    def __repr__(self) -> str:
        return "SendPassword(password='***')"

@dataclass(frozen=True)
class RefreshChats:
    pass

@dataclass(frozen=True)
class SelectChat:
    chat_id: str

@dataclass(frozen=True)
class SendMessage:
    chat_id: str
    text: str

@dataclass(frozen=True)
class Logout:
    pass

@dataclass(frozen=True)
class BackToChats:
    pass


Intent = Union[
    Configure, Login, SendCode, SendPassword, RefreshChats,
    SelectChat, SendMessage, Logout, BackToChats,
]
