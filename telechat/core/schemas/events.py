from dataclasses import dataclass
from typing import Tuple, Union

from telechat.core.schemas.records import ChatSummary, MessageRecord

# Notificaciones coordinador -> UI. Conjunto cerrado.

@dataclass(frozen=True)
class Configured:
    pass

@dataclass(frozen=True)
class CodeSent:
    pass

@dataclass(frozen=True)
class PasswordRequired:
    pass

@dataclass(frozen=True)
class LoggedIn:
    pass

@dataclass(frozen=True)
class ChatsLoaded:
    chats: Tuple[ChatSummary, ...] = ()

@dataclass(frozen=True)
class MessagesLoaded:
    messages: Tuple[MessageRecord, ...] = ()

@dataclass(frozen=True)
class LoggedOut:
    pass

@dataclass(frozen=True)
class Error:
    message: str


Event = Union[
    Configured, CodeSent, PasswordRequired, LoggedIn,
    ChatsLoaded, MessagesLoaded, LoggedOut, Error,
]
