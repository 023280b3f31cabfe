"""
Máquina de estados de autenticación.

Los estados son valores inmutables; los tokens de un solo uso viven dentro
del estado, así que invalidarlos es simplemente reemplazar el estado.
Las transiciones son funciones puras (estado, resultado remoto) -> (estado, evento):
el coordinador hace la llamada y aplica la transición correspondiente.
"""
from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple, Union

from telechat.core.enums.enums import AuthStage
from telechat.core.schemas.events import (
    CodeSent,
    Configured,
    Error,
    Event,
    LoggedIn,
    LoggedOut,
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
from telechat.core.schemas.results import Failure, Ok, PasswordNeeded
from telechat.remote.base import LoginToken, PasswordToken

NOT_CONFIGURED = "not configured: set API ID and hash first"
ALREADY_CONFIGURED = "already configured"
NO_PENDING_LOGIN = "no pending login"
NO_PENDING_PASSWORD = "no pending password check"
NOT_LOGGED_IN = "not logged in"
ALREADY_LOGGED_IN = "already logged in"


@dataclass(frozen=True)
class Unconfigured:
    stage: ClassVar[AuthStage] = AuthStage.UNCONFIGURED


@dataclass(frozen=True)
class AwaitingPhone:
    stage: ClassVar[AuthStage] = AuthStage.AWAITING_PHONE


@dataclass(frozen=True)
class AwaitingCode:
    login_token: LoginToken
    stage: ClassVar[AuthStage] = AuthStage.AWAITING_CODE


@dataclass(frozen=True)
class AwaitingPassword:
    password_token: Optional[PasswordToken]   # None = ya consumido
    stage: ClassVar[AuthStage] = AuthStage.AWAITING_PASSWORD


@dataclass(frozen=True)
class Authenticated:
    stage: ClassVar[AuthStage] = AuthStage.AUTHENTICATED


AuthState = Union[Unconfigured, AwaitingPhone, AwaitingCode, AwaitingPassword, Authenticated]
Transition = Tuple[AuthState, Event]

_CHAT_INTENTS = (RefreshChats, SelectChat, SendMessage, BackToChats)


def refusal(state: AuthState, intent: Intent) -> Optional[Error]:
    """Devuelve el Error con el que se rechaza `intent` en `state`, o None si aplica."""
    if isinstance(state, Unconfigured):
        return None if isinstance(intent, Configure) else Error(NOT_CONFIGURED)
    if isinstance(intent, Configure):
        return Error(ALREADY_CONFIGURED)
    if isinstance(intent, Login):
        return Error(ALREADY_LOGGED_IN) if isinstance(state, Authenticated) else None
    if isinstance(intent, SendCode):
        return None if isinstance(state, AwaitingCode) else Error(NO_PENDING_LOGIN)
    if isinstance(intent, SendPassword):
        if isinstance(state, AwaitingPassword) and state.password_token is not None:
            return None
        return Error(NO_PENDING_PASSWORD)
    if isinstance(intent, (Logout,) + _CHAT_INTENTS):
        return None if isinstance(state, Authenticated) else Error(NOT_LOGGED_IN)
    return None


def after_configure(state: AuthState) -> Transition:
    return AwaitingPhone(), Configured()


def after_login_code(state: AuthState, result: Union[Ok, Failure]) -> Transition:
    if isinstance(result, Ok):
        return AwaitingCode(login_token=result.value), CodeSent()
    return state, Error(result.message)


def after_sign_in(state: AwaitingCode, result: Union[Ok, PasswordNeeded, Failure]) -> Transition:
    if isinstance(result, Ok):
        return Authenticated(), LoggedIn()
    if isinstance(result, PasswordNeeded):
        # el login_token queda consumido al salir de AwaitingCode
        return AwaitingPassword(password_token=result.token), PasswordRequired()
    # código incorrecto: se conserva el token para reintentar
    return state, Error(result.message)


def after_check_password(state: AwaitingPassword, result: Union[Ok, Failure]) -> Transition:
    if isinstance(result, Ok):
        return Authenticated(), LoggedIn()
    return AwaitingPassword(password_token=None), Error(result.message)


def after_sign_out(state: AuthState, result: Union[Ok, Failure]) -> Transition:
    if isinstance(result, Ok):
        return AwaitingPhone(), LoggedOut()
    return state, Error(f"Failed to log out: {result.message}")


def after_authorized_session(state: AuthState, authorized: bool) -> Tuple[AuthState, Optional[Event]]:
    """Atajo de arranque: la sesión guardada ya estaba autorizada."""
    if authorized and isinstance(state, AwaitingPhone):
        return Authenticated(), LoggedIn()
    return state, None
