from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T = None


@dataclass(frozen=True)
class PasswordNeeded:
    """Sub-resultado de sign_in: la cuenta tiene 2FA y hace falta la contraseña."""
    token: Any


@dataclass(frozen=True)
class Failure:
    message: str


SignInResult = Union[Ok, PasswordNeeded, Failure]
Result = Union[Ok, Failure]
