from enum import Enum, auto

class AuthStage(Enum):
    UNCONFIGURED = auto()
    AWAITING_PHONE = auto()
    AWAITING_CODE = auto()
    AWAITING_PASSWORD = auto()
    AUTHENTICATED = auto()
