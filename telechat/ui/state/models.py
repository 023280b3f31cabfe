from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional

from telechat.core.schemas.records import ChatSummary, MessageRecord

class GuiStage(Enum):
    CONFIGURATION = auto()
    LOGIN_PHONE = auto()
    LOGIN_CODE = auto()
    LOGIN_PASSWORD = auto()
    LOGGED_IN = auto()

@dataclass
class AppState:
    stage: GuiStage = GuiStage.CONFIGURATION
    status: str = "Please enter API ID and Hash"
    chats: List[ChatSummary] = field(default_factory=list)
    messages: List[MessageRecord] = field(default_factory=list)
    selected_chat: Optional[ChatSummary] = None
