from dataclasses import dataclass

UNKNOWN_NAME = "Unknown"

@dataclass(frozen=True)
class ChatSummary:
    name: str
    id: str

@dataclass(frozen=True)
class MessageRecord:
    id: int
    text: str
    sender: str = UNKNOWN_NAME
    date: str = ""     # "YYYY-MM-DD HH:MM:SS UTC"
