from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

# telegram treats bans longer than 366 days as permanent
PERMANENT_BAN_DURATION = timedelta(days=400)


class CallbackAction(str, Enum):
    ASK_CONFIRM = "ask_confirm"
    CONFIRM_BAN = "confirm_ban"
    SHOW_INFO = "show_info"
    UNBAN = "unban"


@dataclass(slots=True, frozen=True)
class CallbackPayload:
    action: CallbackAction
    user_id: int
    msg_id: int


@dataclass(slots=True)
class CheckResult:
    name: str
    spam: bool
    details: str = ""

    def __str__(self) -> str:
        verdict = "spam" if self.spam else "ham"
        return f"{self.name}: {verdict}, {self.details}"


@dataclass(slots=True)
class SpamResponse:
    spam: bool
    check_results: list[CheckResult] = field(default_factory=list)


@dataclass(slots=True)
class MessageRecord:
    user_id: int
    username: str
    msg_id: int
    text: str


@dataclass(slots=True)
class SpamRecord:
    user_id: int
    username: str
    text: str
    checks: list[CheckResult] = field(default_factory=list)


@dataclass(slots=True)
class BanRequest:
    user_id: int
    chat_id: int
    duration: timedelta = PERMANENT_BAN_DURATION
    dry: bool = False
    training: bool = False


@dataclass(slots=True)
class InlineButton:
    text: str
    data: str


Keyboard = list[list[InlineButton]]


@dataclass(slots=True)
class AdminMessage:
    chat_id: int
    message_id: int
    text: str
    timestamp: datetime
    keyboard: Keyboard = field(default_factory=list)


@dataclass(slots=True)
class ForwardedReport:
    text: str
    forward_sender_present: bool
    message_id: int
    from_username: Optional[str] = None


@dataclass(slots=True)
class CallbackPress:
    query_id: str
    data: str
    from_username: str
    message: AdminMessage


@dataclass(slots=True)
class ChatMessage:
    chat_id: int
    message_id: int
    user_id: int
    text: str
    timestamp: datetime
    username: Optional[str] = None
    display_name: Optional[str] = None

    def sender_label(self) -> str:
        # "{id username display name}", the plain form the admin flow can read back
        username = self.username or str(self.user_id)
        return f"{{{self.user_id} {username} {self.display_name or username}}}"


__all__ = [
    "AdminMessage",
    "BanRequest",
    "CallbackAction",
    "CallbackPayload",
    "CallbackPress",
    "ChatMessage",
    "CheckResult",
    "ForwardedReport",
    "InlineButton",
    "Keyboard",
    "MessageRecord",
    "PERMANENT_BAN_DURATION",
    "SpamRecord",
    "SpamResponse",
]
