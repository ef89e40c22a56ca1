from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

from ..storage.base import Locator
from .ports import SpamBot, SuperUserCheck, Transport


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class AdminContext:
    """Collaborators and operating flags shared by one admin-chat workflow."""

    transport: Transport
    locator: Locator
    super_users: SuperUserCheck
    bot: SpamBot
    primary_chat_id: int
    admin_chat_id: int
    training: bool = False
    dry: bool = False
    clock: Callable[[], datetime] = field(default=utcnow)
