from __future__ import annotations

import abc
from typing import Iterable, Optional

from ..models import CheckResult, MessageRecord, SpamRecord


class Locator(abc.ABC):
    """Index correlating chat messages and detection results with their senders."""

    @abc.abstractmethod
    async def message(self, text: str) -> Optional[MessageRecord]:
        ...

    @abc.abstractmethod
    async def spam(self, user_id: int) -> Optional[SpamRecord]:
        ...

    @abc.abstractmethod
    async def user_name_by_id(self, user_id: int) -> str:
        ...

    @abc.abstractmethod
    async def add_message(self, text: str, chat_id: int, user_id: int, username: str, msg_id: int) -> None:
        ...

    @abc.abstractmethod
    async def add_spam(self, user_id: int, username: str, text: str, checks: Iterable[CheckResult]) -> None:
        ...


class SampleStore(abc.ABC):
    """Spam/ham samples and the approved-users list."""

    @abc.abstractmethod
    async def add_sample(self, kind: str, text: str) -> None:
        ...

    @abc.abstractmethod
    async def sample_kind(self, text: str) -> Optional[str]:
        ...

    @abc.abstractmethod
    async def approve_user(self, user_id: int, name: str) -> None:
        ...

    @abc.abstractmethod
    async def disapprove_user(self, user_id: int) -> None:
        ...

    @abc.abstractmethod
    async def is_approved(self, user_id: int) -> bool:
        ...


class StorageGateway(Locator, SampleStore, abc.ABC):
    """Combined repository interface for convenience."""

    @abc.abstractmethod
    async def connect(self) -> None:
        ...

    @abc.abstractmethod
    async def disconnect(self) -> None:
        ...
