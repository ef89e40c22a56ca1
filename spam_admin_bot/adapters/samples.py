from __future__ import annotations

import structlog

from ..models import ChatMessage, CheckResult, SpamResponse
from ..storage.base import SampleStore

logger = structlog.get_logger(__name__)


class SampleSpamBot:
    """
    Spam bot backed by the sample store.

    Detection is a lookup against samples confirmed by admins: a message is
    spam only when its exact text was previously stored as a spam sample.
    Approved users are never reported.
    """

    def __init__(self, store: SampleStore) -> None:
        self._store = store

    async def on_message(self, message: ChatMessage) -> SpamResponse:
        if await self._store.is_approved(message.user_id):
            check = CheckResult(name="approved", spam=False, details="user is approved")
            return SpamResponse(spam=False, check_results=[check])

        kind = await self._store.sample_kind(message.text)
        if kind == "spam":
            check = CheckResult(name="samples", spam=True, details="matches a spam sample")
        elif kind == "ham":
            check = CheckResult(name="samples", spam=False, details="matches a ham sample")
        else:
            check = CheckResult(name="samples", spam=False, details="no matching sample")
        logger.debug("sample_check", user_id=message.user_id, spam=check.spam, kind=kind)
        return SpamResponse(spam=check.spam, check_results=[check])

    async def update_spam(self, text: str) -> None:
        await self._store.add_sample("spam", text)

    async def update_ham(self, text: str) -> None:
        await self._store.add_sample("ham", text)

    async def add_approved_user(self, user_id: int, name: str) -> None:
        await self._store.approve_user(user_id, name)

    async def remove_approved_user(self, user_id: int) -> None:
        await self._store.disapprove_user(user_id)

    async def is_approved_user(self, user_id: int) -> bool:
        return await self._store.is_approved(user_id)
