from __future__ import annotations

import structlog

from ..errors import CorrelationNotFound, SuperUserProtected
from ..models import MessageRecord
from .context import AdminContext
from .render import shrink

logger = structlog.get_logger(__name__)


class MessageCorrelator:
    """Maps forwarded text back to the original sender through the locator."""

    def __init__(self, context: AdminContext) -> None:
        self._ctx = context

    async def correlate(self, text: str) -> MessageRecord:
        record = await self._ctx.locator.message(text)
        if record is None:
            raise CorrelationNotFound(f"not found {shrink(text, 50)!r} in locator")
        logger.debug(
            "locator_message_found",
            user_id=record.user_id,
            username=record.username,
            msg_id=record.msg_id,
        )
        if record.username and self._ctx.super_users.is_super(record.username):
            raise SuperUserProtected(record.username, record.user_id)
        return record
