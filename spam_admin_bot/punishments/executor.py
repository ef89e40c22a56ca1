from __future__ import annotations

import structlog

from ..admin.context import AdminContext
from ..errors import PartialFailure, step_error
from ..models import PERMANENT_BAN_DURATION, BanRequest

logger = structlog.get_logger(__name__)


class BanExecutor:
    """
    Applies delete/ban/unban actions in the primary chat.

    ``dry`` requests are logged and reported as successful without touching
    the transport. ``training`` requests skip the ban: in training mode the
    real ban waits for an explicit confirmation from the admin chat.
    """

    def __init__(self, context: AdminContext) -> None:
        self._ctx = context

    async def ban(self, request: BanRequest) -> None:
        if request.dry:
            logger.info("ban_skipped_dry", user_id=request.user_id, chat_id=request.chat_id)
            return
        if request.training:
            logger.info("ban_skipped_training", user_id=request.user_id, chat_id=request.chat_id)
            return
        until = self._ctx.clock() + request.duration
        await self._ctx.transport.ban_member(request.chat_id, request.user_id, until=until)
        logger.info("user_banned", user_id=request.user_id, chat_id=request.chat_id, until=until.isoformat())

    async def delete(self, chat_id: int, msg_id: int, *, dry: bool) -> None:
        if dry:
            logger.info("delete_skipped_dry", chat_id=chat_id, msg_id=msg_id)
            return
        await self._ctx.transport.delete_message(chat_id, msg_id)
        logger.info("message_deleted", chat_id=chat_id, msg_id=msg_id)

    async def unban(self, chat_id: int, user_id: int, *, dry: bool) -> None:
        if dry:
            logger.info("unban_skipped_dry", chat_id=chat_id, user_id=user_id)
            return
        await self._ctx.transport.unban_member(chat_id, user_id)
        logger.info("user_unbanned", chat_id=chat_id, user_id=user_id)

    async def delete_and_ban(self, user_id: int, msg_id: int) -> None:
        """
        Real delete and ban for a ban confirmed from the admin chat.

        Runs with training and dry reset, so it executes even when the bot
        otherwise only simulates actions. Super-users are never banned, but
        their message is still deleted.
        """
        chat_id = self._ctx.primary_chat_id
        request = BanRequest(
            user_id=user_id,
            chat_id=chat_id,
            duration=PERMANENT_BAN_DURATION,
            dry=False,
            training=False,
        )
        errors: list[Exception] = []

        username = await self._ctx.locator.user_name_by_id(user_id)
        from_super = bool(username) and self._ctx.super_users.is_super(username)
        if not from_super:
            try:
                await self.ban(request)
            except Exception as exc:  # pylint: disable=broad-except
                errors.append(step_error(f"failed to ban user {user_id}", exc))

        try:
            await self.delete(chat_id, msg_id, dry=False)
        except Exception as exc:  # pylint: disable=broad-except
            errors.append(step_error(f"failed to delete message {msg_id}", exc))

        PartialFailure.raise_if_any(errors)
        if from_super:
            logger.info("super_user_not_banned", msg_id=msg_id, username=username, user_id=user_id)
