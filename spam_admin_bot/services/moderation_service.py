from __future__ import annotations

import logging
from typing import Optional

import structlog

from ..adapters.samples import SampleSpamBot
from ..admin.context import AdminContext
from ..admin.flow import AdminFlow
from ..admin.ports import Transport
from ..admin.superusers import SuperUsers
from ..config import BotSettings
from ..errors import PartialFailure, step_error
from ..logging.events import setup_logging
from ..models import PERMANENT_BAN_DURATION, BanRequest, CallbackAction, CallbackPress, ChatMessage, ForwardedReport
from ..storage.base import StorageGateway
from ..storage.sqlite import SQLiteStorage

logger = structlog.get_logger(__name__)


class ModerationCoordinator:
    """
    Wires storage, spam bot and the admin-chat flow for one primary chat.

    Messages from the primary chat are recorded in the locator and checked;
    detected spam is deleted and its author banned (unless training), then
    reported to the admin chat. Admin-chat events go to ``AdminFlow``.
    """

    def __init__(
        self,
        settings: BotSettings,
        transport: Transport,
        *,
        storage: Optional[StorageGateway] = None,
    ) -> None:
        log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)
        setup_logging(level=log_level, use_json=settings.logging.use_json)
        self._settings = settings
        self._storage = storage or SQLiteStorage(settings.storage.sqlite_path)
        self._spam_bot = SampleSpamBot(self._storage)
        self._super_users = SuperUsers(settings.super_users)
        self.context = AdminContext(
            transport=transport,
            locator=self._storage,
            super_users=self._super_users,
            bot=self._spam_bot,
            primary_chat_id=settings.primary_chat_id,
            admin_chat_id=settings.admin_chat_id,
            training=settings.training,
            dry=settings.dry,
        )
        self.flow = AdminFlow(self.context)

    async def start(self) -> None:
        await self._storage.connect()
        logger.info(
            "moderation_coordinator_started",
            primary_chat_id=self._settings.primary_chat_id,
            admin_chat_id=self._settings.admin_chat_id,
            super_users=len(self._super_users),
            training=self._settings.training,
            dry=self._settings.dry,
        )

    async def shutdown(self) -> None:
        await self._storage.disconnect()
        logger.info("moderation_coordinator_stopped")

    async def handle_chat_message(self, message: ChatMessage) -> bool:
        """Check a primary-chat message. Returns True if it was treated as spam."""
        if message.chat_id != self.context.primary_chat_id or not message.text:
            return False

        await self._storage.add_message(
            message.text, message.chat_id, message.user_id, message.username or "", message.message_id
        )
        if self._super_users.is_super(message.username):
            return False

        response = await self._spam_bot.on_message(message)
        if not response.spam:
            return False

        logger.info(
            "spam_detected",
            user_id=message.user_id,
            msg_id=message.message_id,
            checks=[str(check) for check in response.check_results],
        )
        await self._storage.add_spam(message.user_id, message.username or "", message.text, response.check_results)

        errors: list[Exception] = []
        if not self.context.training:
            executor = self.flow.executor
            try:
                await executor.delete(message.chat_id, message.message_id, dry=self.context.dry)
            except Exception as exc:  # pylint: disable=broad-except
                errors.append(step_error(f"failed to delete message {message.message_id}", exc))
            request = BanRequest(
                user_id=message.user_id,
                chat_id=message.chat_id,
                duration=PERMANENT_BAN_DURATION,
                dry=self.context.dry,
            )
            try:
                await executor.ban(request)
            except Exception as exc:  # pylint: disable=broad-except
                errors.append(step_error(f"failed to ban user {message.user_id}", exc))

        try:
            await self.flow.report_ban(message.sender_label(), message)
        except Exception as exc:  # pylint: disable=broad-except
            errors.append(step_error("failed to report ban to admin chat", exc))

        PartialFailure.raise_if_any(errors)
        return True

    async def handle_forwarded(self, report: ForwardedReport) -> None:
        await self.flow.handle_forwarded(report)

    async def handle_callback(self, press: CallbackPress) -> Optional[CallbackAction]:
        return await self.flow.handle_callback(press)
