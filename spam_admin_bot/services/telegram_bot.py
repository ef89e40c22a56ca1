from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from aiogram import Bot, Dispatcher, F
from aiogram.types import CallbackQuery, InlineKeyboardMarkup, Message

from ..adapters.telegram import AiogramTransport
from ..config import BotSettings
from ..errors import AdminFlowError, MalformedPayload, SuperUserProtected
from ..models import AdminMessage, CallbackPress, ChatMessage, ForwardedReport, InlineButton, Keyboard
from ..storage.base import StorageGateway
from .moderation_service import ModerationCoordinator

logger = structlog.get_logger(__name__)


def keyboard_from_markup(markup: Optional[InlineKeyboardMarkup]) -> Keyboard:
    if markup is None:
        return []
    return [
        [InlineButton(text=button.text, data=button.callback_data or "") for button in row]
        for row in markup.inline_keyboard
    ]


def admin_message_from(message: Message) -> AdminMessage:
    return AdminMessage(
        chat_id=message.chat.id,
        message_id=message.message_id,
        text=message.text or "",
        timestamp=message.date,
        keyboard=keyboard_from_markup(message.reply_markup),
    )


class TelegramAdminApp:
    """
    Aiogram integration wrapper for the anti-spam admin workflow.

    - Messages in the primary chat are recorded and checked for spam.
    - Messages forwarded into the admin chat are treated as missed spam.
    - Inline button presses in the admin chat drive ban confirmation, unban and info.
    """

    def __init__(self, settings: BotSettings, *, storage: Optional[StorageGateway] = None) -> None:
        self._settings = settings
        self.bot = Bot(token=settings.telegram_token)
        self.dispatcher = Dispatcher()
        self.coordinator = ModerationCoordinator(settings, AiogramTransport(self.bot), storage=storage)
        self._register_handlers()

    def _register_handlers(self) -> None:
        self.dispatcher.message(F.chat.id == self._settings.admin_chat_id)(self._handle_admin_message)
        self.dispatcher.message(F.chat.id == self._settings.primary_chat_id)(self._handle_chat_message)
        self.dispatcher.callback_query(F.message)(self._handle_callback)

    async def _handle_chat_message(self, message: Message) -> None:
        if message.from_user is None:
            return
        envelope = ChatMessage(
            chat_id=message.chat.id,
            message_id=message.message_id,
            user_id=message.from_user.id,
            username=message.from_user.username,
            display_name=message.from_user.full_name,
            text=message.text or message.caption or "",
            timestamp=message.date,
        )
        try:
            await self.coordinator.handle_chat_message(envelope)
        except Exception as exc:  # pylint: disable=broad-except
            logger.error(
                "chat_message_failed",
                error=str(exc),
                chat_id=envelope.chat_id,
                msg_id=envelope.message_id,
                user_id=envelope.user_id,
            )

    async def _handle_admin_message(self, message: Message) -> None:
        report = ForwardedReport(
            text=message.text or message.caption or "",
            forward_sender_present=message.forward_origin is not None,
            message_id=message.message_id,
            from_username=message.from_user.username if message.from_user else None,
        )
        try:
            await self.coordinator.handle_forwarded(report)
        except SuperUserProtected as exc:
            logger.warning("forwarded_super_user_ignored", username=exc.username, user_id=exc.user_id)
            await self._reply_safely(message, f"{exc}")
        except AdminFlowError as exc:
            logger.error("forwarded_report_failed", error=str(exc), msg_id=report.message_id)
        except Exception as exc:  # pylint: disable=broad-except
            logger.error("forwarded_report_crashed", error=str(exc), msg_id=report.message_id)

    async def _handle_callback(self, callback: CallbackQuery) -> None:
        if not isinstance(callback.message, Message):
            await callback.answer()
            return  # inaccessible message, nothing to edit
        press = CallbackPress(
            query_id=callback.id,
            data=callback.data or "",
            from_username=callback.from_user.username or callback.from_user.full_name,
            message=admin_message_from(callback.message),
        )
        try:
            await self.coordinator.handle_callback(press)
        except MalformedPayload as exc:
            logger.warning("callback_payload_malformed", data=press.data, error=str(exc))
        except Exception as exc:  # pylint: disable=broad-except
            logger.error(
                "callback_failed",
                error=str(exc),
                data=press.data,
                chat_id=press.message.chat_id,
                msg_id=press.message.message_id,
            )

    async def _reply_safely(self, message: Message, text: str) -> None:
        try:
            await message.reply(text)
        except Exception as exc:  # pragma: no cover - network errors
            logger.error("admin_reply_failed", error=str(exc), chat_id=message.chat.id)

    async def run(self) -> None:
        await self.coordinator.start()
        try:
            await self.dispatcher.start_polling(self.bot)
        finally:
            await self.coordinator.shutdown()
            await self.bot.session.close()


@asynccontextmanager
async def telegram_app(settings: BotSettings):
    app = TelegramAdminApp(settings)
    await app.coordinator.start()
    try:
        yield app
    finally:
        await app.coordinator.shutdown()
        await app.bot.session.close()
