from __future__ import annotations

from datetime import datetime
from typing import Optional

import structlog
from aiogram import Bot
from aiogram.enums import ParseMode
from aiogram.exceptions import TelegramAPIError, TelegramBadRequest
from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup, LinkPreviewOptions

from ..errors import TransportError
from ..models import Keyboard

logger = structlog.get_logger(__name__)


def to_markup(keyboard: Optional[Keyboard]) -> Optional[InlineKeyboardMarkup]:
    if keyboard is None:
        return None
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [InlineKeyboardButton(text=button.text, callback_data=button.data) for button in row]
            for row in keyboard
        ]
    )


class AiogramTransport:
    """Telegram transport over an aiogram ``Bot``; API failures become ``TransportError``."""

    def __init__(self, bot: Bot) -> None:
        self._bot = bot

    async def _markdown_or_plain(self, call, markdown: bool, **kwargs):
        """Call with markdown parsing; when telegram can't parse the entities, send the text as is."""
        if markdown:
            try:
                return await call(parse_mode=ParseMode.MARKDOWN, **kwargs)
            except TelegramBadRequest as exc:
                logger.warning("markdown_rejected_sending_plain", chat_id=kwargs.get("chat_id"), error=str(exc))
        return await call(parse_mode=None, **kwargs)

    async def send_message(
        self,
        chat_id: int,
        text: str,
        *,
        keyboard: Optional[Keyboard] = None,
        markdown: bool = False,
    ) -> int:
        try:
            sent = await self._markdown_or_plain(
                self._bot.send_message,
                markdown,
                chat_id=chat_id,
                text=text,
                reply_markup=to_markup(keyboard),
                link_preview_options=LinkPreviewOptions(is_disabled=True),
            )
        except TelegramAPIError as exc:
            raise TransportError(f"can't send message to chat {chat_id}: {exc}") from exc
        return sent.message_id

    async def edit_message_text(
        self,
        chat_id: int,
        message_id: int,
        text: str,
        *,
        keyboard: Optional[Keyboard] = None,
        markdown: bool = False,
    ) -> None:
        try:
            await self._markdown_or_plain(
                self._bot.edit_message_text,
                markdown,
                text=text,
                chat_id=chat_id,
                message_id=message_id,
                reply_markup=to_markup(keyboard),
            )
        except TelegramAPIError as exc:
            raise TransportError(f"can't edit message {message_id}: {exc}") from exc

    async def edit_message_keyboard(self, chat_id: int, message_id: int, keyboard: Keyboard) -> None:
        try:
            await self._bot.edit_message_reply_markup(
                chat_id=chat_id,
                message_id=message_id,
                reply_markup=to_markup(keyboard),
            )
        except TelegramAPIError as exc:
            raise TransportError(f"can't edit keyboard of message {message_id}: {exc}") from exc

    async def delete_message(self, chat_id: int, message_id: int) -> None:
        try:
            await self._bot.delete_message(chat_id, message_id)
        except TelegramAPIError as exc:
            raise TransportError(f"can't delete message {message_id}: {exc}") from exc

    async def ban_member(self, chat_id: int, user_id: int, *, until: datetime) -> None:
        try:
            await self._bot.ban_chat_member(chat_id, user_id, until_date=until)
        except TelegramAPIError as exc:
            raise TransportError(f"can't ban user {user_id}: {exc}") from exc

    async def unban_member(self, chat_id: int, user_id: int) -> None:
        try:
            await self._bot.unban_chat_member(chat_id, user_id)
        except TelegramAPIError as exc:
            raise TransportError(f"can't unban user {user_id}: {exc}") from exc

    async def answer_callback(self, query_id: str, text: str) -> None:
        try:
            await self._bot.answer_callback_query(query_id, text=text)
        except TelegramAPIError as exc:
            raise TransportError(f"can't answer callback {query_id}: {exc}") from exc
