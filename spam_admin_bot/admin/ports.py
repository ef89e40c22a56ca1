"""Contracts of the collaborators the admin workflow talks to."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from ..models import ChatMessage, Keyboard, SpamResponse


@runtime_checkable
class Transport(Protocol):
    async def send_message(
        self,
        chat_id: int,
        text: str,
        *,
        keyboard: Optional[Keyboard] = None,
        markdown: bool = False,
    ) -> int:
        ...

    async def edit_message_text(
        self,
        chat_id: int,
        message_id: int,
        text: str,
        *,
        keyboard: Optional[Keyboard] = None,
        markdown: bool = False,
    ) -> None:
        ...

    async def edit_message_keyboard(self, chat_id: int, message_id: int, keyboard: Keyboard) -> None:
        ...

    async def delete_message(self, chat_id: int, message_id: int) -> None:
        ...

    async def ban_member(self, chat_id: int, user_id: int, *, until: datetime) -> None:
        ...

    async def unban_member(self, chat_id: int, user_id: int) -> None:
        ...

    async def answer_callback(self, query_id: str, text: str) -> None:
        ...


class SpamBot(Protocol):
    async def on_message(self, message: ChatMessage) -> SpamResponse:
        ...

    async def update_spam(self, text: str) -> None:
        ...

    async def update_ham(self, text: str) -> None:
        ...

    async def add_approved_user(self, user_id: int, name: str) -> None:
        ...

    async def remove_approved_user(self, user_id: int) -> None:
        ...

    async def is_approved_user(self, user_id: int) -> bool:
        ...


class SuperUserCheck(Protocol):
    def is_super(self, username: Optional[str]) -> bool:
        ...
