from __future__ import annotations

from datetime import timedelta
from typing import Iterable

from ..callbacks.codec import encode
from ..models import CallbackAction, CheckResult, InlineButton, Keyboard

NO_SPAM_INFO = "**can't get spam info**"

_MARKDOWN_V1_SPECIAL = ("_", "*", "`", "[")


def escape_markdown_v1(text: str) -> str:
    for char in _MARKDOWN_V1_SPECIAL:
        text = text.replace(char, "\\" + char)
    return text


def shrink(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def format_elapsed(elapsed: timedelta) -> str:
    remaining = max(0, round(elapsed.total_seconds()))
    parts = []
    for unit_seconds, suffix in ((86400, "d"), (3600, "h"), (60, "m"), (1, "s")):
        if remaining >= unit_seconds:
            value, remaining = divmod(remaining, unit_seconds)
            parts.append(f"{value}{suffix}")
    return " ".join(parts) if parts else "0s"


def render_checks(checks: Iterable[CheckResult]) -> str:
    lines = [f"- {escape_markdown_v1(str(check))}" for check in checks]
    return "\n".join(lines) if lines else NO_SPAM_INFO


def render_report(display_name: str, user_id: int, text: str) -> str:
    body = escape_markdown_v1(text).replace("\n", " ")
    return f"**permanently banned [{escape_markdown_v1(display_name)}](tg://user?id={user_id})**\n\n{body}\n\n"


def render_detection_results(username: str, user_id: int, checks: list[CheckResult]) -> str:
    return (
        f'**original detection results for "{escape_markdown_v1(username)}" ({user_id})**\n\n'
        f"{render_checks(checks)}\n\n\n"
        "*the user banned and message deleted*"
    )


def italic(text: str) -> str:
    # escapes are not allowed inside an entity, close it around the char instead
    for char in _MARKDOWN_V1_SPECIAL:
        text = text.replace(char, f"_\\{char}_")
    return f"_{text}_"


def render_annotation(text: str, verb: str, actor: str, elapsed: timedelta) -> str:
    return f"{text}\n\n" + italic(f"{verb} by {actor} in {format_elapsed(elapsed)}")


def report_keyboard(user_id: int, msg_id: int, action_label: str = "change ban") -> Keyboard:
    return [
        [
            InlineButton(text=f"⛔︎ {action_label}", data=encode(CallbackAction.ASK_CONFIRM, user_id, msg_id)),
            InlineButton(text="⚑ info", data=encode(CallbackAction.SHOW_INFO, user_id, msg_id)),
        ]
    ]


def confirmation_keyboard(user_id: int, msg_id: int, *, training: bool) -> Keyboard:
    keep_label = "Confirm ban" if training else "Keep it banned"
    return [
        [
            InlineButton(text="Unban for real", data=encode(CallbackAction.UNBAN, user_id, msg_id)),
            InlineButton(text=keep_label, data=encode(CallbackAction.CONFIRM_BAN, user_id, msg_id)),
        ]
    ]


def without_info_button(keyboard: Keyboard) -> Keyboard:
    if not keyboard:
        return []
    trimmed = [list(row) for row in keyboard]
    trimmed[0] = trimmed[0][:1]
    return trimmed
