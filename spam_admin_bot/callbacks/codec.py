from __future__ import annotations

import re

from ..errors import MalformedPayload
from ..models import CallbackAction, CallbackPayload

ACTION_PREFIXES: dict[CallbackAction, str] = {
    CallbackAction.UNBAN: "",
    CallbackAction.ASK_CONFIRM: "?",
    CallbackAction.CONFIRM_BAN: "+",
    CallbackAction.SHOW_INFO: "!",
}

PREFIX_ACTIONS: dict[str, CallbackAction] = {
    prefix: action for action, prefix in ACTION_PREFIXES.items() if prefix
}

# int() alone would also accept whitespace, underscores and non-ascii digits
_INTEGER = re.compile(r"[+-]?[0-9]+")


def encode(action: CallbackAction, user_id: int, msg_id: int) -> str:
    """Build inline button data: ``<prefix><user_id>:<msg_id>``."""
    return f"{ACTION_PREFIXES[action]}{user_id}:{msg_id}"


def decode(payload: str) -> CallbackPayload:
    if len(payload) < 3:
        raise MalformedPayload(f"unexpected callback data, too short {payload!r}")

    action = PREFIX_ACTIONS.get(payload[:1], CallbackAction.UNBAN)
    data = payload[1:] if payload[:1] in PREFIX_ACTIONS else payload

    parts = data.split(":")
    if len(parts) != 2:
        raise MalformedPayload(f"unexpected callback data, should have both ids {data!r}")
    user_part, msg_part = parts
    if not _INTEGER.fullmatch(user_part):
        raise MalformedPayload(f"failed to parse user id {user_part!r}")
    if not _INTEGER.fullmatch(msg_part):
        raise MalformedPayload(f"failed to parse message id {msg_part!r}")
    return CallbackPayload(action=action, user_id=int(user_part), msg_id=int(msg_part))


__all__ = ["ACTION_PREFIXES", "decode", "encode"]
