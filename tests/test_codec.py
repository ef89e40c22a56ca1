from __future__ import annotations

import pytest

from spam_admin_bot.callbacks.codec import decode, encode
from spam_admin_bot.errors import MalformedPayload
from spam_admin_bot.models import CallbackAction, CallbackPayload


@pytest.mark.parametrize(
    ("action", "expected"),
    [
        (CallbackAction.UNBAN, "42:100"),
        (CallbackAction.ASK_CONFIRM, "?42:100"),
        (CallbackAction.CONFIRM_BAN, "+42:100"),
        (CallbackAction.SHOW_INFO, "!42:100"),
    ],
)
def test_encode_uses_action_prefix(action: CallbackAction, expected: str) -> None:
    assert encode(action, 42, 100) == expected


@pytest.mark.parametrize("action", list(CallbackAction))
@pytest.mark.parametrize(("user_id", "msg_id"), [(0, 0), (7, 100), (6762723796, 2147483647)])
def test_decode_reverses_encode(action: CallbackAction, user_id: int, msg_id: int) -> None:
    assert decode(encode(action, user_id, msg_id)) == CallbackPayload(action, user_id, msg_id)


def test_decode_without_prefix_is_unban() -> None:
    payload = decode("12345:67")

    assert payload.action == CallbackAction.UNBAN
    assert payload.user_id == 12345
    assert payload.msg_id == 67


def test_decode_accepts_negative_ids() -> None:
    # channels and supergroups use negative ids
    assert decode("!-1001:5") == CallbackPayload(CallbackAction.SHOW_INFO, -1001, 5)


@pytest.mark.parametrize(
    "payload",
    [
        "",
        "?",
        "1:",
        "?1:",
        "12345",
        "?12345",
        "1:2:3",
        "+abc:12",
        "12:abc",
        " 1:2",
        "1_0:2",
        "?:12",
    ],
)
def test_decode_rejects_malformed_payload(payload: str) -> None:
    with pytest.raises(MalformedPayload):
        decode(payload)


def test_malformed_payload_is_value_error() -> None:
    with pytest.raises(ValueError):
        decode("x")
