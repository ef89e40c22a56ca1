from __future__ import annotations

import pytest

from spam_admin_bot.admin.flow import AdminFlow
from spam_admin_bot.errors import AdminFlowError, CorrelationNotFound, PartialFailure, SuperUserProtected
from spam_admin_bot.models import PERMANENT_BAN_DURATION, ChatMessage, ForwardedReport, MessageRecord
from tests.factories import (
    ADMIN_CHAT_ID,
    NOW,
    PRIMARY_CHAT_ID,
    FakeLocator,
    make_chat_message,
    make_context,
)

DESTRUCTIVE = {"remove_approved_user", "send_message", "update_spam", "delete_message", "ban_member"}


def forwarded(text: str = "buy cheap meds", *, sender: bool = True) -> ForwardedReport:
    return ForwardedReport(text=text, forward_sender_present=sender, message_id=55, from_username="moderator")


def bob_locator(username: str = "bob") -> FakeLocator:
    return FakeLocator({"buy cheap meds": MessageRecord(user_id=7, username=username, msg_id=100, text="buy cheap meds")})


@pytest.mark.asyncio
async def test_forwarded_spam_end_to_end_order() -> None:
    context, recorder = make_context(locator=bob_locator())

    await AdminFlow(context).handle_forwarded(forwarded())

    assert recorder.names() == [
        "remove_approved_user",
        "on_message",
        "send_message",
        "update_spam",
        "delete_message",
        "ban_member",
    ]
    assert recorder.calls[0] == ("remove_approved_user", 7)
    assert recorder.calls[1] == ("on_message", 7, "buy cheap meds")
    assert recorder.calls[3] == ("update_spam", "buy cheap meds")
    assert recorder.calls[4] == ("delete_message", PRIMARY_CHAT_ID, 100)
    assert recorder.calls[5] == ("ban_member", PRIMARY_CHAT_ID, 7, NOW + PERMANENT_BAN_DURATION)

    _, chat_id, text, keyboard, markdown = recorder.calls[2]
    assert chat_id == ADMIN_CHAT_ID
    assert text.startswith('**original detection results for "bob" (7)**\n\n- similarity: spam, 0.93/0.50')
    assert text.endswith("*the user banned and message deleted*")
    assert keyboard is None
    assert markdown is True


@pytest.mark.asyncio
async def test_forwarded_spam_continues_after_remove_failure() -> None:
    context, recorder = make_context(locator=bob_locator(), bot_fail=["remove_approved_user"])

    with pytest.raises(PartialFailure) as exc_info:
        await AdminFlow(context).handle_forwarded(forwarded())

    assert recorder.names()[-3:] == ["update_spam", "delete_message", "ban_member"]
    assert len(exc_info.value.errors) == 1
    assert "failed to remove user 7 from approved list" in str(exc_info.value)


@pytest.mark.asyncio
async def test_forwarded_spam_collects_every_independent_failure() -> None:
    context, recorder = make_context(
        locator=bob_locator(),
        bot_fail=["remove_approved_user"],
        transport_fail=["send_message", "delete_message", "ban_member"],
    )

    with pytest.raises(PartialFailure) as exc_info:
        await AdminFlow(context).handle_forwarded(forwarded())

    messages = [str(err) for err in exc_info.value.errors]
    assert len(messages) == 4
    assert messages[0].startswith("failed to remove user 7")
    assert messages[1].startswith("failed to send spam detection results")
    assert messages[2].startswith("failed to delete message 100")
    assert messages[3].startswith("failed to ban user 7")
    assert str(exc_info.value).count("\n") == 3


@pytest.mark.asyncio
async def test_forwarded_spam_update_failure_short_circuits() -> None:
    context, recorder = make_context(locator=bob_locator(), bot_fail=["update_spam"])

    with pytest.raises(AdminFlowError, match="failed to update spam"):
        await AdminFlow(context).handle_forwarded(forwarded())

    assert "delete_message" not in recorder.names()
    assert "ban_member" not in recorder.names()


@pytest.mark.asyncio
async def test_forwarded_super_user_is_protected() -> None:
    context, recorder = make_context(locator=bob_locator("admin"), super_users=["admin"])

    with pytest.raises(SuperUserProtected):
        await AdminFlow(context).handle_forwarded(forwarded())

    assert DESTRUCTIVE.isdisjoint(recorder.names())
    assert recorder.calls == []


@pytest.mark.asyncio
async def test_forwarded_unknown_text_aborts_before_mutation() -> None:
    context, recorder = make_context(locator=bob_locator())

    with pytest.raises(CorrelationNotFound):
        await AdminFlow(context).handle_forwarded(forwarded("something else"))

    assert recorder.calls == []


@pytest.mark.asyncio
async def test_regular_admin_message_is_ignored() -> None:
    context, recorder = make_context(locator=bob_locator())

    await AdminFlow(context).handle_forwarded(forwarded(sender=False))

    assert recorder.calls == []


@pytest.mark.asyncio
async def test_forwarded_spam_in_dry_mode_only_reports() -> None:
    context, recorder = make_context(locator=bob_locator(), dry=True)

    await AdminFlow(context).handle_forwarded(forwarded())

    assert recorder.names() == ["remove_approved_user", "on_message", "send_message"]


@pytest.mark.asyncio
async def test_forwarded_spam_in_training_mode_deletes_without_ban() -> None:
    context, recorder = make_context(locator=bob_locator(), training=True)

    await AdminFlow(context).handle_forwarded(forwarded())

    assert recorder.names()[-2:] == ["update_spam", "delete_message"]
    assert "ban_member" not in recorder.names()


@pytest.mark.asyncio
async def test_forwarded_spam_without_checks_says_so() -> None:
    context, recorder = make_context(locator=bob_locator(), checks=[])

    await AdminFlow(context).handle_forwarded(forwarded())

    text = recorder.calls[2][2]
    assert "**can't get spam info**" in text


@pytest.mark.asyncio
async def test_report_ban_sends_markdown_report_with_buttons() -> None:
    context, recorder = make_context()
    message: ChatMessage = make_chat_message("buy\ncheap meds")

    await AdminFlow(context).report_ban(message.sender_label(), message)

    _, chat_id, text, keyboard, markdown = recorder.calls[0]
    assert chat_id == ADMIN_CHAT_ID
    assert text == "**permanently banned [{7 bob Bob B}](tg://user?id=7)**\n\nbuy cheap meds\n\n"
    assert [button.data for button in keyboard[0]] == ["?7:100", "!7:100"]
    assert markdown is True


@pytest.mark.asyncio
async def test_forwarded_spam_detection_notice_escapes_username() -> None:
    context, recorder = make_context(locator=bob_locator("john_doe"))

    await AdminFlow(context).handle_forwarded(forwarded())

    _, _, text, _, markdown = recorder.calls[2]
    assert text.startswith('**original detection results for "john\\_doe" (7)**')
    assert markdown is True
