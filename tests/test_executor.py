from __future__ import annotations

from datetime import timedelta

import pytest

from spam_admin_bot.errors import PartialFailure, TransportError
from spam_admin_bot.models import PERMANENT_BAN_DURATION, BanRequest, MessageRecord
from spam_admin_bot.punishments.executor import BanExecutor
from tests.factories import NOW, PRIMARY_CHAT_ID, FakeLocator, make_context


@pytest.mark.asyncio
async def test_ban_calls_transport_with_until_date() -> None:
    context, recorder = make_context()

    await BanExecutor(context).ban(BanRequest(user_id=7, chat_id=PRIMARY_CHAT_ID, duration=timedelta(hours=1)))

    assert recorder.calls == [("ban_member", PRIMARY_CHAT_ID, 7, NOW + timedelta(hours=1))]


@pytest.mark.asyncio
async def test_dry_executor_issues_no_transport_calls() -> None:
    context, recorder = make_context(dry=True)
    executor = BanExecutor(context)

    await executor.ban(BanRequest(user_id=7, chat_id=PRIMARY_CHAT_ID, dry=True))
    await executor.delete(PRIMARY_CHAT_ID, 100, dry=True)
    await executor.unban(PRIMARY_CHAT_ID, 7, dry=True)

    assert recorder.calls == []


@pytest.mark.asyncio
async def test_training_request_skips_ban() -> None:
    context, recorder = make_context(training=True)

    await BanExecutor(context).ban(BanRequest(user_id=7, chat_id=PRIMARY_CHAT_ID, training=True))

    assert recorder.calls == []


@pytest.mark.asyncio
async def test_ban_propagates_transport_error() -> None:
    context, _ = make_context(transport_fail=["ban_member"])

    with pytest.raises(TransportError):
        await BanExecutor(context).ban(BanRequest(user_id=7, chat_id=PRIMARY_CHAT_ID))


@pytest.mark.parametrize(("dry", "training"), [(False, False), (True, False), (False, True), (True, True)])
@pytest.mark.asyncio
async def test_delete_and_ban_runs_for_real_regardless_of_modes(dry: bool, training: bool) -> None:
    context, recorder = make_context(dry=dry, training=training)

    await BanExecutor(context).delete_and_ban(7, 100)

    assert recorder.calls == [
        ("ban_member", PRIMARY_CHAT_ID, 7, NOW + PERMANENT_BAN_DURATION),
        ("delete_message", PRIMARY_CHAT_ID, 100),
    ]


@pytest.mark.asyncio
async def test_delete_and_ban_spares_super_user_but_deletes() -> None:
    locator = FakeLocator({"hi": MessageRecord(user_id=7, username="admin", msg_id=100, text="hi")})
    context, recorder = make_context(locator=locator, super_users=["admin"])

    await BanExecutor(context).delete_and_ban(7, 100)

    assert recorder.names() == ["delete_message"]


@pytest.mark.asyncio
async def test_delete_and_ban_attempts_delete_after_ban_failure() -> None:
    context, recorder = make_context(transport_fail=["ban_member", "delete_message"])

    with pytest.raises(PartialFailure) as exc_info:
        await BanExecutor(context).delete_and_ban(7, 100)

    assert recorder.names() == ["ban_member", "delete_message"]
    errors = exc_info.value.errors
    assert len(errors) == 2
    assert "failed to ban user 7" in str(errors[0])
    assert "failed to delete message 100" in str(errors[1])
    assert isinstance(errors[0].__cause__, TransportError)
