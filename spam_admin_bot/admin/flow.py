from __future__ import annotations

from typing import Optional

import structlog

from ..callbacks.codec import decode
from ..errors import ExtractionNotFound, PartialFailure, TransportError, step_error
from ..models import (
    PERMANENT_BAN_DURATION,
    BanRequest,
    CallbackAction,
    CallbackPayload,
    CallbackPress,
    ChatMessage,
    CheckResult,
    ForwardedReport,
)
from ..punishments.executor import BanExecutor
from .context import AdminContext
from .correlator import MessageCorrelator
from .extract import SPAM_INFO_MARKER, extract_clean, extract_username
from .render import (
    confirmation_keyboard,
    escape_markdown_v1,
    render_annotation,
    render_checks,
    render_detection_results,
    render_report,
    report_keyboard,
    shrink,
    without_info_button,
)

logger = structlog.get_logger(__name__)


class AdminFlow:
    """
    Admin-chat workflow: ban reports, forwarded spam and button presses.

    A reported ban carries two buttons, "change ban" (ask for confirmation)
    and "info". Asking for confirmation swaps them for "unban for real" and
    "keep it banned" ("confirm ban" in training mode); either answer is
    terminal and clears the keyboard. "info" may be pressed while a decision
    is pending and appends the recorded detection results.
    """

    def __init__(self, context: AdminContext) -> None:
        self._ctx = context
        self._correlator = MessageCorrelator(context)
        self._executor = BanExecutor(context)

    @property
    def executor(self) -> BanExecutor:
        return self._executor

    async def report_ban(self, user_label: str, message: ChatMessage) -> None:
        """Send a ban report for ``message`` to the admin chat."""
        text = render_report(user_label, message.user_id, message.text)
        logger.debug(
            "report_ban",
            user_id=message.user_id,
            msg_id=message.message_id,
            admin_chat_id=self._ctx.admin_chat_id,
        )
        try:
            await self._ctx.transport.send_message(
                self._ctx.admin_chat_id,
                text,
                keyboard=report_keyboard(message.user_id, message.message_id),
                markdown=True,
            )
        except TransportError as exc:
            raise TransportError(f"can't send ban report for user {message.user_id}: {exc}") from exc

    async def handle_forwarded(self, report: ForwardedReport) -> None:
        """
        Handle spam forwarded into the admin chat by an admin.

        The forward hides the sender, so the original message is located by
        its text. The user is dropped from the approved list, detection
        results are posted, the text becomes a spam sample, and the original
        message is deleted and its author banned.
        """
        if not report.forward_sender_present:
            return  # regular admin chat message

        logger.debug(
            "forwarded_report",
            msg_id=report.message_id,
            from_username=report.from_username,
            text=shrink(report.text, 50),
        )
        record = await self._correlator.correlate(report.text)
        errors: list[Exception] = []

        try:
            await self._ctx.bot.remove_approved_user(record.user_id)
        except Exception as exc:  # pylint: disable=broad-except
            errors.append(step_error(f"failed to remove user {record.user_id} from approved list", exc))

        checks: list[CheckResult] = []
        try:
            response = await self._ctx.bot.on_message(
                ChatMessage(
                    chat_id=self._ctx.primary_chat_id,
                    message_id=record.msg_id,
                    user_id=record.user_id,
                    username=record.username,
                    text=report.text,
                    timestamp=self._ctx.clock(),
                )
            )
            checks = response.check_results
        except Exception as exc:  # pylint: disable=broad-except
            errors.append(step_error(f"failed to check message from user {record.user_id}", exc))

        try:
            await self._ctx.transport.send_message(
                self._ctx.admin_chat_id,
                render_detection_results(record.username, record.user_id, checks),
                markdown=True,
            )
        except Exception as exc:  # pylint: disable=broad-except
            errors.append(step_error("failed to send spam detection results to admin chat", exc))

        if self._ctx.dry:
            PartialFailure.raise_if_any(errors)
            return

        # samples are the ground truth for training, nothing else runs without them
        try:
            await self._ctx.bot.update_spam(report.text)
        except Exception as exc:
            raise step_error(f"failed to update spam for {shrink(report.text, 50)!r}", exc) from exc

        try:
            await self._executor.delete(self._ctx.primary_chat_id, record.msg_id, dry=self._ctx.dry)
        except Exception as exc:  # pylint: disable=broad-except
            errors.append(step_error(f"failed to delete message {record.msg_id}", exc))

        request = BanRequest(
            user_id=record.user_id,
            chat_id=self._ctx.primary_chat_id,
            duration=PERMANENT_BAN_DURATION,
            dry=self._ctx.dry,
            training=self._ctx.training,
        )
        try:
            await self._executor.ban(request)
        except Exception as exc:  # pylint: disable=broad-except
            errors.append(step_error(f"failed to ban user {record.user_id}", exc))

        PartialFailure.raise_if_any(errors)
        logger.info("forwarded_spam_handled", user_id=record.user_id, username=record.username)

    async def handle_callback(self, press: CallbackPress) -> Optional[CallbackAction]:
        """Dispatch an inline button press. Returns the handled action, None if ignored."""
        if press.message.chat_id != self._ctx.admin_chat_id:
            return None

        payload = decode(press.data)
        match payload.action:
            case CallbackAction.ASK_CONFIRM:
                await self._ask_confirmation(press, payload)
            case CallbackAction.CONFIRM_BAN:
                await self._confirm_ban(press, payload)
            case CallbackAction.SHOW_INFO:
                await self._show_info(press, payload)
            case CallbackAction.UNBAN:
                await self._unban(press, payload)
        logger.info(
            "callback_handled",
            action=payload.action.value,
            user_id=payload.user_id,
            msg_id=payload.msg_id,
            by=press.from_username,
        )
        return payload.action

    async def _ask_confirmation(self, press: CallbackPress, payload: CallbackPayload) -> None:
        message = press.message
        keyboard = confirmation_keyboard(payload.user_id, payload.msg_id, training=self._ctx.training)
        try:
            await self._ctx.transport.edit_message_keyboard(message.chat_id, message.message_id, keyboard)
        except TransportError as exc:
            raise TransportError(
                f"failed to make confirmation, chat_id:{message.chat_id}, msg_id:{message.message_id}: {exc}"
            ) from exc

    async def _confirm_ban(self, press: CallbackPress, payload: CallbackPayload) -> None:
        message = press.message
        elapsed = self._ctx.clock() - message.timestamp
        text = render_annotation(escape_markdown_v1(message.text), "ban confirmed", press.from_username, elapsed)
        try:
            await self._ctx.transport.edit_message_text(
                message.chat_id, message.message_id, text, keyboard=[], markdown=True
            )
        except TransportError as exc:
            raise TransportError(
                f"failed to clear confirmation, chat_id:{message.chat_id}, msg_id:{message.message_id}: {exc}"
            ) from exc

        clean = extract_clean(message.text)
        try:
            await self._ctx.bot.update_spam(clean)
        except Exception as exc:
            raise step_error(f"failed to update spam for {shrink(clean, 50)!r}", exc) from exc

        if self._ctx.training:
            # nothing was banned automatically, do it for real now
            await self._executor.delete_and_ban(payload.user_id, payload.msg_id)

    async def _unban(self, press: CallbackPress, payload: CallbackPayload) -> None:
        message = press.message
        await self._ctx.transport.answer_callback(press.query_id, "accepted")

        clean = extract_clean(message.text)
        try:
            await self._ctx.bot.update_ham(clean)
        except Exception as exc:
            raise step_error(f"failed to update ham for {shrink(clean, 50)!r}", exc) from exc

        # in training mode nobody was banned
        if not self._ctx.training:
            try:
                await self._executor.unban(self._ctx.primary_chat_id, payload.user_id, dry=self._ctx.dry)
            except TransportError as exc:
                raise TransportError(f"failed to unban user {payload.user_id}: {exc}") from exc

        try:
            name = extract_username(message.text)
        except ExtractionNotFound as exc:
            logger.debug("username_not_extracted", user_id=payload.user_id, error=str(exc))
            name = ""
        try:
            await self._ctx.bot.add_approved_user(payload.user_id, name)
        except Exception as exc:
            raise step_error(f"failed to add user {payload.user_id} to approved list", exc) from exc

        elapsed = self._ctx.clock() - message.timestamp
        text = render_annotation(escape_markdown_v1(message.text), "unbanned", press.from_username, elapsed)
        try:
            await self._ctx.transport.edit_message_text(
                message.chat_id, message.message_id, text, keyboard=[], markdown=True
            )
        except TransportError as exc:
            raise TransportError(
                f"failed to edit message, chat_id:{message.chat_id}, msg_id:{message.message_id}: {exc}"
            ) from exc

    async def _show_info(self, press: CallbackPress, payload: CallbackPayload) -> None:
        message = press.message
        record = await self._ctx.locator.spam(payload.user_id)
        checks = record.checks if record else []

        # telegram hands back the text with markdown stripped and escapes undone
        text = f"{escape_markdown_v1(message.text)}\n\n**{SPAM_INFO_MARKER}**\n{render_checks(checks)}"
        keyboard = without_info_button(message.keyboard)
        try:
            await self._ctx.transport.edit_message_text(
                message.chat_id, message.message_id, text, keyboard=keyboard, markdown=True
            )
        except TransportError as exc:
            raise TransportError(
                f"failed to send spam info, chat_id:{message.chat_id}, msg_id:{message.message_id}: {exc}"
            ) from exc
