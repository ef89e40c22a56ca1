from __future__ import annotations

from datetime import timedelta

from spam_admin_bot.admin.render import (
    NO_SPAM_INFO,
    confirmation_keyboard,
    escape_markdown_v1,
    format_elapsed,
    italic,
    render_annotation,
    render_checks,
    render_report,
    report_keyboard,
    without_info_button,
)
from spam_admin_bot.models import CheckResult, InlineButton


def test_format_elapsed_rounds_to_seconds() -> None:
    assert format_elapsed(timedelta(hours=1, minutes=2, seconds=3, milliseconds=600)) == "1h 2m 4s"
    assert format_elapsed(timedelta(milliseconds=200)) == "0s"
    assert format_elapsed(timedelta(seconds=-5)) == "0s"


def test_escape_markdown_v1() -> None:
    assert escape_markdown_v1("a_b*c`d[e]") == "a\\_b\\*c\\`d\\[e]"


def test_render_report_keeps_header_blank_body_layout() -> None:
    text = render_report("{7 bob Bob}", 7, "line one\nline_two")
    lines = text.split("\n")

    assert lines[0] == "**permanently banned [{7 bob Bob}](tg://user?id=7)**"
    assert lines[1] == ""
    assert lines[2] == "line one line\\_two"


def test_render_checks_falls_back_when_empty() -> None:
    assert render_checks([]) == NO_SPAM_INFO
    assert render_checks([CheckResult("stopword", True, "cheap")]) == "- stopword: spam, cheap"


def test_report_keyboard_has_confirm_and_info_buttons() -> None:
    keyboard = report_keyboard(7, 100)

    assert [[button.data for button in row] for row in keyboard] == [["?7:100", "!7:100"]]


def test_confirmation_keyboard_labels_depend_on_training() -> None:
    regular = confirmation_keyboard(7, 100, training=False)
    training = confirmation_keyboard(7, 100, training=True)

    assert regular[0][0] == InlineButton("Unban for real", "7:100")
    assert regular[0][1] == InlineButton("Keep it banned", "+7:100")
    assert training[0][1] == InlineButton("Confirm ban", "+7:100")


def test_without_info_button_keeps_first_button_only() -> None:
    keyboard = [[InlineButton("a", "?1:2"), InlineButton("b", "!1:2")]]

    trimmed = without_info_button(keyboard)

    assert trimmed == [[InlineButton("a", "?1:2")]]
    assert len(keyboard[0]) == 2  # input untouched
    assert without_info_button([]) == []


def test_annotation_closes_italic_around_special_chars() -> None:
    text = render_annotation("body", "unbanned", "mod_one", timedelta(seconds=3))

    assert text == "body\n\n_unbanned by mod_\\__one in 3s_"
    assert italic("plain") == "_plain_"
