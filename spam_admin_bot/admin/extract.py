"""
Recovery of the original message body and user name from admin-chat text.

Admin messages are laid out as::

    permanently banned {6762723796 username Display Name}

    the original message is here
    another line of the original message

    spam detection results
    - check: spam, details

The first line names the user, the second is blank, and the body runs until
the line before the ``spam detection results`` marker (or to the end).
"""

from __future__ import annotations

import re

from ..errors import ExtractionNotFound

SPAM_INFO_MARKER = "spam detection results"

_MARKDOWN_USER = re.compile(r"\[(.*?)\]\(tg://user\?id=\d+\)")
_PLAIN_USER = re.compile(r"\{\d+ (\S+) .+?\}")


def extract_clean(text: str) -> str:
    lines = text.split("\n")
    if len(lines) < 2:
        raise ExtractionNotFound(f"unexpected admin message text: {text!r}")

    body_end = len(lines)
    for idx, line in enumerate(lines):
        if line.startswith(SPAM_INFO_MARKER):
            body_end = idx
            break
    body = lines[2:body_end]
    # blank separator lines in front of the marker are not part of the body
    while body and not body[-1].strip():
        body.pop()
    return "\n".join(body)


def extract_username(text: str) -> str:
    for pattern in (_MARKDOWN_USER, _PLAIN_USER):
        match = pattern.search(text)
        if match:
            return match.group(1)
    raise ExtractionNotFound("username not found")


__all__ = ["SPAM_INFO_MARKER", "extract_clean", "extract_username"]
