from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

RESET = "\033[0m"
BOLD = "\033[1m"
DIM = "\033[2m"
GRAY = "\033[90m"
EVENT = "\033[96m"
KEY = "\033[94m"
NUMBER = "\033[93m"
STRING = "\033[92m"

LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}


def _colorize(value: Any) -> str:
    if isinstance(value, (bool, int, float)):
        return f"{NUMBER}{value}{RESET}"
    if isinstance(value, str):
        return f"{STRING}{value}{RESET}"
    if value is None:
        return f"{DIM}None{RESET}"
    return str(value)


class ColoredConsoleRenderer:
    """Renders ``[time] LEVEL event | key=value`` lines, JSON when not on a tty."""

    def __init__(self, colored: bool = True) -> None:
        self.colored = colored and sys.stdout.isatty()
        self._json = structlog.processors.JSONRenderer()

    def __call__(self, logger: Any, name: str, event_dict: dict) -> str:
        if not self.colored:
            return self._json(logger, name, event_dict)

        timestamp = event_dict.pop("timestamp", "")
        level = event_dict.pop("level", "info").upper()
        event = event_dict.pop("event", "")

        parts = []
        if timestamp:
            parts.append(f"{GRAY}[{timestamp}]{RESET}")
        parts.append(f"{LEVEL_COLORS.get(level, LEVEL_COLORS['INFO'])}{BOLD}{level:8}{RESET}")
        parts.append(f"{EVENT}{event}{RESET}")
        if event_dict:
            pairs = [f"{KEY}{key}{RESET}={_colorize(value)}" for key, value in event_dict.items()]
            parts.append(f"{DIM}|{RESET} " + f" {DIM}|{RESET} ".join(pairs))
        return " ".join(parts)


def setup_logging(level: int = logging.INFO, use_json: bool = False) -> None:
    """
    Configure structlog and the stdlib root logger used by aiogram.

    Args:
        level: Logging level (default: INFO)
        use_json: Render JSON lines instead of colored console output
    """
    renderer = structlog.processors.JSONRenderer() if use_json else ColoredConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S", utc=False),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(asctime)s] %(levelname)-8s %(name)s %(message)s", "%H:%M:%S"))
    logging.basicConfig(level=level, handlers=[handler], force=True)

    # aiogram logs every handled update at INFO
    logging.getLogger("aiogram.event").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
