#!/usr/bin/env python3
"""
Entry point for running the spam admin bot with logging enabled.

Usage:
    python run_bot.py

Environment:
    - SPAM_ADMIN_TELEGRAM_TOKEN
    - SPAM_ADMIN_PRIMARY_CHAT_ID
    - SPAM_ADMIN_ADMIN_CHAT_ID
    - SPAM_ADMIN_SUPER_USERS (JSON list, optional)
    - SPAM_ADMIN_DRY / SPAM_ADMIN_TRAINING (optional)

The script loads configuration via BotSettings (reads .env by default) and starts
the TelegramAdminApp with graceful shutdown on Ctrl+C.
"""

import asyncio

import structlog

from spam_admin_bot import TelegramAdminApp
from spam_admin_bot.config import BotSettings

logger = structlog.get_logger("run_bot")


async def _main() -> None:
    settings = BotSettings()
    app = TelegramAdminApp(settings)
    await app.run()


if __name__ == "__main__":
    try:
        asyncio.run(_main())
    except KeyboardInterrupt:
        logger.info("shutdown_requested")
