"""
Spam admin bot core package.

Handles the admin side of a Telegram anti-spam bot: ban reports with inline
buttons, spam forwarded by admins, and the confirm/unban/info workflow driven
by button presses.
"""

from .services.moderation_service import ModerationCoordinator
from .services.telegram_bot import TelegramAdminApp, telegram_app

__all__ = ["ModerationCoordinator", "TelegramAdminApp", "telegram_app"]
