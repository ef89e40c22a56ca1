from .moderation_service import ModerationCoordinator
from .telegram_bot import TelegramAdminApp, telegram_app

__all__ = ["ModerationCoordinator", "TelegramAdminApp", "telegram_app"]
