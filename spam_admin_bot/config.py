from __future__ import annotations

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseModel):
    sqlite_path: str = "spam_admin.db"


class LoggingSettings(BaseModel):
    level: str = Field(default="INFO", description="Logging level: DEBUG, INFO, WARNING, ERROR")
    use_json: bool = Field(default=False, description="Use JSON format instead of colored output")


class BotSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SPAM_ADMIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    telegram_token: str = Field(..., description="Telegram bot token.")
    primary_chat_id: int = Field(..., description="Moderated group chat.")
    admin_chat_id: int = Field(..., description="Private chat receiving reports and forwarded spam.")
    super_users: list[str] = Field(default_factory=list, description="Usernames exempt from moderation.")
    dry: bool = Field(default=False, description="Simulate delete/ban/unban without calling Telegram.")
    training: bool = Field(default=False, description="Report spam without banning until an admin confirms.")
    storage: StorageSettings = StorageSettings()
    logging: LoggingSettings = LoggingSettings()
