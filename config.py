"""
Configuration for the board automation engine.

Settings are read from environment variables, falling back to a `.env` file
next to this module and then to defaults suitable for local development.
"""

from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PATH = Path(__file__).resolve().parent / ".env"
load_dotenv(ENV_PATH, override=False)


class Settings(BaseSettings):
    """Engine configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    database_url: str = Field(default="sqlite+pysqlite:///./automation.db", validation_alias="DATABASE_URL")
    # Window used by the due-date scanner for due_soon events
    due_soon_window_hours: float = Field(default=24, validation_alias="AUTOMATION_DUE_SOON_HOURS")
    # set_due_date offset when the action payload has none
    default_due_offset_hours: float = Field(default=24, validation_alias="AUTOMATION_DEFAULT_DUE_OFFSET_HOURS")
    notification_message: str = Field(
        default="Card {card_id} was updated by an automation rule.",
        validation_alias="AUTOMATION_NOTIFICATION_MESSAGE",
    )
    # Acting user for scanner events on cards with no creator
    system_actor_id: str = Field(default="automation", validation_alias="AUTOMATION_SYSTEM_ACTOR_ID")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: str | None = Field(default=None, validation_alias="LOG_FILE")
    sql_echo: bool = Field(default=False, validation_alias="SQL_ECHO")


settings = Settings()
