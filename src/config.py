"""
Daybook — Centralized configuration.

Loads all settings from .env and validates them.
Every other module imports the singleton: `from src.config import settings`.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (two levels up from src/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Holidays: public holiday API, queried once per displayed year
    HOLIDAY_API_URL: str = "https://date.nager.at/api/v3/PublicHolidays"
    HOLIDAY_COUNTRY_CODE: str = "US"
    HOLIDAY_TIMEOUT_SECONDS: float = 5.0

    # LLM assistant, provider-agnostic (gemini, anthropic, openai)
    LLM_PROVIDER: str = "gemini"
    LLM_MODEL: str = ""          # empty → smart default per provider
    LLM_API_KEY: str = ""        # empty → assistant disabled

    # Polling ticks
    REMINDER_POLL_SECONDS: float = 30.0
    TIMER_TICK_SECONDS: float = 1.0
    BEEP_INTERVAL_SECONDS: float = 1.2

    # SQLite snapshot store
    DATABASE_PATH: str = "data/planner.db"

    # Telegram (optional notification delivery)
    TELEGRAM_BOT_TOKEN: str = ""
    NOTIFY_CHAT_IDS: list[int] = []

    LOG_LEVEL: str = "INFO"

    @field_validator("HOLIDAY_COUNTRY_CODE", mode="before")
    @classmethod
    def upper_country(cls, v: str) -> str:
        return (v or "US").strip().upper()

    @field_validator("LLM_PROVIDER", "LOG_LEVEL", mode="before")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        return (v or "").strip()

    @field_validator("NOTIFY_CHAT_IDS", mode="before")
    @classmethod
    def parse_chat_ids(cls, v: str | list[int]) -> list[int]:
        if isinstance(v, list):
            return v
        if isinstance(v, str) and v.strip():
            return [int(cid.strip()) for cid in v.split(",") if cid.strip()]
        return []

    @property
    def assistant_enabled(self) -> bool:
        return bool(self.LLM_API_KEY) and not self.LLM_API_KEY.startswith("your-")


def _load_settings() -> Settings:
    """Load settings from environment. Invalid values raise at start-up."""
    return Settings(
        HOLIDAY_API_URL=os.getenv("HOLIDAY_API_URL", "https://date.nager.at/api/v3/PublicHolidays"),
        HOLIDAY_COUNTRY_CODE=os.getenv("HOLIDAY_COUNTRY_CODE", "US"),
        HOLIDAY_TIMEOUT_SECONDS=os.getenv("HOLIDAY_TIMEOUT_SECONDS", "5"),
        LLM_PROVIDER=os.getenv("LLM_PROVIDER", "gemini"),
        LLM_MODEL=os.getenv("LLM_MODEL", ""),
        LLM_API_KEY=os.getenv("LLM_API_KEY", ""),
        REMINDER_POLL_SECONDS=os.getenv("REMINDER_POLL_SECONDS", "30"),
        TIMER_TICK_SECONDS=os.getenv("TIMER_TICK_SECONDS", "1"),
        BEEP_INTERVAL_SECONDS=os.getenv("BEEP_INTERVAL_SECONDS", "1.2"),
        DATABASE_PATH=os.getenv("DATABASE_PATH", "data/planner.db"),
        TELEGRAM_BOT_TOKEN=os.getenv("TELEGRAM_BOT_TOKEN", ""),
        NOTIFY_CHAT_IDS=os.getenv("NOTIFY_CHAT_IDS", ""),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
    )


# Singleton, imported by all other modules as:
#   from src.config import settings
settings = _load_settings()
