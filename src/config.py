"""
Plants Care Bot — Centralized configuration.

Loads all settings from .env and validates required keys.
This module is the foundation for every other module in the project.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (two levels up from src/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Telegram
    TELEGRAM_BOT_TOKEN: str
    BOT_POLL_TIMEOUT: int = 10

    # SQLite
    DATABASE_PATH: str = "data/plants.db"
    DATABASE_TIMEOUT: float = 30.0

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE_PATH: str = ""

    # Notifications scheduler
    SCHEDULER_INTERVAL: int = 60
    SCHEDULER_LIMIT: int = 10
    SCHEDULER_OFFSET: int = 0
    SCHEDULER_SEND_HOUR: int = 12
    SCHEDULER_DISPATCH_TIMEOUT: float = 30.0

    # Intent processing
    INTENT_TIMEOUT: float = 30.0
    SHUTDOWN_TIMEOUT: float = 10.0

    TIMEZONE: str = "Europe/Moscow"

    # Per-user limits
    GROUPS_PER_USER_LIMIT: int = 10
    PLANTS_PER_GROUP_LIMIT: int = 50

    # Screen images
    ASSETS_DIR: str = "assets"

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def parse_log_level(cls, v: str) -> str:
        level = (v or "INFO").strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("SCHEDULER_SEND_HOUR", mode="before")
    @classmethod
    def parse_hour(cls, v: str | int) -> int:
        hour = int(v)
        if not 0 <= hour <= 23:
            raise ValueError(f"SCHEDULER_SEND_HOUR must be within 0..23, got {hour}")
        return hour

    @field_validator(
        "SCHEDULER_INTERVAL", "SCHEDULER_LIMIT", "GROUPS_PER_USER_LIMIT", "PLANTS_PER_GROUP_LIMIT",
        mode="before",
    )
    @classmethod
    def parse_positive(cls, v: str | int) -> int:
        value = int(v)
        if value <= 0:
            raise ValueError(f"Expected a positive integer, got {value}")
        return value


def _load_settings() -> Settings:
    """Load settings from environment, validating required keys."""
    token = os.getenv("TELEGRAM_BOT_TOKEN", "")

    if not token or token.startswith("your-"):
        print("ERROR: TELEGRAM_BOT_TOKEN is missing or not set in .env", file=sys.stderr)
        sys.exit(1)

    return Settings(
        TELEGRAM_BOT_TOKEN=token,
        BOT_POLL_TIMEOUT=os.getenv("BOT_POLL_TIMEOUT", "10"),
        DATABASE_PATH=os.getenv("DATABASE_PATH", "data/plants.db"),
        DATABASE_TIMEOUT=os.getenv("DATABASE_TIMEOUT", "30"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
        LOG_FILE_PATH=os.getenv("LOG_FILE_PATH", ""),
        SCHEDULER_INTERVAL=os.getenv("SCHEDULER_INTERVAL", "60"),
        SCHEDULER_LIMIT=os.getenv("SCHEDULER_LIMIT", "10"),
        SCHEDULER_OFFSET=os.getenv("SCHEDULER_OFFSET", "0"),
        SCHEDULER_SEND_HOUR=os.getenv("SCHEDULER_SEND_HOUR", "12"),
        SCHEDULER_DISPATCH_TIMEOUT=os.getenv("SCHEDULER_DISPATCH_TIMEOUT", "30"),
        INTENT_TIMEOUT=os.getenv("INTENT_TIMEOUT", "30"),
        SHUTDOWN_TIMEOUT=os.getenv("SHUTDOWN_TIMEOUT", "10"),
        TIMEZONE=os.getenv("TIMEZONE", "Europe/Moscow"),
        GROUPS_PER_USER_LIMIT=os.getenv("GROUPS_PER_USER_LIMIT", "10"),
        PLANTS_PER_GROUP_LIMIT=os.getenv("PLANTS_PER_GROUP_LIMIT", "50"),
        ASSETS_DIR=os.getenv("ASSETS_DIR", "assets"),
    )


def configure_logging(level: str = "INFO", log_file: str = "") -> None:
    """Configure root logging: stderr always, plus a file when a path is set."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)
    # python-telegram-bot logs every poll request through httpx
    logging.getLogger("httpx").setLevel(logging.WARNING)


# Singleton — imported by all other modules as:
#   from src.config import settings
settings = _load_settings()
