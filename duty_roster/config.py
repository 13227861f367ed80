"""
Duty Roster: Centralized configuration.

Loads all settings from .env and validates them at import time.
Core modules never import this at module level; callers pass the values
they need (e.g. working days) explicitly.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (two levels up from duty_roster/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # SQLite
    DATABASE_PATH: str = "data/duty_roster.db"

    # Household calendar: 0=Sunday ... 6=Saturday
    WORKING_DAYS: list[int] = [1, 2, 3, 4, 5]

    # Reminders go out this many days before an assignment is due
    REMINDER_DAYS: int = 1

    TIMEZONE: str = "UTC"
    LOG_LEVEL: str = "INFO"

    @field_validator("WORKING_DAYS", mode="before")
    @classmethod
    def parse_working_days(cls, v: str | list[int]) -> list[int]:
        if isinstance(v, list):
            return v
        if isinstance(v, str) and v.strip():
            return [int(day.strip()) for day in v.split(",") if day.strip()]
        return []

    @field_validator("WORKING_DAYS")
    @classmethod
    def check_working_days(cls, v: list[int]) -> list[int]:
        if not v:
            raise ValueError("WORKING_DAYS must name at least one weekday")
        bad = [day for day in v if not 0 <= day <= 6]
        if bad:
            raise ValueError(f"WORKING_DAYS out of range 0-6: {bad}")
        return sorted(set(v))

    @field_validator("REMINDER_DAYS", mode="before")
    @classmethod
    def parse_reminder_days(cls, v: str | int) -> int:
        return int(v)


def _load_settings() -> Settings:
    """Load settings from environment, exiting on invalid values."""
    try:
        return Settings(
            DATABASE_PATH=os.getenv("DATABASE_PATH", "data/duty_roster.db"),
            WORKING_DAYS=os.getenv("WORKING_DAYS", "1,2,3,4,5"),
            REMINDER_DAYS=os.getenv("REMINDER_DAYS", "1"),
            TIMEZONE=os.getenv("TIMEZONE", "UTC"),
            LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
        )
    except ValueError as exc:
        print(f"ERROR: invalid configuration in .env: {exc}", file=sys.stderr)
        sys.exit(1)


# Singleton: imported lazily by callers as:
#   from duty_roster.config import settings
settings = _load_settings()
