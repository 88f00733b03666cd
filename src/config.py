"""
PSS — Centralized configuration.

Loads all settings from .env and validates them.
Imported by the entry point, the console menu and the file writer.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (one level up from src/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Schedule file loaded at start-up (empty → start with an empty schedule)
    SCHEDULE_FILE: str = ""

    # Logging
    LOG_LEVEL: str = "WARNING"

    # Console menu
    MENU_ESCAPE: str = "quit"

    # Indentation of written schedule files
    JSON_INDENT: int = 4

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def parse_log_level(cls, v: str) -> str:
        level = str(v).strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}")
        return level

    @field_validator("JSON_INDENT", mode="before")
    @classmethod
    def parse_indent(cls, v: str | int) -> int:
        return int(v)

    @property
    def log_level(self) -> int:
        return getattr(logging, self.LOG_LEVEL)


def _load_settings() -> Settings:
    """Load settings from environment, exiting on invalid values."""
    menu_escape = os.getenv("MENU_ESCAPE", "quit")

    if not menu_escape.strip() or menu_escape.strip().isdigit():
        print("ERROR: MENU_ESCAPE must be a non-numeric string", file=sys.stderr)
        sys.exit(1)

    try:
        return Settings(
            SCHEDULE_FILE=os.getenv("SCHEDULE_FILE", ""),
            LOG_LEVEL=os.getenv("LOG_LEVEL", "WARNING"),
            MENU_ESCAPE=menu_escape.strip(),
            JSON_INDENT=os.getenv("JSON_INDENT", "4"),
        )
    except ValueError as exc:
        print(f"ERROR: invalid setting in .env: {exc}", file=sys.stderr)
        sys.exit(1)


# Singleton — imported by all other modules as:
#   from src.config import settings
settings = _load_settings()
