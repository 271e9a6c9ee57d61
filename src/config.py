"""
Agenda Assistant — Centralized configuration.

Loads all settings from .env and validates required keys.
This module is the foundation for every other module in the project.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (two levels up from src/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Telegram
    TELEGRAM_BOT_TOKEN: str

    # LLM — provider-agnostic (gemini, anthropic, openai, cohere)
    LLM_PROVIDER: str = "gemini"
    LLM_MODEL: str = ""          # empty → smart default per provider
    LLM_API_KEY: str

    # Audio — OpenAI Whisper (transcription only)
    OPENAI_API_KEY: str = ""
    TRANSCRIPTION_LANGUAGE: str = ""   # empty → let Whisper detect

    # SQLite: one JSON state blob per user
    DATABASE_PATH: str = "data/planner.db"

    # Security
    ALLOWED_USER_IDS: list[int] = []

    # Used for "today" in the assistant prompt and for defaulted dates
    TIMEZONE: str = "UTC"

    # Assistant limits
    ASSISTANT_MAX_TOKENS: int = 2048
    MAX_DOCUMENT_CHARS: int = 20000

    @field_validator("ALLOWED_USER_IDS", mode="before")
    @classmethod
    def parse_user_ids(cls, v: str | list[int]) -> list[int]:
        if isinstance(v, list):
            return v
        if isinstance(v, str) and v.strip():
            return [int(uid.strip()) for uid in v.split(",") if uid.strip()]
        return []

    @field_validator("ASSISTANT_MAX_TOKENS", "MAX_DOCUMENT_CHARS", mode="before")
    @classmethod
    def parse_positive_int(cls, v: str | int) -> int:
        value = int(v)
        if value <= 0:
            raise ValueError("must be a positive integer")
        return value


def _load_settings() -> Settings:
    """Load settings from environment, validating required keys."""
    token = os.getenv("TELEGRAM_BOT_TOKEN", "")
    llm_api_key = os.getenv("LLM_API_KEY", "")

    if not token or token.startswith("your-"):
        print("ERROR: TELEGRAM_BOT_TOKEN is missing or not set in .env", file=sys.stderr)
        sys.exit(1)

    if not llm_api_key or llm_api_key.startswith("your-"):
        print("ERROR: LLM_API_KEY is missing or not set in .env", file=sys.stderr)
        sys.exit(1)

    return Settings(
        TELEGRAM_BOT_TOKEN=token,
        LLM_PROVIDER=os.getenv("LLM_PROVIDER", "gemini"),
        LLM_MODEL=os.getenv("LLM_MODEL", ""),
        LLM_API_KEY=llm_api_key,
        OPENAI_API_KEY=os.getenv("OPENAI_API_KEY", ""),
        TRANSCRIPTION_LANGUAGE=os.getenv("TRANSCRIPTION_LANGUAGE", ""),
        DATABASE_PATH=os.getenv("DATABASE_PATH", "data/planner.db"),
        ALLOWED_USER_IDS=os.getenv("ALLOWED_USER_IDS", ""),
        TIMEZONE=os.getenv("TIMEZONE", "UTC"),
        ASSISTANT_MAX_TOKENS=os.getenv("ASSISTANT_MAX_TOKENS", "2048"),
        MAX_DOCUMENT_CHARS=os.getenv("MAX_DOCUMENT_CHARS", "20000"),
    )


# Singleton — imported by all other modules as:
#   from src.config import settings
settings = _load_settings()
