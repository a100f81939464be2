"""Configuration utilities for the SlotSync service."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator


def _env_flag(name: str, default: bool) -> bool:
    """Return a boolean flag derived from environment variables."""

    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_optional_int(name: str) -> int | None:
    """Return an integer from the environment, or ``None`` when unset or blank."""

    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return int(raw.strip())


BASE_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = BASE_DIR.parent
DEFAULT_TRACE_DIR = BASE_DIR / "logs" / "realign"


def _load_environment() -> None:
    """Load environment variables from a ``.env`` file if present."""

    explicit_path = os.getenv("SLOTSYNC_ENV_FILE")
    candidates = []

    if explicit_path:
        candidates.append(Path(explicit_path))

    candidates.append(PROJECT_ROOT / ".env")

    for candidate in candidates:
        try_path = candidate.expanduser()
        if try_path.exists():
            load_dotenv(try_path, override=False)


_load_environment()


class Settings(BaseModel):
    """Application configuration loaded from environment variables."""

    host: str = Field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = Field(default_factory=lambda: int(os.getenv("PORT", "8000")))
    log_level: str = Field(
        default_factory=lambda: os.getenv("LOG_LEVEL", "info"), validate_default=True
    )
    realign_validate_inputs: bool = Field(
        default_factory=lambda: _env_flag("REALIGN_VALIDATE_INPUTS", True)
    )
    realign_max_edits: int | None = Field(
        default_factory=lambda: _env_optional_int("REALIGN_MAX_EDITS"),
        validate_default=True,
    )
    realign_trace: bool = Field(
        default_factory=lambda: _env_flag("REALIGN_TRACE", False)
    )
    realign_trace_dir: Path = Field(
        default_factory=lambda: Path(
            os.getenv("REALIGN_TRACE_DIR", str(DEFAULT_TRACE_DIR))
        ),
        validate_default=True,
    )

    @field_validator("realign_max_edits", mode="after")
    @classmethod
    def _clamp_max_edits(cls, value: int | None) -> int | None:
        if value is None:
            return None
        return max(1, value)

    @field_validator("realign_trace_dir", mode="after")
    @classmethod
    def _ensure_trace_dir(cls, value: Path) -> Path:
        value.mkdir(parents=True, exist_ok=True)
        return value

    @field_validator("log_level", mode="after")
    @classmethod
    def _normalise_log_level(cls, value: str) -> str:
        return value.strip().lower() or "info"


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the cached settings so that subsequent calls reload from the environment."""

    get_settings.cache_clear()
