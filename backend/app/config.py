"""Configuration management for the barter backend."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, str(default))
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name, str(default))
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


@dataclass
class Settings:
    """Application settings."""

    # Supabase
    supabase_url: str = field(default_factory=lambda: os.getenv("SUPABASE_URL", ""))
    supabase_service_key: str = field(
        default_factory=lambda: os.getenv("SUPABASE_SERVICE_KEY", "")
    )
    jwt_secret: str = field(default_factory=lambda: os.getenv("SUPABASE_JWT_SECRET", ""))
    jwt_audience: str = field(
        default_factory=lambda: os.getenv("SUPABASE_JWT_AUDIENCE", "authenticated")
    )

    # Local serving from a CSV export
    snapshot_dir: str = field(default_factory=lambda: os.getenv("SNAPSHOT_DIR", ""))

    # Suggestion search limits
    liker_fan_out_cap: int = field(default_factory=lambda: _int_env("LIKER_FAN_OUT_CAP", 50))
    max_suggestions: int = field(default_factory=lambda: _int_env("MAX_SUGGESTIONS", 200))
    suggestion_workers: int = field(default_factory=lambda: _int_env("SUGGESTION_WORKERS", 8))
    suggestion_timeout_seconds: float = field(
        default_factory=lambda: _float_env("SUGGESTION_TIMEOUT_SECONDS", 10.0)
    )

    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    def __post_init__(self) -> None:
        if self.liker_fan_out_cap < 1:
            raise ValueError("LIKER_FAN_OUT_CAP must be at least 1")
        if self.max_suggestions < 1:
            raise ValueError("MAX_SUGGESTIONS must be at least 1")
        if self.suggestion_workers < 1:
            raise ValueError("SUGGESTION_WORKERS must be at least 1")
        if self.suggestion_timeout_seconds <= 0:
            raise ValueError("SUGGESTION_TIMEOUT_SECONDS must be positive")

    @property
    def supabase_enabled(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_key)
