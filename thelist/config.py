"""Application configuration loaded from environment variables."""

import os
from dataclasses import dataclass
from typing import Literal

from dotenv import load_dotenv

load_dotenv()


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


@dataclass(frozen=True)
class Config:
    """Application configuration."""

    # Bot settings
    bot_token: str
    bot_mode: Literal["webhook", "polling"]
    webhook_url: str | None
    webhook_path: str
    host: str
    port: int
    database_url: str
    admin_token: str | None
    log_level: str

    # Wheel settings
    wheel_spin_duration_ms: int
    wheel_min_ticks: int
    wheel_audio_lead_in_ms: int
    wheel_audio_trigger_fraction: float
    wheel_edit_interval_ms: int
    wheel_cue_audio: str | None

    # Caching
    snapshot_cache_ttl_seconds: int
    cache_prune_interval_minutes: int

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        bot_token = os.getenv("BOT_TOKEN")
        if not bot_token:
            raise ConfigurationError("BOT_TOKEN environment variable is required")

        bot_mode = os.getenv("BOT_MODE", "polling").lower()
        if bot_mode not in ("webhook", "polling"):
            raise ConfigurationError("BOT_MODE must be 'webhook' or 'polling'")

        webhook_url = os.getenv("WEBHOOK_URL")
        webhook_path = os.getenv("WEBHOOK_PATH", "/telegram/webhook")

        if bot_mode == "webhook" and not webhook_url:
            raise ConfigurationError("WEBHOOK_URL is required when BOT_MODE=webhook")

        host = os.getenv("HOST", "0.0.0.0")
        port_str = os.getenv("PORT", "8000")
        try:
            port = int(port_str)
        except ValueError:
            raise ConfigurationError(f"PORT must be an integer, got: {port_str}")

        database_url = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./thelist.db")
        admin_token = os.getenv("ADMIN_TOKEN") or None
        log_level = os.getenv("LOG_LEVEL", "INFO").upper()

        # Wheel settings
        wheel_spin_duration_ms = _int_env("WHEEL_SPIN_DURATION_MS", 20000)
        if wheel_spin_duration_ms < 0:
            raise ConfigurationError("WHEEL_SPIN_DURATION_MS must not be negative")

        wheel_min_ticks = max(_int_env("WHEEL_MIN_TICKS", 28), 1)
        wheel_audio_lead_in_ms = max(_int_env("WHEEL_AUDIO_LEAD_IN_MS", 150), 0)

        wheel_audio_trigger_fraction = _float_env("WHEEL_AUDIO_TRIGGER_FRACTION", 0.12)
        if not 0.0 <= wheel_audio_trigger_fraction <= 1.0:
            wheel_audio_trigger_fraction = 0.12

        wheel_edit_interval_ms = max(_int_env("WHEEL_EDIT_INTERVAL_MS", 800), 0)
        wheel_cue_audio = os.getenv("WHEEL_CUE_AUDIO") or None

        # Caching
        snapshot_cache_ttl_seconds = _int_env("SNAPSHOT_CACHE_TTL_SECONDS", 300)
        cache_prune_interval_minutes = _int_env("CACHE_PRUNE_INTERVAL_MINUTES", 10)

        return cls(
            bot_token=bot_token,
            bot_mode=bot_mode,  # type: ignore[arg-type]
            webhook_url=webhook_url,
            webhook_path=webhook_path,
            host=host,
            port=port,
            database_url=database_url,
            admin_token=admin_token,
            log_level=log_level,
            wheel_spin_duration_ms=wheel_spin_duration_ms,
            wheel_min_ticks=wheel_min_ticks,
            wheel_audio_lead_in_ms=wheel_audio_lead_in_ms,
            wheel_audio_trigger_fraction=wheel_audio_trigger_fraction,
            wheel_edit_interval_ms=wheel_edit_interval_ms,
            wheel_cue_audio=wheel_cue_audio,
            snapshot_cache_ttl_seconds=snapshot_cache_ttl_seconds,
            cache_prune_interval_minutes=cache_prune_interval_minutes,
        )


config = Config.from_env()
