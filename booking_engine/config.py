"""
Centralized configuration with environment variable overrides.

Booking rules that operators may tune (slot-match tolerance, past-slot
suppression, default appointment description) live here. The slot
granularity is not configurable; see ``availability.slots``.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_bool(env_var: str, default: str) -> bool:
    """Parse a boolean flag from an env var (true/false, yes/no, 1/0, on/off)."""
    raw = os.getenv(env_var, default)
    normalized = str(raw).strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean for {env_var}: {raw!r}")


@dataclass(frozen=True)
class BookingConfig:
    """Booking and availability rules."""

    slot_match_tolerance_seconds: int = _safe_int("SLOT_MATCH_TOLERANCE_SECONDS", "60")
    hide_past_slots: bool = _safe_bool("HIDE_PAST_SLOTS", "true")
    default_description_template: str = os.getenv(
        "DEFAULT_DESCRIPTION_TEMPLATE", "Appointment for {service_name}"
    )


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    booking: BookingConfig = field(default_factory=BookingConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    app_name: str = os.getenv("APP_NAME", "booking-engine")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.booking.slot_match_tolerance_seconds < 0:
        raise ValueError(
            "SLOT_MATCH_TOLERANCE_SECONDS must be >= 0, "
            f"got {config.booking.slot_match_tolerance_seconds}"
        )
    if "{service_name}" not in config.booking.default_description_template:
        raise ValueError(
            "DEFAULT_DESCRIPTION_TEMPLATE must contain '{service_name}', "
            f"got {config.booking.default_description_template!r}"
        )
    if not hasattr(logging, config.log_level.upper()):
        raise ValueError(f"LOG_LEVEL is not a logging level: {config.log_level!r}")


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Configuration loaded for '%s'", config.app_name)
    return config


# Singleton instance
settings = load_config()
