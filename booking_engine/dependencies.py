"""Explicit collaborators handed to every booking and availability operation."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

from booking_engine.background import BackgroundTasks
from booking_engine.config import BookingConfig, settings
from booking_engine.repositories.base import BookingRepositories


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Dependencies:
    """Repositories plus the clock, background runner and booking rules in effect."""

    repositories: BookingRepositories
    clock: Callable[[], datetime] = utc_now
    background: BackgroundTasks = field(default_factory=BackgroundTasks)
    config: BookingConfig = field(default_factory=lambda: settings.booking)
