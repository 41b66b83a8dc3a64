"""Day-of-week, time-of-day and interval helpers shared by the slot engine."""

from datetime import date, datetime

from booking_engine.schemas.entities import DayOfWeek

# date.weekday(): Monday == 0 ... Sunday == 6
_WEEKDAYS: tuple[DayOfWeek, ...] = (
    DayOfWeek.MONDAY,
    DayOfWeek.TUESDAY,
    DayOfWeek.WEDNESDAY,
    DayOfWeek.THURSDAY,
    DayOfWeek.FRIDAY,
    DayOfWeek.SATURDAY,
    DayOfWeek.SUNDAY,
)


def day_of_week(value: date) -> DayOfWeek:
    """Map a calendar day to its ``DayOfWeek``.

    For a ``datetime`` the day is taken in whatever zone the value already
    carries; callers pass a value anchored to the intended calendar day
    (UTC for stored instants).
    """
    return _WEEKDAYS[value.weekday()]


def time_of_day_to_minutes(value: str) -> int:
    """Convert ``"HH:MM"`` to minutes since midnight.

    Examples:
        >>> time_of_day_to_minutes("09:30")
        570
    """
    hours, minutes = value.strip().split(":")
    return int(hours) * 60 + int(minutes)


def intervals_overlap(
    a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime
) -> bool:
    """Strict overlap of half-open intervals. Touching intervals do not overlap."""
    return a_start < b_end and b_start < a_end
