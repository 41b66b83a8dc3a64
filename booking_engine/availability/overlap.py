"""
Conflict detection between a candidate interval and an owner's existing commitments.

An appointment occupies ``[start, start + duration + buffer)``: the buffer
only trails the appointment, nothing is reserved before it starts.
Time-offs block exactly ``[start_at, end_at)`` with no buffer. Cancelled
appointments never conflict.
"""

from datetime import datetime, timedelta
from typing import Iterable

from booking_engine.availability.time_utils import intervals_overlap
from booking_engine.schemas.entities import Appointment, TimeOff


def _appointment_window(appointment: Appointment, buffer_minutes: int) -> tuple[datetime, datetime]:
    start = appointment.start_time
    return start, start + timedelta(minutes=appointment.duration + buffer_minutes)


def conflicting_appointments(
    start: datetime,
    end: datetime,
    appointments: Iterable[Appointment],
    buffer_minutes: int = 0,
) -> list[Appointment]:
    """Return the non-cancelled appointments whose buffered window overlaps ``[start, end)``."""
    conflicts = []
    for appointment in appointments:
        if appointment.is_cancelled:
            continue
        appt_start, appt_end = _appointment_window(appointment, buffer_minutes)
        if intervals_overlap(start, end, appt_start, appt_end):
            conflicts.append(appointment)
    return conflicts


def conflicting_time_offs(
    start: datetime, end: datetime, time_offs: Iterable[TimeOff]
) -> list[TimeOff]:
    """Return the time-offs overlapping ``[start, end)``."""
    return [
        time_off for time_off in time_offs
        if intervals_overlap(start, end, time_off.start_at, time_off.end_at)
    ]


def has_conflict(
    start: datetime,
    end: datetime,
    appointments: Iterable[Appointment],
    time_offs: Iterable[TimeOff],
    buffer_minutes: int = 0,
) -> bool:
    """Check whether ``[start, end)`` collides with any appointment or time-off.

    Args:
        start: candidate start instant
        end: candidate end instant
        appointments: existing appointments on the calendar (any status)
        time_offs: the owner's time-off periods
        buffer_minutes: gap enforced after every appointment

    Returns:
        True on the first conflict found.
    """
    for appointment in appointments:
        if appointment.is_cancelled:
            continue
        appt_start, appt_end = _appointment_window(appointment, buffer_minutes)
        if intervals_overlap(start, end, appt_start, appt_end):
            return True

    return any(
        intervals_overlap(start, end, time_off.start_at, time_off.end_at)
        for time_off in time_offs
    )
