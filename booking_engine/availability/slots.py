"""
Timeslot generation for a single calendar day.

Candidate starts step through each working-hours block every
``SLOT_STEP_MINUTES``; a candidate is kept when the whole service fits in
the block and the overlap detector finds no conflict. Blocks are walked in
the order the calendar stores them and are neither sorted nor merged.

The generator is pure: identical inputs always give identical output.
"""

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, Optional

from booking_engine.availability.overlap import has_conflict
from booking_engine.availability.time_utils import day_of_week, time_of_day_to_minutes
from booking_engine.schemas.booking_schema import Timeslot
from booking_engine.schemas.entities import Appointment, Calendar, TimeOff

logger = logging.getLogger(__name__)

SLOT_STEP_MINUTES = 15


def _anchor(day: date, minutes: int) -> datetime:
    """Instant at ``minutes`` past midnight UTC on ``day``."""
    return datetime.combine(day, time(minutes // 60, minutes % 60), tzinfo=timezone.utc)


def generate_timeslots(
    day: date,
    calendar: Calendar,
    service_duration: int,
    existing_appointments: Iterable[Appointment],
    time_offs: Iterable[TimeOff],
    not_before: Optional[datetime] = None,
) -> list[Timeslot]:
    """
    Enumerate bookable slots of ``service_duration`` minutes on ``day``.

    Args:
        day: calendar day to generate for; a datetime is reduced to its date
        calendar: supplies working hours and buffer time
        service_duration: slot length in minutes
        existing_appointments: appointments on the calendar
        time_offs: the calendar owner's time-offs
        not_before: when given, candidates starting before this instant are dropped

    Returns:
        list[Timeslot]: ordered by block, then chronologically within each block.
        Empty when the day has no working hours.
    """
    if isinstance(day, datetime):
        day = day.date()

    blocks = calendar.blocks_for(day_of_week(day))
    if not blocks:
        logger.debug("No working hours on %s for calendar %s", day.isoformat(), calendar.id)
        return []

    appointments = list(existing_appointments)
    offs = list(time_offs)
    duration = timedelta(minutes=service_duration)
    slots: list[Timeslot] = []

    for block in blocks:
        block_start = time_of_day_to_minutes(block.start)
        block_end = time_of_day_to_minutes(block.end)

        cursor = block_start
        while cursor + service_duration <= block_end:
            slot_start = _anchor(day, cursor)
            slot_end = slot_start + duration
            cursor += SLOT_STEP_MINUTES

            if not_before is not None and slot_start < not_before:
                continue
            if has_conflict(slot_start, slot_end, appointments, offs, calendar.buffer_time):
                continue
            slots.append(Timeslot(start=slot_start, end=slot_end))

    logger.debug(
        "Generated %d slot(s) on %s for calendar %s (duration=%d, buffer=%d)",
        len(slots), day.isoformat(), calendar.id, service_duration, calendar.buffer_time,
    )
    return slots
