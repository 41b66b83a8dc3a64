from booking_engine.availability.overlap import has_conflict
from booking_engine.availability.query import get_available_timeslots
from booking_engine.availability.slots import SLOT_STEP_MINUTES, generate_timeslots
from booking_engine.availability.time_utils import (
    day_of_week,
    intervals_overlap,
    time_of_day_to_minutes,
)

__all__ = [
    "SLOT_STEP_MINUTES",
    "day_of_week",
    "generate_timeslots",
    "get_available_timeslots",
    "has_conflict",
    "intervals_overlap",
    "time_of_day_to_minutes",
]
