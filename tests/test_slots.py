"""Tests for the timeslot generator."""

from datetime import timedelta

from booking_engine.availability.overlap import has_conflict
from booking_engine.availability.slots import SLOT_STEP_MINUTES, generate_timeslots
from booking_engine.availability.time_utils import time_of_day_to_minutes
from booking_engine.schemas.entities import AppointmentStatus

from tests.conftest import (
    MONDAY,
    SUNDAY,
    at,
    make_appointment,
    make_calendar,
    make_time_off,
)


def _starts(slots):
    return [(s.start.hour, s.start.minute) for s in slots]


class TestEmptyCalendar:
    def setup_method(self):
        self.calendar = make_calendar()

    def test_full_morning_of_thirty_minute_slots(self):
        slots = generate_timeslots(MONDAY, self.calendar, 30, [], [])
        assert len(slots) == 11
        assert _starts(slots)[0] == (9, 0)
        assert _starts(slots)[-1] == (11, 30)

    def test_slots_step_on_fifteen_minute_grid(self):
        slots = generate_timeslots(MONDAY, self.calendar, 30, [], [])
        for previous, current in zip(slots, slots[1:]):
            assert current.start - previous.start == timedelta(minutes=SLOT_STEP_MINUTES)

    def test_every_slot_spans_the_service_duration(self):
        slots = generate_timeslots(MONDAY, self.calendar, 45, [], [])
        assert slots
        assert all(s.end - s.start == timedelta(minutes=45) for s in slots)

    def test_slots_stay_inside_working_hours(self):
        slots = generate_timeslots(MONDAY, self.calendar, 45, [], [])
        assert all(s.start >= at(9) and s.end <= at(12) for s in slots)

    def test_slot_may_end_exactly_at_block_end(self):
        calendar = make_calendar(working_hours={"monday": [{"start": "09:00", "end": "10:00"}]})
        slots = generate_timeslots(MONDAY, calendar, 45, [], [])
        assert _starts(slots) == [(9, 0), (9, 15)]

    def test_duration_equal_to_block(self):
        calendar = make_calendar(working_hours={"monday": [{"start": "09:00", "end": "10:00"}]})
        slots = generate_timeslots(MONDAY, calendar, 60, [], [])
        assert _starts(slots) == [(9, 0)]

    def test_duration_longer_than_block(self):
        calendar = make_calendar(working_hours={"monday": [{"start": "09:00", "end": "10:00"}]})
        assert generate_timeslots(MONDAY, calendar, 90, [], []) == []

    def test_closed_day_has_no_slots(self):
        assert generate_timeslots(SUNDAY, self.calendar, 30, [], []) == []

    def test_empty_block_list_counts_as_closed(self):
        calendar = make_calendar(working_hours={"monday": []})
        assert generate_timeslots(MONDAY, calendar, 30, [], []) == []

    def test_slots_are_utc(self):
        slots = generate_timeslots(MONDAY, self.calendar, 30, [], [])
        assert slots[0].start == at(9)
        assert slots[0].start.utcoffset() == timedelta(0)

    def test_datetime_day_is_reduced_to_date(self):
        from_date = generate_timeslots(MONDAY, self.calendar, 30, [], [])
        from_datetime = generate_timeslots(at(23, 15), self.calendar, 30, [], [])
        assert from_date == from_datetime


class TestBlocks:
    def test_blocks_are_walked_in_stored_order(self):
        calendar = make_calendar(
            working_hours={
                "monday": [
                    {"start": "14:00", "end": "15:00"},
                    {"start": "09:00", "end": "10:00"},
                ]
            }
        )
        slots = generate_timeslots(MONDAY, calendar, 60, [], [])
        assert _starts(slots) == [(14, 0), (9, 0)]

    def test_split_day_skips_the_gap(self):
        calendar = make_calendar(
            working_hours={
                "monday": [
                    {"start": "09:00", "end": "10:00"},
                    {"start": "11:00", "end": "12:00"},
                ]
            }
        )
        slots = generate_timeslots(MONDAY, calendar, 30, [], [])
        assert _starts(slots) == [(9, 0), (9, 15), (9, 30), (11, 0), (11, 15), (11, 30)]


class TestCommitments:
    def test_appointment_and_buffer_remove_slots(self):
        calendar = make_calendar(buffer_time=15)
        appointments = [make_appointment(at(10), duration=30)]
        slots = generate_timeslots(MONDAY, calendar, 30, appointments, [])
        assert _starts(slots) == [
            (9, 0), (9, 15), (9, 30), (10, 45), (11, 0), (11, 15), (11, 30),
        ]

    def test_slot_right_after_buffer_is_allowed(self):
        calendar = make_calendar(
            working_hours={"monday": [{"start": "09:10", "end": "12:00"}]}, buffer_time=10
        )
        appointments = [make_appointment(at(10), duration=30)]
        starts = _starts(generate_timeslots(MONDAY, calendar, 30, appointments, []))
        assert (10, 40) in starts
        assert (10, 25) not in starts
        assert (9, 25) in starts

    def test_slot_touching_time_off_is_allowed(self):
        calendar = make_calendar(working_hours={"monday": [{"start": "13:00", "end": "16:00"}]})
        time_offs = [make_time_off(at(14), at(15))]
        starts = _starts(generate_timeslots(MONDAY, calendar, 30, [], time_offs))
        assert (13, 30) in starts
        assert (13, 45) not in starts
        assert (14, 45) not in starts
        assert (15, 0) in starts

    def test_cancelled_appointment_is_ignored(self):
        calendar = make_calendar(buffer_time=15)
        appointments = [make_appointment(at(10), status=AppointmentStatus.CANCELLED)]
        assert len(generate_timeslots(MONDAY, calendar, 30, appointments, [])) == 11

    def test_time_off_removes_slots(self):
        calendar = make_calendar()
        time_offs = [make_time_off(at(11), at(12))]
        slots = generate_timeslots(MONDAY, calendar, 30, [], time_offs)
        assert _starts(slots)[-1] == (10, 30)
        assert len(slots) == 7

    def test_no_returned_slot_conflicts(self):
        calendar = make_calendar(buffer_time=10)
        appointments = [make_appointment(at(9, 20), duration=40), make_appointment(at(11), duration=15)]
        time_offs = [make_time_off(at(10, 10), at(10, 25))]
        slots = generate_timeslots(MONDAY, calendar, 20, appointments, time_offs)
        assert slots
        for slot in slots:
            assert not has_conflict(slot.start, slot.end, appointments, time_offs, 10)

    def test_slot_starts_align_with_block_start(self):
        calendar = make_calendar(working_hours={"monday": [{"start": "09:10", "end": "10:10"}]})
        slots = generate_timeslots(MONDAY, calendar, 30, [], [])
        block_start = time_of_day_to_minutes("09:10")
        for slot in slots:
            offset = slot.start.hour * 60 + slot.start.minute - block_start
            assert offset % SLOT_STEP_MINUTES == 0


class TestNotBefore:
    def test_earlier_candidates_are_dropped(self):
        slots = generate_timeslots(MONDAY, make_calendar(), 30, [], [], not_before=at(10, 5))
        assert _starts(slots)[0] == (10, 15)

    def test_candidate_at_cutoff_is_kept(self):
        slots = generate_timeslots(MONDAY, make_calendar(), 30, [], [], not_before=at(10))
        assert _starts(slots)[0] == (10, 0)


class TestDeterminism:
    def test_same_inputs_same_output(self):
        calendar = make_calendar(buffer_time=5)
        appointments = [make_appointment(at(10))]
        time_offs = [make_time_off(at(11), at(11, 30))]
        first = generate_timeslots(MONDAY, calendar, 30, appointments, time_offs)
        second = generate_timeslots(MONDAY, calendar, 30, appointments, time_offs)
        assert first == second

    def test_inputs_are_not_mutated(self):
        appointments = [make_appointment(at(10))]
        snapshot = [a.model_copy() for a in appointments]
        generate_timeslots(MONDAY, make_calendar(), 30, appointments, [])
        assert appointments == snapshot
