from datetime import date, time

import pytest
from pydantic import ValidationError

from inkstudio.schemas import AppointmentReschedule, BlockedDateCreate, WeeklyAvailabilityCreate


def test_full_day_block_has_no_times():
    block = BlockedDateCreate(date=date(2024, 1, 1))
    assert block.is_blocked
    assert block.start_time is None


def test_extension_needs_times():
    with pytest.raises(ValidationError):
        BlockedDateCreate(date=date(2024, 1, 1), is_blocked=False)


def test_times_come_in_pairs():
    with pytest.raises(ValidationError):
        BlockedDateCreate(date=date(2024, 1, 1), end_time=time(12))


def test_reversed_ranges_are_rejected():
    with pytest.raises(ValidationError):
        BlockedDateCreate(date=date(2024, 1, 1), start_time=time(12), end_time=time(12))
    with pytest.raises(ValidationError):
        WeeklyAvailabilityCreate(weekday=0, start_time=time(13), end_time=time(9))
    with pytest.raises(ValidationError):
        AppointmentReschedule(date=date(2024, 1, 1), start_time=time(11), end_time=time(10))


def test_times_are_hhmm_on_the_wire_only():
    row = WeeklyAvailabilityCreate(weekday=3, start_time="09:05", end_time="17:30")
    assert row.model_dump()["start_time"] == time(9, 5)
    assert row.model_dump(mode="json") == {"start_time": "09:05", "end_time": "17:30", "weekday": 3}


def test_submitted_times_are_whole_minutes():
    with pytest.raises(ValidationError):
        AppointmentReschedule(date=date(2024, 1, 1), start_time=time(10, 0, 30), end_time=time(11))
    with pytest.raises(ValidationError):
        BlockedDateCreate(date=date(2024, 1, 1), start_time=time(10, 0, 0, 5), end_time=time(11))
    assert WeeklyAvailabilityCreate(weekday=1, start_time="09:00:00", end_time="10:00").start_time == time(9)
