from dataclasses import replace
from datetime import date

import pytest

from pairing_core.domain.models import AvailabilityWindow, Expertise, Meeting, MeetingType, Need
from pairing_core.validation.validator import (
    ValidationError, validate_integrity, validate_level, validate_meeting, validate_range, validate_time,
)


@pytest.mark.parametrize("value", ["09:00", "9:00", "00:00", "23:59"])
def test_valid_times(value):
    assert validate_time(value) == value


@pytest.mark.parametrize("value", ["24:00", "9:60", "0900", "9am", "", None])
def test_invalid_times(value):
    with pytest.raises(ValidationError):
        validate_time(value)


def test_range_requires_end_after_start():
    validate_range("09:00", "09:30")
    with pytest.raises(ValidationError) as exc:
        validate_range("10:00", "09:00")
    assert "after start" in str(exc.value)


def test_levels():
    assert validate_level(1, "priority_level") == 1
    assert validate_level(5, "priority_level") == 5
    for bad in (0, 6, 2.5, "3"):
        with pytest.raises(ValidationError):
            validate_level(bad, "priority_level")


def test_meeting_needs_two_people():
    with pytest.raises(ValidationError):
        validate_meeting(Meeting(10, 10, MeetingType.CHECK_IN, date(2024, 3, 4), "09:00", "10:00"))


def test_clean_input_has_no_warnings(input_data):
    assert validate_integrity(input_data) == []


def test_unknown_references_raise(input_data):
    input_data.expertise.append(Expertise(99, 1, 3))
    with pytest.raises(ValidationError) as exc:
        validate_integrity(input_data)
    assert "99" in exc.value.message


def test_unknown_subject_raises(input_data):
    input_data.needs.append(Need(10, 42, 3))
    with pytest.raises(ValidationError):
        validate_integrity(input_data)


def test_bad_window_raises(input_data):
    input_data.availability.append(AvailabilityWindow(10, 7, "09:00", "10:00"))
    with pytest.raises(ValidationError):
        validate_integrity(input_data)


def test_overlapping_windows_warn(input_data):
    input_data.availability.append(AvailabilityWindow(10, 1, "11:00", "13:00"))
    warnings = validate_integrity(input_data)
    assert len(warnings) == 1
    assert "person 10" in warnings[0].message


def test_double_booking_warns(input_data):
    first = input_data.meetings[0]
    input_data.meetings.append(replace(first, student_id=11, start_time="09:45", end_time="10:15", id=2))
    warnings = validate_integrity(input_data)
    assert [w.message for w in warnings if "Double booking" in w.message]
