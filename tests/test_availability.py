from dataclasses import replace

from pairing_core.config import AppConfig, MatchingConfig
from pairing_core.domain.models import AvailabilityWindow, Slot
from pairing_core.preprocessing.availability import (
    find_available_slots, merge_windows, window_covers, windows_for,
)

STUDENT, STAFF = 10, 20


def w(pid, day, start, end, location=None):
    return AvailabilityWindow(pid, day, start, end, location=location)


def test_monday_overlap_scenario():
    slots = find_available_slots([w(STUDENT, 1, "09:00", "10:00")], [w(STAFF, 1, "09:30", "10:30")])
    assert slots == [Slot(day=1, start="09:30", end="10:00")]


def test_thirty_minutes_included_twenty_nine_excluded():
    student = [w(STUDENT, 1, "09:00", "10:00")]
    assert find_available_slots(student, [w(STAFF, 1, "09:30", "11:00")])
    assert find_available_slots(student, [w(STAFF, 1, "09:31", "11:00")]) == []


def test_threshold_comes_from_config():
    cfg = AppConfig(matching=MatchingConfig(min_slot_minutes=60))
    student = [w(STUDENT, 1, "09:00", "10:00")]
    assert find_available_slots(student, [w(STAFF, 1, "09:30", "11:00")], cfg) == []
    assert find_available_slots(student, [w(STAFF, 1, "09:00", "11:00")], cfg)


def test_different_days_never_match():
    assert find_available_slots([w(STUDENT, 1, "09:00", "12:00")], [w(STAFF, 2, "09:00", "12:00")]) == []


def test_empty_inputs():
    assert find_available_slots([], [w(STAFF, 1, "09:00", "12:00")]) == []
    assert find_available_slots([w(STUDENT, 1, "09:00", "12:00")], []) == []


def test_location_prefers_staff_then_student():
    student = [w(STUDENT, 1, "09:00", "12:00", "Library")]
    assert find_available_slots(student, [w(STAFF, 1, "09:00", "10:00", "Room 101")])[0].location == "Room 101"
    assert find_available_slots(student, [w(STAFF, 1, "09:00", "10:00")])[0].location == "Library"
    assert find_available_slots([w(STUDENT, 1, "09:00", "12:00")],
                                [w(STAFF, 1, "09:00", "10:00")])[0].location is None


def test_slots_ordered_by_day():
    student = [w(STUDENT, 3, "09:00", "10:00"), w(STUDENT, 1, "09:00", "10:00")]
    staff = [w(STAFF, 1, "09:00", "10:00"), w(STAFF, 3, "09:00", "10:00")]
    assert [s.day for s in find_available_slots(student, staff)] == [1, 3]


def test_overlapping_own_windows_emit_duplicate_slots():
    student = [w(STUDENT, 1, "09:00", "12:00"), w(STUDENT, 1, "10:00", "11:00")]
    staff = [w(STAFF, 1, "10:00", "11:00")]
    slots = find_available_slots(student, staff)
    assert slots == [Slot(1, "10:00", "11:00"), Slot(1, "10:00", "11:00")]


def test_merge_step_removes_duplicates():
    student = [w(STUDENT, 1, "09:00", "12:00"), w(STUDENT, 1, "10:00", "11:00")]
    staff = [w(STAFF, 1, "10:00", "11:00")]
    assert find_available_slots(student, staff, merge=True) == [Slot(1, "10:00", "11:00")]

    cfg = AppConfig(matching=MatchingConfig(merge_overlapping_windows=True))
    assert len(find_available_slots(student, staff, cfg)) == 1


def test_merge_windows():
    merged = merge_windows([
        w(STUDENT, 1, "10:00", "11:00"),
        w(STUDENT, 1, "09:00", "10:00", "Library"),
        w(STUDENT, 1, "13:00", "14:00"),
        w(STUDENT, 2, "09:00", "10:00"),
    ])
    assert [(m.day_of_week, m.start_time, m.end_time, m.location) for m in merged] == [
        (1, "09:00", "11:00", "Library"),
        (1, "13:00", "14:00", None),
        (2, "09:00", "10:00", None),
    ]


def test_find_available_slots_is_restartable():
    student = [w(STUDENT, 1, "09:00", "12:00")]
    staff = [w(STAFF, 1, "10:00", "11:00")]
    assert find_available_slots(student, staff) == find_available_slots(student, staff)


def test_window_covers():
    window = w(STAFF, 1, "09:00", "11:00")
    assert window_covers(window, "09:00", "11:00")
    assert window_covers(window, "09:30", "10:00")
    assert not window_covers(window, "08:59", "10:00")
    assert not window_covers(window, "10:30", "11:01")


def test_windows_for():
    windows = [w(STUDENT, 1, "09:00", "10:00"), w(STAFF, 1, "09:00", "10:00")]
    assert windows_for(STAFF, windows) == [windows[1]]
    assert windows_for(99, windows) == []


def test_recurring_flag_survives_merge():
    a = replace(w(STUDENT, 1, "09:00", "10:00"), is_recurring=False)
    b = w(STUDENT, 1, "09:30", "10:30")
    assert merge_windows([a, b])[0].is_recurring is False
