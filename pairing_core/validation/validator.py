# pairing_core/validation/validator.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Tuple

from pairing_core.conflicts.detector import find_double_bookings
from pairing_core.domain.models import AvailabilityWindow, InputData, Meeting
from pairing_core.domain.timegrid import overlap, time_to_minutes

_TIME_RE = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")


@dataclass
class ValidationError(Exception):
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class ValidationWarning:
    message: str


def validate_time(value: str, field_name: str = "time") -> str:
    if not isinstance(value, str) or not _TIME_RE.match(value.strip()):
        raise ValidationError(f"{field_name} must be HH:MM, got {value!r}")
    return value.strip()


def validate_range(start: str, end: str) -> None:
    validate_time(start, "start_time")
    validate_time(end, "end_time")
    if time_to_minutes(end) <= time_to_minutes(start):
        raise ValidationError(f"End time must be after start time ({start}-{end})")


def validate_level(level: int, field_name: str) -> int:
    if not isinstance(level, int) or not 1 <= level <= 5:
        raise ValidationError(f"{field_name} must be an integer 1-5, got {level!r}")
    return level


def validate_window(window: AvailabilityWindow) -> None:
    if not 0 <= window.day_of_week <= 6:
        raise ValidationError(f"day_of_week must be 0-6, got {window.day_of_week} (person {window.person_id})")
    validate_range(window.start_time, window.end_time)


def validate_meeting(meeting: Meeting) -> None:
    if meeting.student_id == meeting.staff_id:
        raise ValidationError("A meeting needs two different participants")
    validate_range(meeting.start_time, meeting.end_time)


def validate_integrity(data: InputData) -> List[ValidationWarning]:
    """Hard reference errors raise; quirks that the engine tolerates come back as warnings."""
    warnings: List[ValidationWarning] = []

    for e in data.expertise:
        if e.staff_id not in data.people:
            raise ValidationError(f"Expertise references unknown staff id: {e.staff_id}")
        if e.subject_id not in data.subjects:
            raise ValidationError(f"Expertise references unknown subject id: {e.subject_id}")
        validate_level(e.proficiency_level, "proficiency_level")

    for n in data.needs:
        if n.student_id not in data.people:
            raise ValidationError(f"Need references unknown student id: {n.student_id}")
        if n.subject_id not in data.subjects:
            raise ValidationError(f"Need references unknown subject id: {n.subject_id}")
        validate_level(n.priority_level, "priority_level")

    by_person_day: Dict[Tuple[int, int], List[AvailabilityWindow]] = {}
    for w in data.availability:
        if w.person_id not in data.people:
            raise ValidationError(f"Availability references unknown person id: {w.person_id}")
        validate_window(w)
        by_person_day.setdefault((w.person_id, w.day_of_week), []).append(w)

    # Overlapping windows are allowed, but produce duplicate slots when crossed
    for (pid, day), windows in by_person_day.items():
        for i, a in enumerate(windows):
            for b in windows[i + 1:]:
                if overlap(time_to_minutes(a.start_time), time_to_minutes(a.end_time),
                           time_to_minutes(b.start_time), time_to_minutes(b.end_time)):
                    warnings.append(ValidationWarning(
                        f"Overlapping availability windows for person {pid} on day {day}: "
                        f"{a.start_time}-{a.end_time} / {b.start_time}-{b.end_time}"
                    ))

    for m in data.meetings:
        for pid in m.participants():
            if pid not in data.people:
                raise ValidationError(f"Meeting {m.id} references unknown person id: {pid}")
        validate_meeting(m)

    for a, b in find_double_bookings(data.meetings):
        warnings.append(ValidationWarning(
            f"Double booking detected on {a.date.isoformat()}: meeting {a.id} "
            f"{a.start_time}-{a.end_time} / meeting {b.id} {b.start_time}-{b.end_time}"
        ))

    return warnings
