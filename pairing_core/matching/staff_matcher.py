# pairing_core/matching/staff_matcher.py
from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional, Sequence, Set

from pairing_core.config import DEFAULT_CONFIG, AppConfig
from pairing_core.domain.models import (
    STAFF_ROLES, AvailabilityWindow, Expertise, Meeting, MeetingStatus, MeetingType, Need, Person, Placement,
)
from pairing_core.preprocessing.availability import has_common_slot, windows_for


def staff_roster(people: Iterable[Person]) -> List[Person]:
    """Student staff and professional staff, in input order"""
    return [p for p in people if p.role in STAFF_ROLES]


def relevant_subject_ids(student_id: int, subject_id: Optional[int], needs: Iterable[Need]) -> List[int]:
    if subject_id is not None:
        return [subject_id]
    return [n.subject_id for n in needs if n.student_id == student_id]


def match_staff(
    student_id: int,
    subject_id: Optional[int],
    staff: Sequence[Person],
    needs: Iterable[Need],
    expertise: Iterable[Expertise],
) -> List[Person]:
    """
    Staff qualified to serve the student.

    With a subject, only staff holding expertise in exactly that subject match.
    Without one, expertise in any of the student's needed subjects is enough.
    A student with no recorded needs (and no subject) gets the whole roster back.
    """
    subject_ids = relevant_subject_ids(student_id, subject_id, needs)
    if not subject_ids:
        return list(staff)

    wanted = set(subject_ids)
    qualified: Set[int] = {e.staff_id for e in expertise if e.subject_id in wanted}

    out: List[Person] = []
    seen: Set[int] = set()
    for p in staff:
        if p.id in qualified and p.id not in seen:
            out.append(p)
            seen.add(p.id)
    return out


def match_available_staff(
    student_id: int,
    subject_id: Optional[int],
    staff: Sequence[Person],
    needs: Iterable[Need],
    expertise: Iterable[Expertise],
    availability: Sequence[AvailabilityWindow],
    cfg: AppConfig = DEFAULT_CONFIG,
) -> List[Person]:
    """Expertise match intersected with at least one usable common slot."""
    student_windows = windows_for(student_id, availability)
    return [
        p for p in match_staff(student_id, subject_id, staff, needs, expertise)
        if has_common_slot(student_windows, windows_for(p.id, availability), cfg)
    ]


def determine_placement(
    student: Person,
    staff: Person,
    location: Optional[str] = None,
    student_windows: Sequence[AvailabilityWindow] = (),
    staff_windows: Sequence[AvailabilityWindow] = (),
    cfg: AppConfig = DEFAULT_CONFIG,
) -> Placement:
    # remote on either side forces a virtual meeting
    if staff.is_remote or student.is_remote:
        return Placement(location=cfg.placement.virtual_location, is_virtual=True)

    if location:
        return Placement(location=location, is_virtual=False)

    for windows in (staff_windows, student_windows):
        for w in windows:
            if w.location:
                return Placement(location=w.location, is_virtual=False)

    return Placement(location=cfg.placement.default_location, is_virtual=False)


def build_meeting(
    student: Person,
    staff: Person,
    meeting_date: date,
    start_time: str,
    end_time: str,
    meeting_type: MeetingType,
    subject_id: Optional[int] = None,
    location: Optional[str] = None,
    is_virtual: bool = False,
    student_windows: Sequence[AvailabilityWindow] = (),
    staff_windows: Sequence[AvailabilityWindow] = (),
    cfg: AppConfig = DEFAULT_CONFIG,
) -> Meeting:
    """Concrete meeting from a match. The remote override is not negotiable."""
    if is_virtual and not (student.is_remote or staff.is_remote):
        placement = Placement(location=location or cfg.placement.virtual_location, is_virtual=True)
    else:
        placement = determine_placement(student, staff, location, student_windows, staff_windows, cfg)

    return Meeting(
        student_id=student.id,
        staff_id=staff.id,
        meeting_type=meeting_type,
        date=meeting_date,
        start_time=start_time,
        end_time=end_time,
        location=placement.location,
        is_virtual=placement.is_virtual,
        status=MeetingStatus.SCHEDULED,
        subject_id=subject_id,
    )
