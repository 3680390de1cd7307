# pairing_core/services/scheduling.py
from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Dict, Iterator, List, Optional, Tuple

from pairing_core.app_logger import get_logger
from pairing_core.config import DEFAULT_CONFIG, AppConfig
from pairing_core.conflicts.detector import check_conflict
from pairing_core.conflicts.escalation import escalate, find_alternative_staff
from pairing_core.conflicts.lifecycle import assign, classify_conflict, open_conflict, prioritize, resolve
from pairing_core.domain.models import (
    AlternativeStaffResult, Conflict, ConflictCheck, ConflictPriority, ConflictStatus, Meeting, MeetingStatus,
    MeetingType, Modality, Person, Slot,
)
from pairing_core.domain.timegrid import as_date
from pairing_core.io_layer.repository import Repository
from pairing_core.matching.recommender import recommend_meeting_type
from pairing_core.matching.staff_matcher import match_available_staff, match_staff, staff_roster
from pairing_core.preprocessing.availability import find_available_slots
from pairing_core.validation.validator import ValidationError, validate_meeting

log = get_logger("scheduling")

ON_CONFLICT_MODES = ("record", "block", "override")
RETIMING_FIELDS = ("date", "start_time", "end_time", "student_id", "staff_id")


class SchedulingConflict(Exception):
    def __init__(self, check: ConflictCheck, conflict: Optional[Conflict] = None):
        super().__init__(f"Proposed meeting collides with {len(check.colliding)} existing meeting(s)")
        self.check = check
        self.conflict = conflict


@dataclass
class ScheduleOutcome:
    meeting: Optional[Meeting]
    check: ConflictCheck
    conflict: Optional[Conflict] = None

    @property
    def created(self) -> bool:
        return self.meeting is not None


@dataclass
class ReassignOutcome:
    result: AlternativeStaffResult
    escalated: bool = False
    conflict: Optional[Conflict] = None
    notification_id: Optional[int] = None


class _ParticipantLocks:
    """One lock per (person, date); callers take them in sorted order."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[Tuple[int, date], threading.Lock] = {}

    @contextmanager
    def hold(self, keys) -> Iterator[None]:
        ordered = sorted(set(keys))
        with self._guard:
            locks = [self._locks.setdefault(k, threading.Lock()) for k in ordered]
        for lk in locks:
            lk.acquire()
        try:
            yield
        finally:
            for lk in reversed(locks):
                lk.release()


@dataclass
class SchedulingService:
    repository: Repository
    cfg: AppConfig = DEFAULT_CONFIG
    _locks: _ParticipantLocks = field(default_factory=_ParticipantLocks, init=False, repr=False)

    def _person(self, person_id: int) -> Person:
        p = self.repository.get_person(person_id)
        if p is None:
            raise ValidationError(f"Unknown person id: {person_id}")
        return p

    def _meeting(self, meeting_id: int) -> Meeting:
        m = self.repository.get_meeting(meeting_id)
        if m is None:
            raise ValidationError(f"Unknown meeting id: {meeting_id}")
        return m

    def _conflict(self, conflict_id: int) -> Conflict:
        c = self.repository.get_conflict(conflict_id)
        if c is None:
            raise ValidationError(f"Unknown conflict id: {conflict_id}")
        return c

    # matching
    def match_staff(self, student_id: int, subject_id: Optional[int] = None,
                    with_availability: bool = False) -> List[Person]:
        self._person(student_id)
        roster = staff_roster(self.repository.list_people())
        needs = self.repository.list_needs(student_id)
        expertise = self.repository.list_expertise()
        if with_availability:
            matched = match_available_staff(student_id, subject_id, roster, needs, expertise,
                                            self.repository.list_availability(), self.cfg)
        else:
            matched = match_staff(student_id, subject_id, roster, needs, expertise)
        log.info("student=%s subject=%s availability=%s -> %d staff",
                 student_id, subject_id, with_availability, len(matched))
        return matched

    def available_slots(self, student_id: int, staff_id: int, merge: Optional[bool] = None) -> List[Slot]:
        return find_available_slots(self.repository.list_availability(student_id),
                                    self.repository.list_availability(staff_id), self.cfg, merge=merge)

    def recommend(self, student_id: int, staff_id: int) -> MeetingType:
        return recommend_meeting_type(student_id, staff_id, self.repository.list_needs(student_id),
                                      self.repository.list_expertise(staff_id), self.cfg)

    # conflicts
    def check_conflict(self, proposed: Meeting, exclude_meeting_id: Optional[int] = None) -> ConflictCheck:
        return check_conflict(proposed, self.repository.list_meetings(on=as_date(proposed.date)),
                              exclude_meeting_id=exclude_meeting_id)

    def schedule_meeting(self, proposed: Meeting, reported_by_id: Optional[int] = None,
                         on_conflict: str = "record") -> ScheduleOutcome:
        """
        Conflict check and insert run in one critical section per participant/date.

        on_conflict:
          record   - do not create the meeting, store an open Conflict
          block    - store the Conflict and raise SchedulingConflict
          override - create the meeting anyway, still storing the Conflict
        """
        if on_conflict not in ON_CONFLICT_MODES:
            raise ValueError(f"on_conflict must be one of {ON_CONFLICT_MODES}, got {on_conflict!r}")
        validate_meeting(proposed)
        self._person(proposed.student_id)
        self._person(proposed.staff_id)

        day = as_date(proposed.date)
        with self._locks.hold([(pid, day) for pid in proposed.participants()]):
            check = self.check_conflict(proposed)
            if not check.has_conflict:
                stored = self.repository.insert_meeting(proposed)
                log.info("Scheduled meeting #%s on %s %s-%s", stored.id, day, stored.start_time, stored.end_time)
                return ScheduleOutcome(meeting=stored, check=check)

            conflict = self.repository.insert_conflict(
                classify_conflict(proposed, check, reported_by_id=reported_by_id, cfg=self.cfg))
            log.warning("Double booking on %s for student=%s staff=%s (conflict #%s, %s)",
                        day, proposed.student_id, proposed.staff_id, conflict.id, conflict.priority.value)
            if on_conflict == "block":
                raise SchedulingConflict(check, conflict)
            if on_conflict == "override":
                stored = self.repository.insert_meeting(proposed)
                return ScheduleOutcome(meeting=stored, check=check, conflict=conflict)
            return ScheduleOutcome(meeting=None, check=check, conflict=conflict)

    def update_meeting(self, meeting_id: int, **changes) -> ScheduleOutcome:
        """
        Apply ``changes`` to a stored meeting.

        A meeting that ends up active is re-checked when its time or people
        changed, or when it comes back from cancelled. Both the old and the new
        participant/date keys are held, and the stored row is re-read inside
        the critical section.
        """
        snapshot = self._meeting(meeting_id)
        target = replace(snapshot, **changes)
        keys = [(pid, as_date(m.date)) for m in (snapshot, target) for pid in m.participants()]

        with self._locks.hold(keys):
            current = self._meeting(meeting_id)
            if current.status == MeetingStatus.COMPLETED:
                raise ValidationError(f"Meeting #{meeting_id} is completed and cannot be changed")
            updated = replace(current, **changes)
            validate_meeting(updated)

            retimed = any(k in changes for k in RETIMING_FIELDS)
            reactivated = current.status == MeetingStatus.CANCELLED
            if updated.status == MeetingStatus.CANCELLED or not (retimed or reactivated):
                return ScheduleOutcome(meeting=self.repository.update_meeting(updated), check=ConflictCheck(False))

            check = self.check_conflict(updated, exclude_meeting_id=meeting_id)
            stored = self.repository.update_meeting(updated)
            conflict = None
            if check.has_conflict:
                conflict = self.repository.insert_conflict(classify_conflict(updated, check, cfg=self.cfg))
                log.warning("Update of meeting #%s double-books (conflict #%s)", meeting_id, conflict.id)
            return ScheduleOutcome(meeting=stored, check=check, conflict=conflict)

    def reassign_meeting(self, meeting_id: int, modality: Optional[Modality] = None,
                         reported_by_id: Optional[int] = None) -> ReassignOutcome:
        meeting = self._meeting(meeting_id)
        result = find_alternative_staff(
            meeting, meeting.staff_id, self.repository.list_people(),
            self.repository.list_expertise(), self.repository.list_availability(), modality,
        )
        if result.success:
            log.info("Meeting #%s: %d alternative staff", meeting_id, len(result.candidates))
            return ReassignOutcome(result=result)
        if result.reason != "no_candidates":
            log.warning("Meeting #%s: %s", meeting_id, result.message)
            return ReassignOutcome(result=result)

        esc = escalate(self.repository, meeting, meeting.staff_id, reported_by_id=reported_by_id, cfg=self.cfg)
        log.warning("Meeting #%s: no alternative staff, escalated as conflict #%s", meeting_id, esc.conflict.id)
        result.message = "No qualified and available staff found. Scheduling team has been notified."
        return ReassignOutcome(result=result, escalated=True, conflict=esc.conflict,
                               notification_id=esc.notification.id)

    def report_conflict(self, description: str, priority: ConflictPriority = ConflictPriority.MEDIUM,
                        related_user_id: Optional[int] = None, related_meeting_id: Optional[int] = None,
                        reported_by_id: Optional[int] = None) -> Conflict:
        conflict = self.repository.insert_conflict(open_conflict(
            description, priority, related_user_id=related_user_id, related_meeting_id=related_meeting_id,
            reported_by_id=reported_by_id, cfg=self.cfg,
        ))
        log.info("Conflict #%s reported (%s)", conflict.id, conflict.priority.value)
        return conflict

    def assign_conflict(self, conflict_id: int, staff_id: int) -> Conflict:
        self._person(staff_id)
        return self.repository.update_conflict(assign(self._conflict(conflict_id), staff_id))

    def resolve_conflict(self, conflict_id: int, resolver_id: int) -> Conflict:
        current = self._conflict(conflict_id)
        resolved = resolve(current, resolver_id, cfg=self.cfg)
        if resolved is current:
            return current
        log.info("Conflict #%s resolved by #%s", conflict_id, resolver_id)
        return self.repository.update_conflict(resolved)

    def list_conflicts(self, status: Optional[ConflictStatus] = None) -> List[Conflict]:
        return prioritize(self.repository.list_conflicts(status))
