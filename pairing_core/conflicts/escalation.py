# pairing_core/conflicts/escalation.py
from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence

from pairing_core.config import DEFAULT_CONFIG, AppConfig
from pairing_core.conflicts.lifecycle import now_in, open_conflict
from pairing_core.domain.models import (
    AlternativeStaffResult, AvailabilityWindow, ConflictPriority, Escalation, Expertise, Meeting, Modality,
    Notification, Person, Role,
)
from pairing_core.domain.timegrid import day_of_week
from pairing_core.preprocessing.availability import window_covers

if TYPE_CHECKING:
    from pairing_core.io_layer.repository import Repository

ESCALATION_TAGS = ("scheduling-team", "needs-review")


def required_expertise(meeting: Meeting, original_staff_id: int, expertise: Iterable[Expertise]) -> Optional[Expertise]:
    """The original staff edge for the meeting subject, else their first edge."""
    edges = [e for e in expertise if e.staff_id == original_staff_id]
    if meeting.subject_id is not None:
        for e in edges:
            if e.subject_id == meeting.subject_id:
                return e
    return edges[0] if edges else None


def _matches_modality(person: Person, modality: Optional[Modality]) -> bool:
    if modality is None:
        return True
    if Modality(modality) == Modality.VIRTUAL:
        return person.is_remote
    return not person.is_remote


def find_alternative_staff(
    meeting: Meeting,
    original_staff_id: int,
    people: Iterable[Person],
    expertise: Sequence[Expertise],
    availability: Sequence[AvailabilityWindow],
    modality: Optional[Modality] = None,
) -> AlternativeStaffResult:
    """
    Professional staff who could take over ``meeting`` from ``original_staff_id``.

    A candidate needs expertise in the required subject at no lower proficiency,
    a window on the meeting weekday covering the whole meeting, and (when a
    modality is requested) a matching remote flag. No side effects; see
    ``escalate`` for the empty case.
    """
    required = required_expertise(meeting, original_staff_id, expertise)
    if required is None:
        return AlternativeStaffResult(success=False, message="Could not determine required expertise",
                                     reason="unknown_expertise")

    weekday = day_of_week(meeting.date)
    candidates: List[Person] = []
    for p in people:
        if p.role != Role.PROFESSIONAL_STAFF or p.id == original_staff_id:
            continue
        has_expertise = any(
            e.staff_id == p.id
            and e.subject_id == required.subject_id
            and e.proficiency_level >= required.proficiency_level
            for e in expertise
        )
        if not has_expertise:
            continue
        is_available = any(
            w.person_id == p.id and w.day_of_week == weekday
            and window_covers(w, meeting.start_time, meeting.end_time)
            for w in availability
        )
        if not is_available or not _matches_modality(p, modality):
            continue
        candidates.append(p)

    if not candidates:
        return AlternativeStaffResult(
            success=False,
            message="No qualified and available staff found.",
            reason="no_candidates",
        )
    return AlternativeStaffResult(success=True, candidates=candidates)


def build_escalation(
    meeting: Meeting,
    original_staff_id: int,
    reported_by_id: Optional[int] = None,
    now: Optional[datetime] = None,
    cfg: AppConfig = DEFAULT_CONFIG,
) -> Escalation:
    stamp = now or now_in(cfg)
    message = f"Unable to find alternative staff for meeting #{meeting.id}. Original staff: {original_staff_id}"
    conflict = open_conflict(
        description=f"[{', '.join(ESCALATION_TAGS)}] {message}",
        priority=ConflictPriority.HIGH,
        related_user_id=original_staff_id,
        related_meeting_id=meeting.id,
        reported_by_id=reported_by_id,
        now=stamp,
        cfg=cfg,
    )
    notification = Notification(
        message=message,
        related_entity_id=meeting.id,
        type="PAIRING_ISSUE",
        priority="HIGH",
        related_entity_type="MEETING",
        tags=ESCALATION_TAGS,
        created_at=stamp,
    )
    return Escalation(conflict=conflict, notification=notification)


def escalate(
    repository: "Repository",
    meeting: Meeting,
    original_staff_id: int,
    reported_by_id: Optional[int] = None,
    cfg: AppConfig = DEFAULT_CONFIG,
) -> Escalation:
    """Persist one Conflict and one Notification for an unassignable meeting."""
    esc = build_escalation(meeting, original_staff_id, reported_by_id=reported_by_id, cfg=cfg)
    conflict = repository.insert_conflict(esc.conflict)
    notification = repository.insert_notification(esc.notification)
    return Escalation(conflict=conflict, notification=notification)
