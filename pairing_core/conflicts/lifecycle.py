# pairing_core/conflicts/lifecycle.py
from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Iterable, List, Optional

from dateutil import tz

from pairing_core.config import DEFAULT_CONFIG, AppConfig
from pairing_core.domain.models import Conflict, ConflictCheck, ConflictPriority, ConflictStatus, Meeting

_PRIORITY_RANK = {ConflictPriority.HIGH: 0, ConflictPriority.MEDIUM: 1, ConflictPriority.LOW: 2}


class ConflictStateError(Exception):
    """Transition not defined for the conflict's current state"""


def now_in(cfg: AppConfig = DEFAULT_CONFIG) -> datetime:
    return datetime.now(tz=tz.gettz(cfg.timezone_name))


def open_conflict(
    description: str,
    priority: ConflictPriority = ConflictPriority.MEDIUM,
    related_user_id: Optional[int] = None,
    related_meeting_id: Optional[int] = None,
    reported_by_id: Optional[int] = None,
    now: Optional[datetime] = None,
    cfg: AppConfig = DEFAULT_CONFIG,
) -> Conflict:
    return Conflict(
        description=description,
        priority=ConflictPriority(priority),
        status=ConflictStatus.OPEN,
        related_user_id=related_user_id,
        related_meeting_id=related_meeting_id,
        reported_by_id=reported_by_id,
        created_at=now or now_in(cfg),
    )


def assign(conflict: Conflict, staff_id: int) -> Conflict:
    """open (assigned or not) -> open, assigned to ``staff_id``"""
    if not conflict.is_open:
        raise ConflictStateError(f"Conflict {conflict.id} is resolved and cannot be reassigned")
    return replace(conflict, assigned_to_id=staff_id)


def resolve(
    conflict: Conflict,
    resolver_id: int,
    now: Optional[datetime] = None,
    cfg: AppConfig = DEFAULT_CONFIG,
) -> Conflict:
    """
    open -> resolved. Terminal: resolving again returns the conflict untouched,
    so the first resolution timestamp and resolver stand.
    """
    if not conflict.is_open:
        return conflict
    stamp = now or now_in(cfg)
    return replace(
        conflict,
        status=ConflictStatus.RESOLVED,
        resolved_at=stamp,
        resolved_by_id=resolver_id,
        description=f"{conflict.description}\n[resolved by #{resolver_id} at {stamp.isoformat()}]",
    )


def describe_collision(proposed: Meeting, colliding: Iterable[Meeting]) -> str:
    lines = [
        f"Proposed meeting on {proposed.date.isoformat()} {proposed.start_time}-{proposed.end_time} "
        f"(student #{proposed.student_id}, staff #{proposed.staff_id}) double-books:"
    ]
    for m in colliding:
        ref = f"meeting #{m.id}" if m.id is not None else "meeting"
        lines.append(f"- {ref} {m.start_time}-{m.end_time} (student #{m.student_id}, staff #{m.staff_id})")
    return "\n".join(lines)


def classify_priority(proposed: Meeting, check: ConflictCheck) -> ConflictPriority:
    """
    high   - the staff member is double-booked
    medium - only the student is
    low    - nothing collides (manual reports)
    """
    if not check.colliding:
        return ConflictPriority.LOW
    for m in check.colliding:
        if proposed.staff_id in m.participants():
            return ConflictPriority.HIGH
    return ConflictPriority.MEDIUM


def classify_conflict(
    proposed: Meeting,
    check: ConflictCheck,
    reported_by_id: Optional[int] = None,
    now: Optional[datetime] = None,
    cfg: AppConfig = DEFAULT_CONFIG,
) -> Conflict:
    """Open Conflict record for a detected double booking."""
    first = check.colliding[0] if check.colliding else None
    return open_conflict(
        description=describe_collision(proposed, check.colliding),
        priority=classify_priority(proposed, check),
        related_user_id=proposed.staff_id,
        related_meeting_id=first.id if first is not None else proposed.id,
        reported_by_id=reported_by_id,
        now=now,
        cfg=cfg,
    )


def prioritize(conflicts: Iterable[Conflict]) -> List[Conflict]:
    """Open before resolved, then high > medium > low, then oldest first."""
    def key(c: Conflict):
        created = c.created_at.timestamp() if c.created_at else 0.0
        return (0 if c.is_open else 1, _PRIORITY_RANK[c.priority], created)
    return sorted(conflicts, key=key)
