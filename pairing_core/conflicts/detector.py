# pairing_core/conflicts/detector.py
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from pairing_core.domain.models import ConflictCheck, Meeting, MeetingStatus
from pairing_core.domain.timegrid import as_date, time_to_minutes


def times_collide(new_start: int, new_end: int, ex_start: int, ex_end: int) -> bool:
    # half-open ranges; touching ends are not a collision
    return (
        (ex_start <= new_start < ex_end)
        or (ex_start < new_end <= ex_end)
        or (new_start <= ex_start and new_end >= ex_end)
    )


def shares_participant(a: Meeting, b: Meeting) -> bool:
    # a student staff member can appear as student in one meeting and staff in another
    return bool(set(a.participants()) & set(b.participants()))


def check_conflict(
    proposed: Meeting,
    existing: Iterable[Meeting],
    exclude_meeting_id: Optional[int] = None,
) -> ConflictCheck:
    """
    Would ``proposed`` double-book its student or staff member?

    Only meetings on the same calendar date that share a participant are
    compared; cancelled meetings never block. The result is advisory: the
    caller decides whether to block, warn or record a Conflict.
    """
    day = as_date(proposed.date)
    new_start = time_to_minutes(proposed.start_time)
    new_end = time_to_minutes(proposed.end_time)

    colliding: List[Meeting] = []
    for m in existing:
        if exclude_meeting_id is not None and m.id == exclude_meeting_id:
            continue
        if m.status == MeetingStatus.CANCELLED:
            continue
        if as_date(m.date) != day or not shares_participant(proposed, m):
            continue
        if times_collide(new_start, new_end, time_to_minutes(m.start_time), time_to_minutes(m.end_time)):
            colliding.append(m)

    return ConflictCheck(has_conflict=bool(colliding), colliding=colliding)


def find_double_bookings(meetings: Sequence[Meeting]) -> List[Tuple[Meeting, Meeting]]:
    """Every colliding pair among non-cancelled meetings (each pair once)."""
    active = [m for m in meetings if m.status != MeetingStatus.CANCELLED]
    pairs: List[Tuple[Meeting, Meeting]] = []
    for i, a in enumerate(active):
        for b in active[i + 1:]:
            if as_date(a.date) != as_date(b.date) or not shares_participant(a, b):
                continue
            if times_collide(time_to_minutes(a.start_time), time_to_minutes(a.end_time),
                             time_to_minutes(b.start_time), time_to_minutes(b.end_time)):
                pairs.append((a, b))
    return pairs
