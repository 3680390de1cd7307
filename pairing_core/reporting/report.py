# pairing_core/reporting/report.py
from __future__ import annotations

from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

import pandas as pd

from pairing_core.config import DEFAULT_CONFIG, AppConfig
from pairing_core.domain.models import (
    STAFF_ROLES, Conflict, ConflictPriority, ConflictStatus, Meeting, MeetingStatus, Notification, Person, Role,
    Subject,
)
from pairing_core.domain.timegrid import as_date, minutes_to_time, time_to_minutes


def _name(people: Dict[int, Person], pid: int) -> str:
    p = people.get(pid)
    return p.display_name if p else f"#{pid}"


def build_meeting_table(
    meetings: Iterable[Meeting],
    people: Dict[int, Person],
    subjects: Optional[Dict[int, Subject]] = None,
) -> pd.DataFrame:
    subjects = subjects or {}
    rows = []
    for m in meetings:
        subj = subjects.get(m.subject_id) if m.subject_id is not None else None
        rows.append(dict(
            meeting_id=m.id,
            meeting_date=as_date(m.date).isoformat(),
            start_time=m.start_time,
            end_time=m.end_time,
            student_name=_name(people, m.student_id),
            staff_name=_name(people, m.staff_id),
            meeting_type=m.meeting_type.value,
            subject=subj.code if subj else "",
            location=m.location,
            is_virtual=m.is_virtual,
            status=m.status.value,
        ))
    df = pd.DataFrame(rows, columns=[
        "meeting_id", "meeting_date", "start_time", "end_time", "student_name", "staff_name",
        "meeting_type", "subject", "location", "is_virtual", "status",
    ])
    if not df.empty:
        df = df.sort_values(["meeting_date", "start_time", "staff_name"]).reset_index(drop=True)
    return df


def build_weekly_calendar(
    meetings: Iterable[Meeting],
    people: Dict[int, Person],
    week_start: date,
    cfg: AppConfig = DEFAULT_CONFIG,
) -> pd.DataFrame:
    """
    Rows: time slots of cfg.calendar.slot_minutes, columns: the 7 dates from week_start.
    A meeting is shown in every slot it touches; cancelled meetings are left out.
    """
    cal = cfg.calendar
    days = [week_start + timedelta(days=i) for i in range(7)]
    slot_starts = list(range(cal.day_start_hour * 60, cal.day_end_hour * 60, cal.slot_minutes))
    index = [minutes_to_time(s) for s in slot_starts]
    columns = [d.isoformat() for d in days]
    grid: Dict[str, Dict[str, List[str]]] = {c: {i: [] for i in index} for c in columns}

    for m in sorted(meetings, key=lambda x: (as_date(x.date), time_to_minutes(x.start_time))):
        if m.status == MeetingStatus.CANCELLED:
            continue
        col = as_date(m.date).isoformat()
        if col not in grid:
            continue
        start, end = time_to_minutes(m.start_time), time_to_minutes(m.end_time)
        label = f"{_name(people, m.student_id)} / {_name(people, m.staff_id)} ({m.meeting_type.value})"
        for s, key in zip(slot_starts, index):
            if s < end and s + cal.slot_minutes > start:
                grid[col][key].append(label)

    df = pd.DataFrame({c: {k: "; ".join(v) for k, v in grid[c].items()} for c in columns}, index=index)
    df.index.name = "time"
    return df


def build_conflict_summary(conflicts: Iterable[Conflict]) -> pd.DataFrame:
    """Counts per priority (rows) and status (columns)."""
    rows = [dict(priority=c.priority.value, status=c.status.value) for c in conflicts]
    df = pd.DataFrame(rows, columns=["priority", "status"])
    table = pd.crosstab(df["priority"], df["status"]) if not df.empty else pd.DataFrame()
    table = table.reindex(index=[p.value for p in ConflictPriority],
                          columns=[s.value for s in ConflictStatus], fill_value=0)
    table.index.name = "priority"
    table.columns.name = None
    return table.astype(int)


def build_conflict_table(conflicts: Iterable[Conflict], people: Dict[int, Person]) -> pd.DataFrame:
    rows = []
    for c in conflicts:
        rows.append(dict(
            conflict_id=c.id,
            priority=c.priority.value,
            status=c.status.value,
            description=c.description,
            related_meeting_id=c.related_meeting_id,
            assigned_to=_name(people, c.assigned_to_id) if c.assigned_to_id is not None else "",
            created_at=c.created_at.isoformat() if c.created_at else "",
            resolved_at=c.resolved_at.isoformat() if c.resolved_at else "",
        ))
    return pd.DataFrame(rows, columns=["conflict_id", "priority", "status", "description", "related_meeting_id",
                                       "assigned_to", "created_at", "resolved_at"])


def build_notification_table(notifications: Iterable[Notification]) -> pd.DataFrame:
    rows = [dict(
        notification_id=n.id,
        type=n.type,
        priority=n.priority,
        related_entity_type=n.related_entity_type,
        related_entity_id=n.related_entity_id,
        tags=", ".join(n.tags),
        message=n.message,
        created_at=n.created_at.isoformat() if n.created_at else "",
    ) for n in notifications]
    return pd.DataFrame(rows, columns=["notification_id", "type", "priority", "related_entity_type",
                                       "related_entity_id", "tags", "message", "created_at"])


def build_staff_load(meetings: Iterable[Meeting], people: Dict[int, Person]) -> pd.DataFrame:
    counts = {pid: dict(total=0, minutes=0) for pid, p in people.items() if p.role in STAFF_ROLES}
    for m in meetings:
        if m.status == MeetingStatus.CANCELLED or m.staff_id not in counts:
            continue
        counts[m.staff_id]["total"] += 1
        counts[m.staff_id]["minutes"] += time_to_minutes(m.end_time) - time_to_minutes(m.start_time)

    rows = [dict(staff_name=_name(people, pid), meeting_count=d["total"], hours=round(d["minutes"] / 60, 2))
            for pid, d in counts.items()]
    df = pd.DataFrame(rows, columns=["staff_name", "meeting_count", "hours"])
    if not df.empty:
        df = df.sort_values(["meeting_count", "staff_name"], ascending=[False, True]).reset_index(drop=True)
    return df


def build_program_stats(people: Iterable[Person], meetings: Iterable[Meeting], week_start: date) -> Dict[str, object]:
    people = list(people)
    meetings = list(meetings)
    week_end = week_start + timedelta(days=7)
    weekly = [m for m in meetings if week_start <= as_date(m.date) < week_end
              and m.status != MeetingStatus.CANCELLED]
    closed = [m for m in meetings if m.status in (MeetingStatus.COMPLETED, MeetingStatus.CANCELLED)]
    completed = sum(1 for m in closed if m.status == MeetingStatus.COMPLETED)
    return dict(
        total_students=sum(1 for p in people if p.role == Role.STUDENT),
        total_staff=sum(1 for p in people if p.role in STAFF_ROLES),
        weekly_meetings=len(weekly),
        success_rate=round(100 * completed / len(closed)) if closed else 0,
    )
