# pairing_core/preprocessing/availability.py
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from pairing_core.config import DEFAULT_CONFIG, AppConfig
from pairing_core.domain.models import AvailabilityWindow, Slot
from pairing_core.domain.timegrid import minutes_to_time, overlap, time_to_minutes


def windows_for(person_id: int, windows: Iterable[AvailabilityWindow]) -> List[AvailabilityWindow]:
    return [w for w in windows if w.person_id == person_id]


def windows_by_day(windows: Iterable[AvailabilityWindow]) -> Dict[int, List[AvailabilityWindow]]:
    by: Dict[int, List[AvailabilityWindow]] = {d: [] for d in range(7)}
    for w in windows:
        by.setdefault(w.day_of_week, []).append(w)
    return by


def window_covers(window: AvailabilityWindow, start: str, end: str) -> bool:
    """True when [start, end) lies entirely inside the window"""
    return (time_to_minutes(window.start_time) <= time_to_minutes(start)
            and time_to_minutes(window.end_time) >= time_to_minutes(end))


def merge_windows(windows: Sequence[AvailabilityWindow]) -> List[AvailabilityWindow]:
    """
    Collapse overlapping or touching windows of the same person on the same day.
    The first non-empty location of a merged group is kept.
    """
    groups: Dict[tuple, List[AvailabilityWindow]] = {}
    for w in windows:
        groups.setdefault((w.person_id, w.day_of_week), []).append(w)

    out: List[AvailabilityWindow] = []
    for (pid, day), ws in groups.items():
        ws = sorted(ws, key=lambda x: time_to_minutes(x.start_time))
        cur_start = time_to_minutes(ws[0].start_time)
        cur_end = time_to_minutes(ws[0].end_time)
        cur_loc = ws[0].location or None
        cur_rec = ws[0].is_recurring
        for w in ws[1:]:
            s, e = time_to_minutes(w.start_time), time_to_minutes(w.end_time)
            if s <= cur_end:
                cur_end = max(cur_end, e)
                cur_loc = cur_loc or (w.location or None)
                cur_rec = cur_rec and w.is_recurring
                continue
            out.append(AvailabilityWindow(pid, day, minutes_to_time(cur_start), minutes_to_time(cur_end),
                                          cur_rec, cur_loc))
            cur_start, cur_end, cur_loc, cur_rec = s, e, w.location or None, w.is_recurring
        out.append(AvailabilityWindow(pid, day, minutes_to_time(cur_start), minutes_to_time(cur_end),
                                      cur_rec, cur_loc))
    return out


def find_available_slots(
    student_windows: Sequence[AvailabilityWindow],
    staff_windows: Sequence[AvailabilityWindow],
    cfg: AppConfig = DEFAULT_CONFIG,
    merge: Optional[bool] = None,
) -> List[Slot]:
    """
    Common free time between a student and a staff member, per weekday.

    Every student window is crossed with every staff window on the same day and
    overlaps shorter than ``cfg.matching.min_slot_minutes`` are dropped. Windows
    are not merged unless asked to, so overlapping input windows can yield
    several slots covering the same wall-clock time.
    """
    if merge is None:
        merge = cfg.matching.merge_overlapping_windows
    if merge:
        student_windows = merge_windows(student_windows)
        staff_windows = merge_windows(staff_windows)

    if not student_windows or not staff_windows:
        return []

    student_by_day = windows_by_day(student_windows)
    staff_by_day = windows_by_day(staff_windows)

    slots: List[Slot] = []
    for day in range(7):
        for sw in student_by_day.get(day, []):
            for tw in staff_by_day.get(day, []):
                ov = overlap(time_to_minutes(sw.start_time), time_to_minutes(sw.end_time),
                             time_to_minutes(tw.start_time), time_to_minutes(tw.end_time))
                if ov is None:
                    continue
                start, end = ov
                if end - start < cfg.matching.min_slot_minutes:
                    continue
                # staff location wins, then student's, else left for the caller
                location = tw.location or sw.location or None
                slots.append(Slot(day=day, start=minutes_to_time(start), end=minutes_to_time(end),
                                  location=location))
    return slots


def has_common_slot(
    student_windows: Sequence[AvailabilityWindow],
    staff_windows: Sequence[AvailabilityWindow],
    cfg: AppConfig = DEFAULT_CONFIG,
) -> bool:
    return bool(find_available_slots(student_windows, staff_windows, cfg))
