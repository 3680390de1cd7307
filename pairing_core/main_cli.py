# pairing_core/main_cli.py
from __future__ import annotations

import argparse
from datetime import date, datetime, timedelta
from typing import List, Optional

from pairing_core.app_logger import setup_logging
from pairing_core.config import DEFAULT_CONFIG
from pairing_core.domain.models import Meeting, MeetingType, Modality
from pairing_core.io_layer.paths import InputPaths
from pairing_core.io_layer.repository import InMemoryRepository
from pairing_core.io_layer.xlsx_reader import XlsxReader
from pairing_core.reporting.export_xlsx import export_result_xlsx
from pairing_core.reporting.report import (
    build_conflict_summary, build_conflict_table, build_meeting_table, build_notification_table, build_program_stats,
    build_staff_load, build_weekly_calendar,
)
from pairing_core.services.scheduling import SchedulingService
from pairing_core.validation.validator import ValidationError, validate_integrity

DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def parse_args(argv: Optional[List[str]] = None):
    p = argparse.ArgumentParser(prog="pairing-core")
    p.add_argument("--workbook", required=True, help="roster workbook (xlsx)")
    sub = p.add_subparsers(dest="command", required=True)

    m = sub.add_parser("match", help="staff qualified for a student")
    m.add_argument("--student", type=int, required=True)
    m.add_argument("--subject", type=int, default=None)
    m.add_argument("--with-availability", action="store_true", help="only staff sharing a free slot")

    s = sub.add_parser("slots", help="common free time between a student and a staff member")
    s.add_argument("--student", type=int, required=True)
    s.add_argument("--staff", type=int, required=True)
    s.add_argument("--merge-windows", action="store_true", help="merge overlapping windows first")

    r = sub.add_parser("recommend", help="suggested meeting type")
    r.add_argument("--student", type=int, required=True)
    r.add_argument("--staff", type=int, required=True)

    c = sub.add_parser("check", help="double-booking check for a proposed meeting")
    c.add_argument("--student", type=int, required=True)
    c.add_argument("--staff", type=int, required=True)
    c.add_argument("--date", required=True, help="YYYY-MM-DD")
    c.add_argument("--start", required=True, help="HH:MM")
    c.add_argument("--end", required=True, help="HH:MM")

    a = sub.add_parser("alternatives", help="replacement staff for a meeting (escalates when none)")
    a.add_argument("--meeting", type=int, required=True)
    a.add_argument("--modality", choices=[x.value for x in Modality], default=None)
    a.add_argument("--out", default="assets/output/escalations.xlsx", help="where an escalation is written")

    k = sub.add_parser("calendar", help="export the weekly calendar and summaries")
    k.add_argument("--week-start", required=True, help="YYYY-MM-DD")
    k.add_argument("--out", default="assets/output/calendar.xlsx")
    return p.parse_args(argv)


def _parse_date(value: str) -> date:
    return datetime.strptime(value, "%Y-%m-%d").date()


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging()
    cfg = DEFAULT_CONFIG
    paths = InputPaths(workbook=args.workbook, out=getattr(args, "out", None))

    try:
        data = XlsxReader(cfg=cfg).read(paths.workbook)
        for w in validate_integrity(data):
            print(f"[WARN] {w.message}")
        repo = InMemoryRepository(data)
    except (ValueError, ValidationError) as e:
        print(f"[ERROR] {e}")
        return 1

    service = SchedulingService(repository=repo, cfg=cfg)

    try:
        if args.command == "match":
            staff = service.match_staff(args.student, args.subject, with_availability=args.with_availability)
            if not staff:
                print("[RESULT] no matching staff")
                return 2
            for p in staff:
                print(f"[RESULT] {p.id}\t{p.display_name}\t{p.role.value}{' (remote)' if p.is_remote else ''}")
            return 0

        if args.command == "slots":
            slots = service.available_slots(args.student, args.staff, merge=args.merge_windows or None)
            if not slots:
                print("[RESULT] no common availability")
                return 2
            for sl in slots:
                print(f"[RESULT] {DAY_NAMES[sl.day]} {sl.start}-{sl.end} {sl.location or cfg.placement.default_location}")
            return 0

        if args.command == "recommend":
            print(f"[RESULT] {service.recommend(args.student, args.staff).value}")
            return 0

        if args.command == "check":
            proposed = Meeting(
                student_id=args.student, staff_id=args.staff, meeting_type=MeetingType.CHECK_IN,
                date=_parse_date(args.date), start_time=args.start, end_time=args.end,
            )
            check = service.check_conflict(proposed)
            if not check.has_conflict:
                print("[RESULT] OK: no conflict")
                return 0
            for m in check.colliding:
                print(f"[RESULT] conflict with meeting #{m.id} {m.start_time}-{m.end_time} "
                      f"(student {m.student_id}, staff {m.staff_id})")
            return 2

        if args.command == "alternatives":
            outcome = service.reassign_meeting(args.meeting, Modality(args.modality) if args.modality else None)
            if outcome.result.success:
                for p in outcome.result.candidates:
                    print(f"[RESULT] {p.id}\t{p.display_name}")
                return 0
            print(f"[RESULT] {outcome.result.message}")
            if outcome.escalated:
                out_path = export_result_xlsx(paths.out, {
                    "conflicts": build_conflict_table(repo.list_conflicts(), data.people),
                    "notifications": build_notification_table(repo.list_notifications()),
                })
                print(f"[WARN] escalated as conflict #{outcome.conflict.id}, written to {out_path}")
            return 2

        if args.command == "calendar":
            week_start = _parse_date(args.week_start)
            meetings = repo.list_meetings()
            stats = build_program_stats(data.people.values(), meetings, week_start)
            week = [m for m in meetings if week_start <= m.date < week_start + timedelta(days=7)]
            out_path = export_result_xlsx(paths.out, {
                "calendar": build_weekly_calendar(meetings, data.people, week_start, cfg),
                "meetings": build_meeting_table(week, data.people, data.subjects),
                "staff_load": build_staff_load(week, data.people),
                "conflicts": build_conflict_table(service.list_conflicts(), data.people),
                "conflict_summary": build_conflict_summary(repo.list_conflicts()),
            })
            print(f"[RESULT] students={stats['total_students']} staff={stats['total_staff']} "
                  f"weekly_meetings={stats['weekly_meetings']} success_rate={stats['success_rate']}%")
            print(f"[RESULT] OK: {out_path}")
            return 0
    except (ValueError, ValidationError) as e:
        print(f"[ERROR] {e}")
        return 1

    return 1


if __name__ == "__main__":
    raise SystemExit(main())
