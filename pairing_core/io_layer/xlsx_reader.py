# pairing_core/io_layer/xlsx_reader.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from typing import Dict, List, Optional

import pandas as pd
from openpyxl import load_workbook

from pairing_core.app_logger import get_logger
from pairing_core.config import DEFAULT_CONFIG, AppConfig
from pairing_core.domain.models import (
    AvailabilityWindow, Conflict, ConflictPriority, ConflictStatus, Expertise, InputData, Meeting, MeetingStatus,
    MeetingType, Need, Person, Role, Subject,
)

log = get_logger("xlsx_reader")


def _blank(v) -> bool:
    return v is None or (not isinstance(v, str) and pd.isna(v)) or (isinstance(v, str) and not v.strip())


def _int(v) -> int:
    return int(float(v)) if isinstance(v, str) else int(v)


def _opt_int(v) -> Optional[int]:
    return None if _blank(v) else _int(v)


def _opt_str(v) -> Optional[str]:
    return None if _blank(v) else str(v).strip()


def _bool(v, default: bool = False) -> bool:
    if _blank(v):
        return default
    if isinstance(v, str):
        return v.strip().lower() in ("1", "true", "yes", "y")
    return bool(v)


def _time_str(v) -> str:
    # Excel may hand us a time/datetime instead of the "HH:MM" text
    if isinstance(v, (datetime, time)):
        return v.strftime("%H:%M")
    return str(v).strip()


def _opt_datetime(v) -> Optional[datetime]:
    return None if _blank(v) else pd.to_datetime(v).to_pydatetime()


@dataclass(frozen=True)
class XlsxReader:
    cfg: AppConfig = DEFAULT_CONFIG

    def _frame(self, path: str, sheets: List[str], sheet: str, required_cols: List[str],
               optional: bool = True) -> pd.DataFrame:
        if sheet not in sheets:
            if optional:
                return pd.DataFrame(columns=required_cols)
            raise ValueError(f"{path} has no '{sheet}' sheet.")
        df = pd.read_excel(path, sheet_name=sheet)
        for c in required_cols:
            if c not in df.columns:
                raise ValueError(f"{path}:{sheet} is missing column {c}.")
        return df

    @staticmethod
    def _enum(enum_cls, value, where: str):
        try:
            return enum_cls(str(value).strip())
        except ValueError:
            raise ValueError(f"Unknown {enum_cls.__name__} value {value!r} in {where}") from None

    def read_people(self, path: str, sheets: List[str]) -> Dict[int, Person]:
        df = self._frame(path, sheets, self.cfg.workbook.people_sheet, ["id", "role"], optional=False)
        people: Dict[int, Person] = {}
        for _, row in df.iterrows():
            pid = _int(row["id"])
            if pid in people:
                raise ValueError(f"Duplicate person id in {path}: {pid}")
            people[pid] = Person(
                id=pid,
                role=self._enum(Role, str(row["role"]).upper(), f"{path}:people id={pid}"),
                is_remote=_bool(row.get("is_remote")),
                first_name=_opt_str(row.get("first_name")) or "",
                last_name=_opt_str(row.get("last_name")) or "",
            )
        return people

    def read_subjects(self, path: str, sheets: List[str]) -> Dict[int, Subject]:
        df = self._frame(path, sheets, self.cfg.workbook.subjects_sheet, ["id", "name", "code"])
        return {
            _int(row["id"]): Subject(id=_int(row["id"]), name=str(row["name"]).strip(), code=str(row["code"]).strip())
            for _, row in df.iterrows()
        }

    def read_expertise(self, path: str, sheets: List[str]) -> List[Expertise]:
        df = self._frame(path, sheets, self.cfg.workbook.expertise_sheet,
                         ["staff_id", "subject_id", "proficiency_level"])
        return [Expertise(_int(r["staff_id"]), _int(r["subject_id"]), _int(r["proficiency_level"]))
                for _, r in df.iterrows()]

    def read_needs(self, path: str, sheets: List[str]) -> List[Need]:
        df = self._frame(path, sheets, self.cfg.workbook.needs_sheet, ["student_id", "subject_id", "priority_level"])
        return [Need(_int(r["student_id"]), _int(r["subject_id"]), _int(r["priority_level"]))
                for _, r in df.iterrows()]

    def read_availability(self, path: str, sheets: List[str]) -> List[AvailabilityWindow]:
        df = self._frame(path, sheets, self.cfg.workbook.availability_sheet,
                         ["person_id", "day_of_week", "start_time", "end_time"])
        out: List[AvailabilityWindow] = []
        for _, r in df.iterrows():
            out.append(AvailabilityWindow(
                person_id=_int(r["person_id"]),
                day_of_week=_int(r["day_of_week"]),
                start_time=_time_str(r["start_time"]),
                end_time=_time_str(r["end_time"]),
                is_recurring=_bool(r.get("is_recurring"), default=True),
                location=_opt_str(r.get("location")),
            ))
        return out

    def read_meetings(self, path: str, sheets: List[str]) -> List[Meeting]:
        df = self._frame(path, sheets, self.cfg.workbook.meetings_sheet,
                         ["student_id", "staff_id", "meeting_type", "date", "start_time", "end_time"])
        out: List[Meeting] = []
        for idx, r in df.iterrows():
            where = f"{path}:meetings row {idx + 2}"
            status = _opt_str(r.get("status")) or MeetingStatus.SCHEDULED.value
            out.append(Meeting(
                id=_opt_int(r.get("id")),
                student_id=_int(r["student_id"]),
                staff_id=_int(r["staff_id"]),
                meeting_type=self._enum(MeetingType, str(r["meeting_type"]).upper(), where),
                date=pd.to_datetime(r["date"]).date(),
                start_time=_time_str(r["start_time"]),
                end_time=_time_str(r["end_time"]),
                location=_opt_str(r.get("location")) or "",
                is_virtual=_bool(r.get("is_virtual")),
                status=self._enum(MeetingStatus, status.lower(), where),
                subject_id=_opt_int(r.get("subject_id")),
            ))
        return out

    def read_conflicts(self, path: str, sheets: List[str]) -> List[Conflict]:
        df = self._frame(path, sheets, self.cfg.workbook.conflicts_sheet, ["description", "priority"])
        out: List[Conflict] = []
        for idx, r in df.iterrows():
            where = f"{path}:conflicts row {idx + 2}"
            status = _opt_str(r.get("status")) or ConflictStatus.OPEN.value
            out.append(Conflict(
                id=_opt_int(r.get("id")),
                description=str(r["description"]),
                priority=self._enum(ConflictPriority, str(r["priority"]).lower(), where),
                status=self._enum(ConflictStatus, status.lower(), where),
                related_user_id=_opt_int(r.get("related_user_id")),
                related_meeting_id=_opt_int(r.get("related_meeting_id")),
                assigned_to_id=_opt_int(r.get("assigned_to_id")),
                reported_by_id=_opt_int(r.get("reported_by_id")),
                resolved_by_id=_opt_int(r.get("resolved_by_id")),
                created_at=_opt_datetime(r.get("created_at")),
                resolved_at=_opt_datetime(r.get("resolved_at")),
            ))
        return out

    def read(self, path: str) -> InputData:
        wb = load_workbook(path, read_only=True)
        sheets = list(wb.sheetnames)
        wb.close()

        data = InputData(
            people=self.read_people(path, sheets),
            subjects=self.read_subjects(path, sheets),
            expertise=self.read_expertise(path, sheets),
            needs=self.read_needs(path, sheets),
            availability=self.read_availability(path, sheets),
            meetings=self.read_meetings(path, sheets),
            conflicts=self.read_conflicts(path, sheets),
        )
        log.info("Loaded %s: %d people, %d windows, %d meetings",
                 path, len(data.people), len(data.availability), len(data.meetings))
        return data
