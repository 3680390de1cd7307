from datetime import date

import pandas as pd
import pytest

from pairing_core.domain.models import ConflictPriority, ConflictStatus, MeetingStatus, MeetingType, Role
from pairing_core.io_layer.xlsx_reader import XlsxReader
from workbook_factory import roster_sheets, write_workbook


def test_read_roster(tmp_path):
    data = XlsxReader().read(write_workbook(tmp_path / "roster.xlsx"))

    assert sorted(data.people) == [1, 10, 11, 20, 21, 23]
    assert data.people[11].role == Role.STUDENT
    assert data.people[11].is_remote is True
    assert data.people[20].display_name == "Ada Math"
    assert data.subjects[1].code == "MATH"
    assert len(data.expertise) == 3 and data.needs[0].priority_level == 5

    windows = {w.person_id: w for w in data.availability}
    assert windows[10].location == "Library"
    assert windows[21].location is None
    assert windows[20].start_time == "09:30"
    assert windows[20].is_recurring is True

    m = data.meetings[0]
    assert m.id == 1
    assert m.date == date(2024, 3, 4)
    assert m.meeting_type == MeetingType.LEARNING_STRATEGIST
    assert m.status == MeetingStatus.SCHEDULED
    assert data.conflicts == []


def test_optional_sheets_may_be_missing(tmp_path):
    sheets = {"people": roster_sheets()["people"]}
    data = XlsxReader().read(write_workbook(tmp_path / "people_only.xlsx", sheets))
    assert len(data.people) == 6
    assert data.availability == [] and data.meetings == []


def test_people_sheet_required(tmp_path):
    sheets = roster_sheets()
    del sheets["people"]
    with pytest.raises(ValueError, match="people"):
        XlsxReader().read(write_workbook(tmp_path / "no_people.xlsx", sheets))


def test_missing_column(tmp_path):
    sheets = roster_sheets()
    sheets["availability"] = sheets["availability"].drop(columns=["end_time"])
    with pytest.raises(ValueError, match="end_time"):
        XlsxReader().read(write_workbook(tmp_path / "bad.xlsx", sheets))


def test_unknown_meeting_type(tmp_path):
    sheets = roster_sheets()
    sheets["meetings"].loc[0, "meeting_type"] = "LUNCH"
    with pytest.raises(ValueError, match="MeetingType"):
        XlsxReader().read(write_workbook(tmp_path / "bad_type.xlsx", sheets))


def test_duplicate_person(tmp_path):
    sheets = roster_sheets()
    sheets["people"] = pd.concat([sheets["people"], sheets["people"].iloc[[0]]], ignore_index=True)
    with pytest.raises(ValueError, match="Duplicate"):
        XlsxReader().read(write_workbook(tmp_path / "dup.xlsx", sheets))


def test_conflicts_sheet(tmp_path):
    sheets = roster_sheets()
    sheets["conflicts"] = pd.DataFrame([
        dict(id=4, description="Room 101 double booked", priority="HIGH", status="resolved",
             related_meeting_id=1, resolved_by_id=1, created_at="2024-03-01 09:00", resolved_at="2024-03-02 10:00"),
        dict(id=None, description="Laptop missing", priority="low", status=None,
             related_meeting_id=None, resolved_by_id=None, created_at=None, resolved_at=None),
    ])
    conflicts = XlsxReader().read(write_workbook(tmp_path / "conflicts.xlsx", sheets)).conflicts

    assert conflicts[0].id == 4
    assert conflicts[0].priority == ConflictPriority.HIGH
    assert conflicts[0].status == ConflictStatus.RESOLVED
    assert conflicts[0].resolved_at.day == 2
    assert conflicts[1].id is None
    assert conflicts[1].status == ConflictStatus.OPEN
    assert conflicts[1].created_at is None
