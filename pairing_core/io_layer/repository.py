# pairing_core/io_layer/repository.py
from __future__ import annotations

import itertools
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import date
from typing import Dict, List, Optional

from pairing_core.domain.models import (
    AvailabilityWindow, Conflict, ConflictStatus, Expertise, InputData, Meeting, Need, Notification, Person, Role,
    Subject,
)
from pairing_core.domain.timegrid import as_date


class Repository(ABC):
    """
    Narrow persistence seam the scheduling service talks through.
    Implementations return stored snapshots; inserts assign the id.
    """

    @abstractmethod
    def get_person(self, person_id: int) -> Optional[Person]: ...

    @abstractmethod
    def list_people(self, role: Optional[Role] = None) -> List[Person]: ...

    @abstractmethod
    def list_subjects(self) -> List[Subject]: ...

    @abstractmethod
    def list_expertise(self, staff_id: Optional[int] = None) -> List[Expertise]: ...

    @abstractmethod
    def list_needs(self, student_id: Optional[int] = None) -> List[Need]: ...

    @abstractmethod
    def list_availability(self, person_id: Optional[int] = None) -> List[AvailabilityWindow]: ...

    @abstractmethod
    def get_meeting(self, meeting_id: int) -> Optional[Meeting]: ...

    @abstractmethod
    def list_meetings(self, on: Optional[date] = None, participant_id: Optional[int] = None) -> List[Meeting]: ...

    @abstractmethod
    def insert_meeting(self, meeting: Meeting) -> Meeting: ...

    @abstractmethod
    def update_meeting(self, meeting: Meeting) -> Meeting: ...

    @abstractmethod
    def delete_meeting(self, meeting_id: int) -> bool: ...

    @abstractmethod
    def get_conflict(self, conflict_id: int) -> Optional[Conflict]: ...

    @abstractmethod
    def list_conflicts(self, status: Optional[ConflictStatus] = None) -> List[Conflict]: ...

    @abstractmethod
    def insert_conflict(self, conflict: Conflict) -> Conflict: ...

    @abstractmethod
    def update_conflict(self, conflict: Conflict) -> Conflict: ...

    @abstractmethod
    def insert_notification(self, notification: Notification) -> Notification: ...

    @abstractmethod
    def list_notifications(self) -> List[Notification]: ...


class InMemoryRepository(Repository):
    """Dict-backed store with auto-incrementing integer ids."""

    def __init__(self, data: Optional[InputData] = None):
        self._people: Dict[int, Person] = {}
        self._subjects: Dict[int, Subject] = {}
        self._expertise: List[Expertise] = []
        self._needs: List[Need] = []
        self._availability: List[AvailabilityWindow] = []
        self._meetings: Dict[int, Meeting] = {}
        self._conflicts: Dict[int, Conflict] = {}
        self._notifications: Dict[int, Notification] = {}
        self._meeting_ids = itertools.count(1)
        self._conflict_ids = itertools.count(1)
        self._notification_ids = itertools.count(1)
        if data is not None:
            self.load(data)

    def load(self, data: InputData) -> None:
        self._people.update(data.people)
        self._subjects.update(data.subjects)
        self._expertise.extend(data.expertise)
        self._needs.extend(data.needs)
        self._availability.extend(data.availability)
        self._seed(self._meetings, data.meetings, self._meeting_ids, "meeting")
        self._seed(self._conflicts, data.conflicts, self._conflict_ids, "conflict")

    @staticmethod
    def _next_id(counter, taken) -> int:
        nid = next(counter)
        while nid in taken:
            nid = next(counter)
        return nid

    def _seed(self, table: Dict[int, object], items, counter, kind: str) -> None:
        """Explicit ids are reserved up front; rows without one get the next free id."""
        reserved = {i.id for i in items if i.id is not None}
        for item in items:
            if item.id is None:
                item = replace(item, id=self._next_id(counter, reserved.union(table)))
            elif item.id in table:
                raise ValueError(f"Duplicate {kind} id: {item.id}")
            table[item.id] = item

    def _store_with_id(self, table: Dict[int, object], item, counter):
        item = replace(item, id=self._next_id(counter, table))
        table[item.id] = item
        return item

    # people / reference data
    def add_person(self, person: Person) -> Person:
        self._people[person.id] = person
        return person

    def add_subject(self, subject: Subject) -> Subject:
        self._subjects[subject.id] = subject
        return subject

    def add_expertise(self, edge: Expertise) -> Expertise:
        self._expertise.append(edge)
        return edge

    def add_need(self, edge: Need) -> Need:
        self._needs.append(edge)
        return edge

    def add_availability(self, window: AvailabilityWindow) -> AvailabilityWindow:
        self._availability.append(window)
        return window

    def get_person(self, person_id: int) -> Optional[Person]:
        return self._people.get(person_id)

    def list_people(self, role: Optional[Role] = None) -> List[Person]:
        return [p for p in self._people.values() if role is None or p.role == role]

    def list_subjects(self) -> List[Subject]:
        return list(self._subjects.values())

    def list_expertise(self, staff_id: Optional[int] = None) -> List[Expertise]:
        return [e for e in self._expertise if staff_id is None or e.staff_id == staff_id]

    def list_needs(self, student_id: Optional[int] = None) -> List[Need]:
        return [n for n in self._needs if student_id is None or n.student_id == student_id]

    def list_availability(self, person_id: Optional[int] = None) -> List[AvailabilityWindow]:
        return [w for w in self._availability if person_id is None or w.person_id == person_id]

    # meetings
    def get_meeting(self, meeting_id: int) -> Optional[Meeting]:
        return self._meetings.get(meeting_id)

    def list_meetings(self, on: Optional[date] = None, participant_id: Optional[int] = None) -> List[Meeting]:
        out = []
        for m in self._meetings.values():
            if on is not None and as_date(m.date) != as_date(on):
                continue
            if participant_id is not None and participant_id not in m.participants():
                continue
            out.append(m)
        return out

    def insert_meeting(self, meeting: Meeting) -> Meeting:
        return self._store_with_id(self._meetings, replace(meeting, id=None), self._meeting_ids)

    def update_meeting(self, meeting: Meeting) -> Meeting:
        if meeting.id not in self._meetings:
            raise KeyError(f"Unknown meeting id: {meeting.id}")
        self._meetings[meeting.id] = meeting
        return meeting

    def delete_meeting(self, meeting_id: int) -> bool:
        return self._meetings.pop(meeting_id, None) is not None

    # conflicts / notifications
    def get_conflict(self, conflict_id: int) -> Optional[Conflict]:
        return self._conflicts.get(conflict_id)

    def list_conflicts(self, status: Optional[ConflictStatus] = None) -> List[Conflict]:
        return [c for c in self._conflicts.values() if status is None or c.status == status]

    def insert_conflict(self, conflict: Conflict) -> Conflict:
        return self._store_with_id(self._conflicts, replace(conflict, id=None), self._conflict_ids)

    def update_conflict(self, conflict: Conflict) -> Conflict:
        if conflict.id not in self._conflicts:
            raise KeyError(f"Unknown conflict id: {conflict.id}")
        self._conflicts[conflict.id] = conflict
        return conflict

    def insert_notification(self, notification: Notification) -> Notification:
        return self._store_with_id(self._notifications, replace(notification, id=None), self._notification_ids)

    def list_notifications(self) -> List[Notification]:
        return list(self._notifications.values())
