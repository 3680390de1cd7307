# pairing_core/domain/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple


class Role(str, Enum):
    STUDENT = "STUDENT"
    STUDENT_STAFF = "STUDENT_STAFF"
    PROFESSIONAL_STAFF = "PROFESSIONAL_STAFF"
    FACULTY = "FACULTY"
    ADMIN = "ADMIN"


class MeetingType(str, Enum):
    LEARNING_STRATEGIST = "LEARNING_STRATEGIST"
    COMBO = "COMBO"
    VOCATIONAL_COACH = "VOCATIONAL_COACH"
    SOCIAL_COACH = "SOCIAL_COACH"
    ACADEMIC_COACH = "ACADEMIC_COACH"
    CHECK_IN = "CHECK_IN"


class MeetingStatus(str, Enum):
    SCHEDULED = "scheduled"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class ConflictPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ConflictStatus(str, Enum):
    OPEN = "open"
    RESOLVED = "resolved"


class Modality(str, Enum):
    VIRTUAL = "VIRTUAL"
    IN_PERSON = "IN_PERSON"


STAFF_ROLES = (Role.STUDENT_STAFF, Role.PROFESSIONAL_STAFF)


@dataclass(frozen=True)
class Person:
    id: int
    role: Role
    is_remote: bool = False
    first_name: str = ""
    last_name: str = ""

    @property
    def display_name(self) -> str:
        name = f"{self.first_name} {self.last_name}".strip()
        return name or f"#{self.id}"


@dataclass(frozen=True)
class Subject:
    id: int
    name: str
    code: str


@dataclass(frozen=True)
class Expertise:
    """staff -> subject (supply)"""
    staff_id: int
    subject_id: int
    proficiency_level: int  # 1..5


@dataclass(frozen=True)
class Need:
    """student -> subject (demand)"""
    student_id: int
    subject_id: int
    priority_level: int  # 1..5


@dataclass(frozen=True)
class AvailabilityWindow:
    person_id: int
    day_of_week: int  # 0=Sunday .. 6=Saturday
    start_time: str   # "HH:MM"
    end_time: str
    is_recurring: bool = True
    location: Optional[str] = None


@dataclass(frozen=True)
class Meeting:
    student_id: int
    staff_id: int
    meeting_type: MeetingType
    date: date
    start_time: str
    end_time: str
    location: str = ""
    is_virtual: bool = False
    status: MeetingStatus = MeetingStatus.SCHEDULED
    subject_id: Optional[int] = None
    id: Optional[int] = None

    def participants(self) -> Tuple[int, int]:
        return (self.student_id, self.staff_id)


@dataclass(frozen=True)
class Conflict:
    description: str
    priority: ConflictPriority
    status: ConflictStatus = ConflictStatus.OPEN
    related_user_id: Optional[int] = None
    related_meeting_id: Optional[int] = None
    assigned_to_id: Optional[int] = None
    reported_by_id: Optional[int] = None
    resolved_by_id: Optional[int] = None
    created_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    id: Optional[int] = None

    @property
    def is_open(self) -> bool:
        return self.status == ConflictStatus.OPEN


@dataclass(frozen=True)
class Notification:
    message: str
    related_entity_id: Optional[int]
    type: str = "PAIRING_ISSUE"
    priority: str = "HIGH"
    related_entity_type: str = "MEETING"
    tags: Tuple[str, ...] = ()
    user_id: Optional[int] = None
    read: bool = False
    created_at: Optional[datetime] = None
    id: Optional[int] = None


@dataclass(frozen=True)
class Slot:
    """A usable common window between two people"""
    day: int
    start: str
    end: str
    location: Optional[str] = None


@dataclass
class ConflictCheck:
    has_conflict: bool
    colliding: List[Meeting] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.has_conflict


@dataclass(frozen=True)
class Placement:
    location: str
    is_virtual: bool


@dataclass
class AlternativeStaffResult:
    success: bool
    candidates: List[Person] = field(default_factory=list)
    message: Optional[str] = None
    reason: Optional[str] = None  # "unknown_expertise" | "no_candidates"


@dataclass(frozen=True)
class Escalation:
    conflict: Conflict
    notification: Notification


@dataclass
class InputData:
    people: Dict[int, Person]                   # id -> Person
    subjects: Dict[int, Subject]                # id -> Subject
    expertise: List[Expertise]
    needs: List[Need]
    availability: List[AvailabilityWindow]
    meetings: List[Meeting] = field(default_factory=list)
    conflicts: List[Conflict] = field(default_factory=list)
