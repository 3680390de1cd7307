from __future__ import annotations

from datetime import date

import pytest

from pairing_core.domain.models import (
    AvailabilityWindow, Expertise, InputData, Meeting, MeetingType, Need, Person, Role, Subject,
)
from pairing_core.io_layer.repository import InMemoryRepository

MATH, ENGL, CS = 1, 2, 3

# 2024-03-04 is a Monday (day_of_week=1)
MONDAY = date(2024, 3, 4)


@pytest.fixture
def people():
    return {
        1: Person(1, Role.ADMIN, first_name="Sarah", last_name="Thompson"),
        10: Person(10, Role.STUDENT, first_name="Sam", last_name="Student"),
        11: Person(11, Role.STUDENT, is_remote=True, first_name="Rae", last_name="Remote"),
        20: Person(20, Role.PROFESSIONAL_STAFF, first_name="Ada", last_name="Math"),
        21: Person(21, Role.PROFESSIONAL_STAFF, first_name="Ben", last_name="English"),
        22: Person(22, Role.STUDENT_STAFF, first_name="Cy", last_name="Tutor"),
        23: Person(23, Role.PROFESSIONAL_STAFF, is_remote=True, first_name="Dee", last_name="Remote"),
        30: Person(30, Role.FACULTY, first_name="Fay", last_name="Faculty"),
    }


@pytest.fixture
def subjects():
    return {
        MATH: Subject(MATH, "Mathematics", "MATH"),
        ENGL: Subject(ENGL, "English", "ENGL"),
        CS: Subject(CS, "Computer Science", "CS"),
    }


@pytest.fixture
def expertise():
    return [
        Expertise(20, MATH, 5),
        Expertise(21, ENGL, 5),
        Expertise(22, MATH, 3),
        Expertise(23, MATH, 5),
    ]


@pytest.fixture
def needs():
    return [Need(10, MATH, 5), Need(10, ENGL, 2)]


@pytest.fixture
def availability():
    return [
        AvailabilityWindow(10, 1, "09:00", "12:00", location="Library"),
        AvailabilityWindow(20, 1, "09:30", "10:30", location="Room 101"),
        AvailabilityWindow(21, 1, "11:45", "13:00"),
        AvailabilityWindow(22, 2, "09:00", "17:00"),
        AvailabilityWindow(23, 1, "08:00", "18:00"),
    ]


@pytest.fixture
def input_data(people, subjects, expertise, needs, availability):
    return InputData(
        people=people,
        subjects=subjects,
        expertise=expertise,
        needs=needs,
        availability=availability,
        meetings=[
            Meeting(10, 20, MeetingType.LEARNING_STRATEGIST, MONDAY, "09:30", "10:00",
                    location="Room 101", subject_id=MATH, id=1),
        ],
    )


@pytest.fixture
def repo(input_data):
    return InMemoryRepository(input_data)
