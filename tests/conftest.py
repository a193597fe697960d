"""Pytest configuration and shared fixtures for coursecal tests."""
from typing import Any

import pytest

from coursecal.models import BlockedDateRange, CourseDefinition, Semester
from coursecal.store import MemoryDocumentStore


@pytest.fixture
def course_record() -> dict[str, Any]:
    return {
        "id": "CS101",
        "courseCode": "CS101",
        "courseName": "Intro to Programming",
        "lecturerId": "L1",
        "roomCode": "R101",
        "semesterCode": "S2025A",
        "hours": [{"day": "Mon", "start": "09:00", "end": "10:30"}],
        "notes": "Bring a laptop",
        "link": "https://meet.example.com/cs101",
    }


@pytest.fixture
def year_record() -> dict[str, Any]:
    return {
        "id": "Y2025",
        "yearCode": "Y2025",
        "yearNumber": "2025",
        "startDate": "2025-01-01",
        "endDate": "2025-12-31",
        "semesters": [
            {
                "semesterCode": "S2025A",
                "semesterNumber": 1,
                "startDate": "2025-04-01",
                "endDate": "2025-04-30",
            },
        ],
    }


@pytest.fixture
def holiday_record() -> dict[str, Any]:
    return {
        "id": "H1",
        "holidayCode": "H1",
        "holidayName": "Spring Holiday",
        "startDate": "2025-04-07",
        "endDate": "2025-04-07",
    }


@pytest.fixture
def course(course_record) -> CourseDefinition:
    return CourseDefinition.from_dict(course_record)


@pytest.fixture
def semester(year_record) -> Semester:
    return Semester.from_dict(year_record["semesters"][0], year_code="Y2025")


@pytest.fixture
def holidays(holiday_record) -> list[BlockedDateRange]:
    return [BlockedDateRange.from_dict(holiday_record, kind="holiday")]


@pytest.fixture
def store_data(course_record, year_record, holiday_record) -> dict[str, list[dict[str, Any]]]:
    return {
        "courses": [course_record],
        "years": [year_record],
        "holidays": [holiday_record],
        "vacations": [],
        "lecturers": [{"id": "L1", "name": "Dr. Ada Lovelace"}],
        "sites": [
            {
                "id": "MAIN",
                "siteCode": "MAIN",
                "siteName": "Main Campus",
                "rooms": [{"roomCode": "R101", "roomName": "Lecture Hall 1"}],
            }
        ],
        "events": [],
        "tasks": [],
        "studentEvents": [],
        "coursesMeetings": [],
    }


@pytest.fixture
def store(store_data) -> MemoryDocumentStore:
    return MemoryDocumentStore(store_data)
