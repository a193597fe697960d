"""Tests for coursecal.aggregator."""

import datetime
from unittest.mock import AsyncMock, patch

import pytest

from coursecal import aggregator as aggregator_module
from coursecal.aggregator import VisibilityAggregator
from coursecal.exceptions import ValidationError
from coursecal.lecturers import LecturerDirectory
from coursecal.models import EventKind
from coursecal.store import MemoryDocumentStore


@pytest.fixture
def calendar_data(store_data):
    data = dict(store_data)
    data["coursesMeetings"] = [
        {
            "id": "CM-CS101-2025-04-21-0900",
            "courseCode": "CS101",
            "date": "2025-04-21",
            "startHour": "09:00",
            "endHour": "10:30",
            "title": "Intro to Programming",
            "roomCode": "R101",
            "lecturerId": "L1",
        },
        {
            "id": "CM-CS101-2025-04-14-0900",
            "courseCode": "CS101",
            "date": "2025-04-14",
            "startHour": "09:00",
            "endHour": "10:30",
            "title": "Intro to Programming",
            "roomCode": "R101",
            "lecturerId": "L1",
        },
    ]
    data["events"] = [
        {
            "id": "E1",
            "eventName": "Open Day",
            "startDate": "2025-04-05",
            "endDate": "2025-04-10",
            "allDay": True,
        },
        {"id": "E-BAD", "startDate": "2025-04-05"},
    ]
    data["vacations"] = [
        {"id": "V1", "vacationName": "Summer", "startDate": "2025-07-01", "endDate": "2025-08-31"},
    ]
    data["tasks"] = [
        {
            "id": "A1",
            "assignmentName": "Essay",
            "submissionDate": "2025-04-14",
            "submissionHour": "08:00",
            "courseCode": "CS101",
        },
    ]
    data["studentEvents"] = [
        {"id": "P1", "eventName": "Dentist", "startDate": "2025-04-15", "allDay": True, "studentId": "U1"},
        {"id": "P2", "eventName": "Gym", "startDate": "2025-04-16", "allDay": True, "studentId": "U2"},
    ]
    return data


@pytest.fixture
def calendar_store(calendar_data):
    return MemoryDocumentStore(calendar_data)


class _FailingStore(MemoryDocumentStore):
    def __init__(self, data, failing_kinds):
        super().__init__(data)
        self.failing_kinds = set(failing_kinds)

    async def fetch_all(self, kind):
        if kind in self.failing_kinds:
            raise ConnectionError(f"{kind} unavailable")
        return await super().fetch_all(kind)


def _kinds_in_order(events):
    kinds = []
    for event in events:
        if event.type not in kinds:
            kinds.append(event.type)
    return kinds


@pytest.mark.asyncio
async def test_guest_sees_public_kinds_only(calendar_store):
    events = await VisibilityAggregator(calendar_store).get_visible_events()

    assert EventKind.STUDENT_EVENT not in {e.type for e in events}
    assert _kinds_in_order(events) == [
        EventKind.COURSE_MEETING,
        EventKind.EVENT,
        EventKind.HOLIDAY,
        EventKind.VACATION,
        EventKind.TASK,
        EventKind.YEAR_MARKER,
        EventKind.SEMESTER_MARKER,
    ]


@pytest.mark.asyncio
async def test_principal_sees_only_own_personal_events(calendar_store):
    events = await VisibilityAggregator(calendar_store).get_visible_events("U1")

    personal = [e for e in events if e.type is EventKind.STUDENT_EVENT]
    assert [e.id for e in personal] == ["P1"]
    assert events[-1].id == "P1"


@pytest.mark.asyncio
async def test_events_sorted_within_kind(calendar_store):
    events = await VisibilityAggregator(calendar_store).get_visible_events()

    meetings = [e.id for e in events if e.type is EventKind.COURSE_MEETING]
    assert meetings == ["CM-CS101-2025-04-14-0900", "CM-CS101-2025-04-21-0900"]


@pytest.mark.asyncio
async def test_malformed_records_are_skipped(calendar_store):
    events = await VisibilityAggregator(calendar_store).get_visible_events()
    assert "E-BAD" not in {e.id for e in events}
    assert "E1" in {e.id for e in events}


@pytest.mark.asyncio
async def test_meetings_carry_lecturer_name(calendar_store):
    events = await VisibilityAggregator(calendar_store).get_visible_events()
    meeting = next(e for e in events if e.type is EventKind.COURSE_MEETING)
    assert meeting.extended_props["lecturerName"] == "Dr. Ada Lovelace"


@pytest.mark.asyncio
async def test_failing_kind_returns_partial_calendar(calendar_data):
    aggregator = VisibilityAggregator(_FailingStore(calendar_data, ["holidays"]))

    events = await aggregator.get_visible_events()

    assert EventKind.HOLIDAY not in {e.type for e in events}
    assert EventKind.COURSE_MEETING in {e.type for e in events}
    assert [f.kind for f in aggregator.last_failures] == ["holiday"]
    assert isinstance(aggregator.last_failures[0].cause, ConnectionError)


@pytest.mark.asyncio
async def test_failures_reset_between_calls(calendar_data):
    store = _FailingStore(calendar_data, ["tasks"])
    aggregator = VisibilityAggregator(store)
    await aggregator.get_visible_events()
    assert len(aggregator.last_failures) == 1

    store.failing_kinds.clear()
    await aggregator.get_visible_events()
    assert aggregator.last_failures == []


@pytest.mark.asyncio
async def test_lecturer_failure_degrades_meetings(calendar_data):
    aggregator = VisibilityAggregator(_FailingStore(calendar_data, ["lecturers"]))

    events = await aggregator.get_visible_events()

    meetings = [e for e in events if e.type is EventKind.COURSE_MEETING]
    assert len(meetings) == 2
    assert all("lecturerName" not in e.extended_props for e in meetings)
    assert aggregator.last_failures == []


@pytest.mark.asyncio
async def test_shared_lecturer_directory_is_reused(calendar_store):
    lecturers = LecturerDirectory(calendar_store)
    lecturers.names = AsyncMock(return_value={"L1": "Cached Name"})
    aggregator = VisibilityAggregator(calendar_store, lecturers=lecturers)

    events = await aggregator.get_visible_events()

    meeting = next(e for e in events if e.type is EventKind.COURSE_MEETING)
    assert meeting.extended_props["lecturerName"] == "Cached Name"
    lecturers.names.assert_awaited_once()


@pytest.mark.asyncio
async def test_events_in_range_filters_and_sorts(calendar_store):
    events = await VisibilityAggregator(calendar_store).get_events_in_range(
        "U1", datetime.date(2025, 4, 10), datetime.date(2025, 4, 15)
    )

    assert [e.id for e in events] == ["E1", "A1", "CM-CS101-2025-04-14-0900", "P1"]


@pytest.mark.asyncio
async def test_events_in_range_excludes_exclusive_end(calendar_store):
    events = await VisibilityAggregator(calendar_store).get_events_in_range(
        None, "2025-04-11", "2025-04-12"
    )
    assert "E1" not in {e.id for e in events}


@pytest.mark.asyncio
async def test_events_in_range_enriches_meetings_and_tasks(calendar_store):
    events = await VisibilityAggregator(calendar_store).get_events_in_range(
        None, "2025-04-14", "2025-04-14"
    )

    meeting = next(e for e in events if e.type is EventKind.COURSE_MEETING)
    assert meeting.extended_props["courseName"] == "Intro to Programming"
    assert meeting.extended_props["roomName"] == "Lecture Hall 1"
    assert meeting.extended_props["siteName"] == "Main Campus"
    task = next(e for e in events if e.type is EventKind.TASK)
    assert task.extended_props["courseName"] == "Intro to Programming"


@pytest.mark.asyncio
async def test_events_in_range_without_sites(calendar_data):
    aggregator = VisibilityAggregator(_FailingStore(calendar_data, ["sites"]))

    events = await aggregator.get_events_in_range(None, "2025-04-14", "2025-04-14")

    meeting = next(e for e in events if e.type is EventKind.COURSE_MEETING)
    assert "roomName" not in meeting.extended_props
    assert meeting.extended_props["courseName"] == "Intro to Programming"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "start,end",
    [("2025-04-15", "2025-04-14"), ("not-a-date", "2025-04-14"), ("2025-04-14", None)],
)
async def test_events_in_range_rejects_invalid_bounds(calendar_store, start, end):
    with pytest.raises(ValidationError):
        await VisibilityAggregator(calendar_store).get_events_in_range(None, start, end)


@pytest.mark.asyncio
async def test_broken_year_does_not_hide_other_markers(calendar_data):
    calendar_data["years"] = [{"id": "Y2026", "semesters": 5}, *calendar_data["years"]]
    aggregator = VisibilityAggregator(MemoryDocumentStore(calendar_data))

    events = await aggregator.get_visible_events()

    marker_ids = {e.id for e in events if e.type in (EventKind.YEAR_MARKER, EventKind.SEMESTER_MARKER)}
    assert marker_ids == {"y-start-Y2025", "y-end-Y2025", "s-start-S2025A", "s-end-S2025A"}
    assert aggregator.last_failures == []


@pytest.mark.asyncio
async def test_record_that_breaks_normalizer_is_dropped_alone(calendar_data):
    original = aggregator_module.normalize_holiday

    def flaky(raw):
        if raw["id"] == "H1":
            raise TypeError("unexpected field shape")
        return original(raw)

    calendar_data["holidays"] = [
        *calendar_data["holidays"],
        {"id": "H2", "holidayName": "Second Holiday", "startDate": "2025-05-01", "endDate": "2025-05-01"},
    ]
    aggregator = VisibilityAggregator(MemoryDocumentStore(calendar_data))
    with patch.object(aggregator_module, "normalize_holiday", side_effect=flaky):
        events = await aggregator.get_visible_events()

    assert [e.id for e in events if e.type is EventKind.HOLIDAY] == ["H2"]
    assert aggregator.last_failures == []
