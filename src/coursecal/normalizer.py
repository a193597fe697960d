"""Transforms from stored records to the single CalendarEvent shape.

Every transform takes one raw record and returns a CalendarEvent, or None
when the record lacks what its kind requires. Malformed records are dropped
here so one bad document never breaks a whole collection.

Date conventions:

* all-day events carry dates; a multi-day event ends on the day *after*
  its declared last day, a single-day event has no end.
* timed events carry date-times and always have an end; a missing or
  unusable end time falls back to start plus the default duration.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Mapping
from typing import Any

from .const import DEFAULT_DURATION_MINUTES, DEFAULT_TASK_DUE_TIME, EVENT_ICONS
from .exceptions import MalformedRecordError
from .models import (
    BlockedDateRange,
    CalendarEvent,
    EventKind,
    GeneralEvent,
    MeetingInstance,
    PersonalEvent,
    Task,
    Year,
)
from .utils import combine

_LOGGER = logging.getLogger(__name__)

DEFAULT_DURATION = datetime.timedelta(minutes=DEFAULT_DURATION_MINUTES)


def exclusive_end_date(start: datetime.date, end: datetime.date | None) -> datetime.date | None:
    """Return the exclusive end of an all-day range, None for a single day."""
    if end is None or end <= start:
        return None
    return end + datetime.timedelta(days=1)


def timed_bounds(
    start_date: datetime.date,
    start_hour: str | None,
    end_date: datetime.date | None,
    end_hour: str | None,
    default_duration: datetime.timedelta = DEFAULT_DURATION,
) -> tuple[datetime.datetime, datetime.datetime] | None:
    """Build start/end date-times; None if the start itself is unusable."""
    start = combine(start_date, start_hour)
    if start is None:
        return None
    end = combine(end_date or start_date, end_hour)
    if end is None or end <= start:
        end = start + default_duration
    return start, end


def _title(kind: EventKind, text: str) -> str:
    return f"{EVENT_ICONS[kind.value]} {text}"


def _dropped(kind: EventKind, error: MalformedRecordError, raw: dict[str, Any]) -> None:
    _LOGGER.debug("Dropping %s record %s: %s", kind.value, raw.get("id"), error)


def normalize_course_meeting(
    raw: dict[str, Any],
    lecturer_names: Mapping[str, str] | None = None,
    default_duration: datetime.timedelta = DEFAULT_DURATION,
) -> CalendarEvent | None:
    kind = EventKind.COURSE_MEETING
    try:
        meeting = MeetingInstance.from_dict(raw)
    except MalformedRecordError as e:
        _dropped(kind, e, raw)
        return None

    bounds = timed_bounds(meeting.date, meeting.start_hour, None, meeting.end_hour, default_duration)
    if bounds is None:
        _LOGGER.warning("Skipping meeting %s: invalid start time %r", meeting.id, meeting.start_hour)
        return None

    props = {
        **raw,
        "courseCode": meeting.course_code,
        "date": meeting.date.isoformat(),
        "startHour": meeting.start_hour,
        "endHour": meeting.end_hour,
        "roomCode": meeting.room_code,
        "lecturerId": meeting.lecturer_id,
        "semesterCode": meeting.semester_code,
        "notes": meeting.notes,
        "link": meeting.link,
    }
    lecturer_name = (lecturer_names or {}).get(meeting.lecturer_id) if meeting.lecturer_id else None
    if lecturer_name:
        props["lecturerName"] = lecturer_name

    return CalendarEvent(
        _raw=raw,
        id=meeting.id,
        title=_title(kind, meeting.title or meeting.course_code),
        start=bounds[0],
        end=bounds[1],
        all_day=False,
        type=kind,
        extended_props=props,
    )


def _normalize_dated_event(
    kind: EventKind,
    event: GeneralEvent,
    raw: dict[str, Any],
    default_duration: datetime.timedelta,
) -> CalendarEvent | None:
    props = {**raw, "allDay": event.all_day}
    if event.all_day:
        return CalendarEvent(
            _raw=raw,
            id=event.event_code,
            title=_title(kind, event.event_name),
            start=event.start_date,
            end=exclusive_end_date(event.start_date, event.end_date),
            all_day=True,
            type=kind,
            extended_props=props,
        )

    bounds = timed_bounds(event.start_date, event.start_hour, event.end_date, event.end_hour, default_duration)
    if bounds is None:
        _LOGGER.warning(
            "Skipping %s %s: timed event without a valid start hour (%r)",
            kind.value,
            event.event_code,
            event.start_hour,
        )
        return None
    return CalendarEvent(
        _raw=raw,
        id=event.event_code,
        title=_title(kind, event.event_name),
        start=bounds[0],
        end=bounds[1],
        all_day=False,
        type=kind,
        extended_props=props,
    )


def normalize_general_event(
    raw: dict[str, Any],
    default_duration: datetime.timedelta = DEFAULT_DURATION,
) -> CalendarEvent | None:
    try:
        event = GeneralEvent.from_dict(raw)
    except MalformedRecordError as e:
        _dropped(EventKind.EVENT, e, raw)
        return None
    return _normalize_dated_event(EventKind.EVENT, event, raw, default_duration)


def normalize_personal_event(
    raw: dict[str, Any],
    default_duration: datetime.timedelta = DEFAULT_DURATION,
) -> CalendarEvent | None:
    try:
        event = PersonalEvent.from_dict(raw)
    except MalformedRecordError as e:
        _dropped(EventKind.STUDENT_EVENT, e, raw)
        return None
    return _normalize_dated_event(EventKind.STUDENT_EVENT, event, raw, default_duration)


def _normalize_blocked_range(raw: dict[str, Any], kind: EventKind) -> CalendarEvent | None:
    try:
        blocked = BlockedDateRange.from_dict(raw, kind=kind.value)
    except MalformedRecordError as e:
        _dropped(kind, e, raw)
        return None
    if blocked.start_date is None:
        _LOGGER.debug("Dropping %s record %s: no start date", kind.value, blocked.code)
        return None
    return CalendarEvent(
        _raw=raw,
        id=blocked.code,
        title=_title(kind, blocked.name),
        start=blocked.start_date,
        end=exclusive_end_date(blocked.start_date, blocked.end_date),
        all_day=True,
        type=kind,
        extended_props=dict(raw),
    )


def normalize_holiday(raw: dict[str, Any]) -> CalendarEvent | None:
    return _normalize_blocked_range(raw, EventKind.HOLIDAY)


def normalize_vacation(raw: dict[str, Any]) -> CalendarEvent | None:
    return _normalize_blocked_range(raw, EventKind.VACATION)


def normalize_task(
    raw: dict[str, Any],
    due_time: str = DEFAULT_TASK_DUE_TIME,
) -> CalendarEvent | None:
    """A task is a due marker: it starts and ends at its submission time."""
    kind = EventKind.TASK
    try:
        task = Task.from_dict(raw)
    except MalformedRecordError as e:
        _dropped(kind, e, raw)
        return None

    due = combine(task.submission_date, task.submission_hour or due_time)
    if due is None:
        _LOGGER.warning(
            "Task %s has invalid submission hour %r; using %s",
            task.assignment_code,
            task.submission_hour,
            due_time,
        )
        due = combine(task.submission_date, due_time)
    if due is None:
        return None
    return CalendarEvent(
        _raw=raw,
        id=task.assignment_code,
        title=_title(kind, f"Due: {task.assignment_name}"),
        start=due,
        end=due,
        all_day=False,
        type=kind,
        extended_props={**raw, "due": True},
    )


def _marker(
    kind: EventKind,
    marker_id: str,
    text: str,
    day: datetime.date,
    props: dict[str, Any],
    raw: dict[str, Any],
) -> CalendarEvent:
    return CalendarEvent(
        _raw=raw,
        id=marker_id,
        title=_title(kind, text),
        start=day,
        end=None,
        all_day=True,
        type=kind,
        extended_props=props,
    )


def normalize_year_markers(raw: dict[str, Any]) -> list[CalendarEvent]:
    """Emit start and end boundary markers for a year and each of its semesters."""
    try:
        year = Year.from_dict(raw)
    except MalformedRecordError as e:
        _dropped(EventKind.YEAR_MARKER, e, raw)
        return []

    year_props = {k: v for k, v in raw.items() if k != "semesters"}
    markers = []
    if year.start_date:
        markers.append(_marker(EventKind.YEAR_MARKER, f"y-start-{year.year_code}",
                               f"Year {year.year_number} Starts", year.start_date, year_props, raw))
    if year.end_date:
        markers.append(_marker(EventKind.YEAR_MARKER, f"y-end-{year.year_code}",
                               f"Year {year.year_number} Ends", year.end_date, year_props, raw))

    for semester in year.semesters:
        props = {**(semester._raw or {}), "yearCode": year.year_code}
        label = f"Sem. {semester.semester_number} ({year.year_number})"
        if semester.start_date:
            markers.append(_marker(EventKind.SEMESTER_MARKER, f"s-start-{semester.semester_code}",
                                   f"{label} Starts", semester.start_date, props, raw))
        if semester.end_date:
            markers.append(_marker(EventKind.SEMESTER_MARKER, f"s-end-{semester.semester_code}",
                                   f"{label} Ends", semester.end_date, props, raw))
    return markers
