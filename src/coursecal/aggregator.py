"""Fan-out loading of every calendar entity kind into one timeline."""

from __future__ import annotations

import asyncio
import datetime
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from .config import EngineSettings
from .const import (
    KIND_COURSES,
    KIND_EVENTS,
    KIND_HOLIDAYS,
    KIND_MEETINGS,
    KIND_SITES,
    KIND_STUDENT_EVENTS,
    KIND_TASKS,
    KIND_VACATIONS,
    KIND_YEARS,
)
from .exceptions import MalformedRecordError, PartialFetchFailure, ValidationError
from .lecturers import LecturerDirectory
from .models import CalendarEvent, EventKind, Site
from .normalizer import (
    normalize_course_meeting,
    normalize_general_event,
    normalize_holiday,
    normalize_personal_event,
    normalize_task,
    normalize_vacation,
    normalize_year_markers,
)
from .store import DocumentStore
from .utils import parse_date

_LOGGER = logging.getLogger(__name__)


def _normalize_each(
    kind: str,
    transform: Callable[[dict[str, Any]], CalendarEvent | list[CalendarEvent] | None],
    records: list[dict[str, Any]],
) -> list[CalendarEvent]:
    """Run transform on each record; a record that breaks it is dropped alone."""
    events: list[CalendarEvent] = []
    for record in records:
        try:
            result = transform(record)
        except Exception:
            record_id = record.get("id") if isinstance(record, dict) else None
            _LOGGER.warning("Dropping %s record %s: normalization failed", kind, record_id, exc_info=True)
            continue
        if isinstance(result, list):
            events.extend(result)
        elif result is not None:
            events.append(result)
    return events


class VisibilityAggregator:
    """Build the calendar a principal sees from all entity collections.

    Each kind is loaded and normalized independently; a kind that fails
    contributes no events and is recorded in ``last_failures`` instead of
    failing the whole calendar.
    """

    def __init__(
        self,
        store: DocumentStore,
        lecturers: LecturerDirectory | None = None,
        settings: EngineSettings | None = None,
    ) -> None:
        self._store = store
        self.settings = settings or EngineSettings()
        self.lecturers = lecturers or LecturerDirectory(store, ttl=self.settings.lecturer_cache_ttl)
        self.last_failures: list[PartialFetchFailure] = []

    @property
    def default_duration(self) -> datetime.timedelta:
        return datetime.timedelta(minutes=self.settings.default_duration_minutes)

    async def _lecturer_names(self) -> dict[str, str]:
        try:
            return await self.lecturers.names()
        except Exception as e:
            _LOGGER.warning("Lecturer names unavailable, meetings shown without them: %s", e)
            return {}

    async def _course_meetings(self) -> list[CalendarEvent]:
        raw_meetings, names = await asyncio.gather(
            self._store.fetch_all(KIND_MEETINGS),
            self._lecturer_names(),
        )
        return _normalize_each(
            KIND_MEETINGS,
            lambda m: normalize_course_meeting(m, names, self.default_duration),
            raw_meetings,
        )

    async def _general_events(self) -> list[CalendarEvent]:
        raw = await self._store.fetch_all(KIND_EVENTS)
        return _normalize_each(KIND_EVENTS, lambda e: normalize_general_event(e, self.default_duration), raw)

    async def _holidays(self) -> list[CalendarEvent]:
        return _normalize_each(KIND_HOLIDAYS, normalize_holiday, await self._store.fetch_all(KIND_HOLIDAYS))

    async def _vacations(self) -> list[CalendarEvent]:
        return _normalize_each(KIND_VACATIONS, normalize_vacation, await self._store.fetch_all(KIND_VACATIONS))

    async def _tasks(self) -> list[CalendarEvent]:
        raw = await self._store.fetch_all(KIND_TASKS)
        return _normalize_each(KIND_TASKS, lambda t: normalize_task(t, self.settings.task_due_time), raw)

    async def _markers(self) -> list[CalendarEvent]:
        return _normalize_each(KIND_YEARS, normalize_year_markers, await self._store.fetch_all(KIND_YEARS))

    async def _personal_events(self, principal_id: str) -> list[CalendarEvent]:
        raw = await self._store.fetch_all(KIND_STUDENT_EVENTS)
        own = [e for e in raw if str(e.get("studentId") or e.get("ownerId") or "") == principal_id]
        return _normalize_each(
            KIND_STUDENT_EVENTS,
            lambda e: normalize_personal_event(e, self.default_duration),
            own,
        )

    async def _load_kind(
        self,
        kind: str,
        loader: Callable[[], Awaitable[list[CalendarEvent]]],
        failures: list[PartialFetchFailure],
    ) -> list[CalendarEvent]:
        try:
            events = await loader()
        except Exception as e:
            failure = PartialFetchFailure(kind, e)
            _LOGGER.warning("%s; continuing without it", failure)
            failures.append(failure)
            return []
        # Stable sort keeps store order for events starting at the same moment
        events.sort(key=lambda event: event.sort_key)
        _LOGGER.debug("Loaded %d %s events", len(events), kind)
        return events

    async def get_visible_events(self, principal_id: str | None = None) -> list[CalendarEvent]:
        """Return every event visible to the principal.

        Public kinds are always included; personal events only when a
        principal is given, and only those it owns. Events are ordered by
        start within each kind; kinds are concatenated.
        """
        loaders: list[tuple[str, Callable[[], Awaitable[list[CalendarEvent]]]]] = [
            (EventKind.COURSE_MEETING.value, self._course_meetings),
            (EventKind.EVENT.value, self._general_events),
            (EventKind.HOLIDAY.value, self._holidays),
            (EventKind.VACATION.value, self._vacations),
            (EventKind.TASK.value, self._tasks),
            (EventKind.YEAR_MARKER.value, self._markers),
        ]
        if principal_id:
            loaders.append(
                (EventKind.STUDENT_EVENT.value, lambda: self._personal_events(principal_id))
            )

        failures: list[PartialFetchFailure] = []
        per_kind = await asyncio.gather(
            *(self._load_kind(kind, loader, failures) for kind, loader in loaders)
        )
        self.last_failures = failures

        events = [event for kind_events in per_kind for event in kind_events]
        _LOGGER.info(
            "Returning %d events for %s (%d kinds failed)",
            len(events),
            principal_id or "guest",
            len(failures),
        )
        return events

    async def _enrichment_lookups(self) -> tuple[dict[str, dict[str, Any]], dict[str, dict[str, Any]]]:
        courses, sites = await asyncio.gather(
            self._store.fetch_all(KIND_COURSES),
            self._store.fetch_all(KIND_SITES),
            return_exceptions=True,
        )
        courses_by_code: dict[str, dict[str, Any]] = {}
        if isinstance(courses, Exception):
            _LOGGER.warning("Courses unavailable for enrichment: %s", courses)
        else:
            courses_by_code = {str(c.get("courseCode") or c.get("id")): c for c in courses}

        rooms_by_code: dict[str, dict[str, Any]] = {}
        if isinstance(sites, Exception):
            _LOGGER.warning("Sites unavailable for enrichment: %s", sites)
        else:
            for raw_site in sites:
                try:
                    site = Site.from_dict(raw_site)
                except MalformedRecordError as e:
                    _LOGGER.debug("Skipping site record: %s", e)
                    continue
                for room in site.rooms:
                    rooms_by_code[room.room_code] = {"roomName": room.room_name, "siteName": room.site_name}
        return courses_by_code, rooms_by_code

    async def get_events_in_range(
        self,
        principal_id: str | None,
        start: datetime.date | str,
        end: datetime.date | str,
    ) -> list[CalendarEvent]:
        """Return visible events touching [start, end], enriched with course and room names.

        Unlike get_visible_events the result is ordered by start across kinds.

        Raises:
            ValidationError: If the bounds are not dates or start is after end.
        """
        range_start = parse_date(start)
        range_end = parse_date(end)
        if range_start is None or range_end is None or range_start > range_end:
            raise ValidationError(f"Invalid date range {start!r}..{end!r}")

        events, (courses, rooms) = await asyncio.gather(
            self.get_visible_events(principal_id),
            self._enrichment_lookups(),
        )
        selected = [e for e in events if e.overlaps(range_start, range_end)]
        for event in selected:
            if event.type not in (EventKind.COURSE_MEETING, EventKind.TASK):
                continue
            props = event.extended_props
            course = courses.get(str(props.get("courseCode")))
            if course and course.get("courseName"):
                props["courseName"] = course["courseName"]
            room = rooms.get(str(props.get("roomCode")))
            if room:
                props.update(room)
        selected.sort(key=lambda event: event.sort_key)
        return selected
