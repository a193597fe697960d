"""Recompute and persist the meeting instances of courses."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

from .config import EngineSettings
from .const import KIND_COURSES, KIND_HOLIDAYS, KIND_MEETINGS, KIND_VACATIONS, KIND_YEARS
from .exceptions import CoursecalError, MalformedRecordError, ValidationError, WriteFailure
from .models import BlockedDateRange, CourseDefinition, MeetingInstance, find_semester
from .recurrence import expand
from .store import DocumentStore

_LOGGER = logging.getLogger(__name__)


@dataclass
class RegenerationResult:
    """Outcome of regenerating one course.

    A failed result means the course must be regenerated again; it is never
    a partial success.
    """

    course_code: str
    success: bool
    written: int = 0
    deleted: int = 0
    error: Exception | None = None

    def __bool__(self) -> bool:
        return self.success


def parse_blocked_ranges(records: list[dict[str, Any]], kind: str) -> list[BlockedDateRange]:
    ranges = []
    for record in records:
        try:
            ranges.append(BlockedDateRange.from_dict(record, kind=kind))
        except MalformedRecordError as e:
            _LOGGER.warning("Skipping %s record: %s - Data: %s", kind, e, record)
    return ranges


class RegenerationCoordinator:
    """Replace a course's stored meetings with a fresh expansion.

    Regenerations of the same course are serialized with a per-course lock;
    different courses proceed concurrently.
    """

    def __init__(self, store: DocumentStore, settings: EngineSettings | None = None) -> None:
        self._store = store
        self.settings = settings or EngineSettings()
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    @asynccontextmanager
    async def _course_lock(self, course_code: str) -> AsyncIterator[None]:
        """Hold the lock of one course; the entry is dropped once nobody holds or waits on it."""
        lock = self._locks.get(course_code)
        if lock is None:
            lock = self._locks[course_code] = asyncio.Lock()
        self._lock_users[course_code] = self._lock_users.get(course_code, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[course_code] -= 1
            if not self._lock_users[course_code]:
                del self._lock_users[course_code]
                del self._locks[course_code]

    async def fetch_blocked_ranges(self) -> list[BlockedDateRange]:
        holidays, vacations = await asyncio.gather(
            self._store.fetch_all(KIND_HOLIDAYS),
            self._store.fetch_all(KIND_VACATIONS),
        )
        return parse_blocked_ranges(holidays, "holiday") + parse_blocked_ranges(vacations, "vacation")

    async def build_meetings(self, course_code: str) -> list[MeetingInstance]:
        """Fetch a course, its semester and the blackout ranges, and expand.

        Raises:
            ValidationError: If the course or its semester cannot be found, or
                the semester has missing or reversed bounds.
        """
        raw_course = await self._store.fetch_by_id(KIND_COURSES, course_code)
        if raw_course is None:
            raise ValidationError(f"Course definition {course_code} not found")
        course = CourseDefinition.from_dict(raw_course)

        years = await self._store.fetch_all(KIND_YEARS)
        semester = find_semester(years, course.semester_code)
        if semester is None:
            raise ValidationError(f"Semester {course.semester_code} of course {course_code} not found")
        if not semester.is_valid:
            raise ValidationError(
                f"Semester {course.semester_code} of course {course_code} has invalid bounds "
                f"({semester.start_date} to {semester.end_date})"
            )

        blocked = await self.fetch_blocked_ranges()
        return expand(course, semester, blocked, self.settings.overlap_policy)

    async def _existing_meeting_ids(self, course_code: str) -> set[str]:
        records = await self._store.fetch_where(KIND_MEETINGS, "courseCode", course_code)
        return {r["id"] for r in records}

    async def _reconcile(self, course_code: str, meetings: list[MeetingInstance]) -> tuple[int, int]:
        """Upsert the new set first, then delete only ids that disappeared.

        The course is never left without meetings: a failed upsert keeps the
        old set, a failed delete leaves stale extras until the next run.
        """
        existing_ids = await self._existing_meeting_ids(course_code)
        records = {m.id: m.to_record() for m in meetings}

        if records:
            try:
                await self._store.bulk_upsert(KIND_MEETINGS, records)
            except Exception as e:
                raise WriteFailure(course_code, "upsert", e) from e

        stale_ids = sorted(existing_ids - records.keys())
        if stale_ids:
            try:
                await self._store.bulk_delete(KIND_MEETINGS, stale_ids)
            except Exception as e:
                raise WriteFailure(course_code, "delete", e) from e
        return len(records), len(stale_ids)

    async def regenerate(self, course_code: str) -> RegenerationResult:
        """Regenerate the meetings of one course.

        Failures are logged and returned as an unsuccessful result; nothing
        is written when the course or semester cannot be resolved or the
        semester bounds are invalid.
        """
        if not course_code:
            return RegenerationResult(course_code, False, error=ValidationError("Course code is required"))

        async with self._course_lock(course_code):
            _LOGGER.info("Regenerating meetings for course %s", course_code)
            try:
                meetings = await self.build_meetings(course_code)
                written, deleted = await self._reconcile(course_code, meetings)
            except CoursecalError as e:
                _LOGGER.error("Regeneration of course %s failed: %s", course_code, e)
                return RegenerationResult(course_code, False, error=e)
            except Exception as e:
                _LOGGER.exception("Regeneration of course %s failed unexpectedly", course_code)
                return RegenerationResult(course_code, False, error=e)

        _LOGGER.info(
            "Course %s regenerated: %d meetings written, %d stale removed",
            course_code,
            written,
            deleted,
        )
        return RegenerationResult(course_code, True, written=written, deleted=deleted)

    async def regenerate_many(self, course_codes: list[str]) -> list[RegenerationResult]:
        return list(await asyncio.gather(*(self.regenerate(code) for code in course_codes)))

    async def regenerate_semester(self, semester_code: str) -> list[RegenerationResult]:
        """Regenerate every course taught in a semester, e.g. after its dates changed."""
        courses = await self._store.fetch_where(KIND_COURSES, "semesterCode", semester_code)
        codes = [c.get("courseCode") or c["id"] for c in courses]
        _LOGGER.info("Semester %s changed; regenerating %d courses", semester_code, len(codes))
        return await self.regenerate_many(codes)

    async def regenerate_all(self) -> list[RegenerationResult]:
        """Regenerate every course, e.g. after holidays or vacations were edited."""
        courses = await self._store.fetch_all(KIND_COURSES)
        return await self.regenerate_many([c.get("courseCode") or c["id"] for c in courses])

    async def remove_course(self, course_code: str) -> int:
        """Delete every stored meeting of a course that is being removed.

        Raises:
            WriteFailure: If the delete fails.
        """
        async with self._course_lock(course_code):
            try:
                deleted = await self._store.bulk_delete_where(KIND_MEETINGS, "courseCode", course_code)
            except Exception as e:
                raise WriteFailure(course_code, "delete", e) from e
        _LOGGER.info("Deleted %d meetings of removed course %s", deleted, course_code)
        return deleted
