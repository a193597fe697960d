"""Expansion of a course's weekly pattern into dated meeting instances."""

from __future__ import annotations

import datetime
import enum
import logging
from collections.abc import Iterable

from .const import MEETING_ID_PREFIX
from .exceptions import ValidationError
from .models import BlockedDateRange, CourseDefinition, MeetingInstance, Semester, WeeklySlot
from .utils import iter_dates, parse_date, parse_time, weekday_name

_LOGGER = logging.getLogger(__name__)


class OverlapPolicy(str, enum.Enum):
    """What to do when two slots of a course overlap on the same weekday."""

    ALLOW = "allow"
    REJECT = "reject"

    @classmethod
    def parse(cls, value: OverlapPolicy | str, key: str = "overlap_policy") -> OverlapPolicy:
        """Return the policy named by value.

        Raises:
            ValidationError: If value names no policy.
        """
        try:
            return cls(value)
        except ValueError:
            valid = ", ".join(p.value for p in cls)
            raise ValidationError(f"{key} must be one of {valid}, got {value!r}") from None


def is_blocked(day: datetime.date | str, ranges: Iterable[BlockedDateRange]) -> bool:
    """Return True if day falls inside any blocked range (inclusive bounds).

    Ranges without a start or end date never block. Unparseable days are
    never blocked.
    """
    parsed = parse_date(day)
    if parsed is None:
        return False
    return any(r.contains(parsed) for r in ranges)


def instance_id(course_code: str, date_str: str, start_time: str) -> str:
    """Build the deterministic id of a meeting, e.g. ``CM-CS101-2025-04-14-0900``."""
    return f"{MEETING_ID_PREFIX}-{course_code}-{date_str}-{start_time.replace(':', '')}"


def _slot_times(slot: WeeklySlot) -> tuple[datetime.time, datetime.time] | None:
    start = parse_time(slot.start)
    end = parse_time(slot.end)
    if start is None or end is None or end <= start:
        return None
    return start, end


def find_overlapping_slots(slots: list[WeeklySlot]) -> list[tuple[WeeklySlot, WeeklySlot]]:
    """Return pairs of usable slots on the same weekday whose times overlap."""
    parsed = [(slot, _slot_times(slot)) for slot in slots]
    usable = [(slot, times) for slot, times in parsed if times is not None]
    overlapping = []
    for i, (a, (a_start, a_end)) in enumerate(usable):
        for b, (b_start, b_end) in usable[i + 1:]:
            if a.day == b.day and a_start < b_end and a_end > b_start:
                overlapping.append((a, b))
    return overlapping


def check_overlapping_slots(course: CourseDefinition) -> None:
    """Raise ValidationError if any two slots of the course overlap."""
    overlapping = find_overlapping_slots(course.hours)
    if overlapping:
        a, b = overlapping[0]
        raise ValidationError(
            f"Course {course.course_code} has overlapping slots on {a.day}: "
            f"{a.start}-{a.end} and {b.start}-{b.end}"
        )


def expand(
    course: CourseDefinition,
    semester: Semester,
    blocked_ranges: Iterable[BlockedDateRange] = (),
    overlap_policy: OverlapPolicy | str = OverlapPolicy.ALLOW,
) -> list[MeetingInstance]:
    """Expand the weekly pattern of a course over a semester window.

    Every date from semester start to end (inclusive) whose weekday matches a
    slot and which is not blocked yields one instance per matching slot.
    An unusable course or semester yields an empty list; slots with malformed
    times are skipped.

    Raises:
        ValidationError: If overlap_policy is unknown, or is ``reject`` and slots overlap.
    """
    if not course.hours:
        _LOGGER.warning("Course %s has no weekly slots; nothing to expand", course.course_code)
        return []
    if not semester.is_valid:
        _LOGGER.warning(
            "Semester %s has invalid bounds %s..%s; nothing to expand",
            semester.semester_code,
            semester.start_date,
            semester.end_date,
        )
        return []
    if OverlapPolicy.parse(overlap_policy) is OverlapPolicy.REJECT:
        check_overlapping_slots(course)

    slots_by_day: dict[str, list[WeeklySlot]] = {}
    for slot in course.hours:
        if _slot_times(slot) is None:
            _LOGGER.warning(
                "Skipping slot %s %s-%s of course %s: malformed times",
                slot.day,
                slot.start,
                slot.end,
                course.course_code,
            )
            continue
        slots_by_day.setdefault(slot.day, []).append(slot)

    ranges = list(blocked_ranges)
    meetings: dict[str, MeetingInstance] = {}
    for day in iter_dates(semester.start_date, semester.end_date):
        day_slots = slots_by_day.get(weekday_name(day))
        if not day_slots or is_blocked(day, ranges):
            continue
        date_str = day.isoformat()
        for slot in day_slots:
            meeting_id = instance_id(course.course_code, date_str, slot.start)
            if meeting_id in meetings:
                # Two slots with the same day and start collapse to one id
                continue
            meetings[meeting_id] = MeetingInstance(
                id=meeting_id,
                course_code=course.course_code,
                date=day,
                start_hour=slot.start,
                end_hour=slot.end,
                title=course.title,
                room_code=course.room_code,
                lecturer_id=course.lecturer_id,
                semester_code=semester.semester_code,
                notes=course.notes,
                link=course.link,
            )

    _LOGGER.info("Generated %d meetings for course %s", len(meetings), course.course_code)
    return list(meetings.values())
