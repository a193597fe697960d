import datetime
import enum
from dataclasses import dataclass, field
from typing import Any

from .base import CalendarDataClass


class EventKind(str, enum.Enum):
    COURSE_MEETING = "courseMeeting"
    EVENT = "event"
    HOLIDAY = "holiday"
    VACATION = "vacation"
    TASK = "task"
    STUDENT_EVENT = "studentEvent"
    YEAR_MARKER = "yearMarker"
    SEMESTER_MARKER = "semesterMarker"


def _iso(value: datetime.date | datetime.datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat()


@dataclass
class CalendarEvent(CalendarDataClass):
    """The single calendar shape every entity kind is normalized into.

    All-day events carry ``datetime.date`` bounds with an exclusive ``end``
    (None for single-day events); timed events carry ``datetime.datetime``
    bounds and always have an ``end``.
    """

    id: str
    title: str
    start: datetime.date | datetime.datetime
    end: datetime.date | datetime.datetime | None
    all_day: bool
    type: EventKind
    extended_props: dict[str, Any] = field(default_factory=dict)
    _raw: dict | None = field(default=None, repr=False)

    @property
    def sort_key(self) -> datetime.datetime:
        """Start as a date-time; all-day events sort at midnight."""
        if isinstance(self.start, datetime.datetime):
            return self.start.replace(tzinfo=None)
        return datetime.datetime.combine(self.start, datetime.time())

    @property
    def last_day(self) -> datetime.date:
        """The last calendar day the event occupies (inclusive)."""
        if self.end is None:
            return self.sort_key.date()
        if isinstance(self.end, datetime.datetime):
            return self.end.date()
        return self.end - datetime.timedelta(days=1)

    def overlaps(self, start: datetime.date, end: datetime.date) -> bool:
        """Whether the event touches any day in [start, end]."""
        return self.sort_key.date() <= end and self.last_day >= start

    def to_dict(self) -> dict[str, Any]:
        """Return the calendar-widget shape with ISO strings; ``end`` omitted when absent."""
        result: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "start": _iso(self.start),
            "allDay": self.all_day,
            "type": self.type.value,
            "extendedProps": {**self.extended_props, "type": self.type.value},
        }
        if self.end is not None:
            result["end"] = _iso(self.end)
        return result
