from dataclasses import dataclass, field
from typing import Any

from ..exceptions import MalformedRecordError
from .base import CalendarDataClass, optional_str, require


@dataclass
class WeeklySlot(CalendarDataClass):
    """One recurring session: a weekday and a start/end time of day.

    Times are kept as the raw strings the course form stored; the expander
    decides whether they are usable.
    """

    day: str
    start: str
    end: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WeeklySlot":
        return cls(
            day=str(data.get("day") or ""),
            start=str(data.get("start") or ""),
            end=str(data.get("end") or ""),
        )


@dataclass
class CourseDefinition(CalendarDataClass):
    course_code: str
    course_name: str
    semester_code: str
    lecturer_id: str | None = None
    room_code: str | None = None
    hours: list[WeeklySlot] = field(default_factory=list)
    notes: str = ""
    link: str = ""
    _raw: dict | None = field(default=None, repr=False)

    @property
    def title(self) -> str:
        return self.course_name or f"Meeting for {self.course_code}"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CourseDefinition":
        raw_hours = data.get("hours")
        if not isinstance(raw_hours, list):
            raise MalformedRecordError("course", "hours must be a list of slots")
        return cls(
            _raw=data,
            course_code=str(require(data, "course", "courseCode", "id")),
            course_name=data.get("courseName") or "",
            semester_code=str(require(data, "course", "semesterCode")),
            lecturer_id=optional_str(data.get("lecturerId")),
            room_code=optional_str(data.get("roomCode")),
            hours=[WeeklySlot.from_dict(h) for h in raw_hours if isinstance(h, dict)],
            notes=data.get("notes") or "",
            link=data.get("link") or data.get("zoomMeetinglink") or "",
        )
