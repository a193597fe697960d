import datetime
from dataclasses import dataclass, field
from typing import Any

from ..exceptions import MalformedRecordError
from ..utils import parse_date, parse_datetime
from .base import CalendarDataClass, optional_str, require


@dataclass
class MeetingInstance(CalendarDataClass):
    """One dated occurrence of a course's weekly slot.

    Lecturer and room are copied from the course when the instance is
    generated; later course edits only reach it through regeneration.
    """

    id: str
    course_code: str
    date: datetime.date
    start_hour: str
    end_hour: str
    title: str
    room_code: str | None = None
    lecturer_id: str | None = None
    semester_code: str | None = None
    notes: str = ""
    link: str = ""
    _raw: dict | None = field(default=None, repr=False)

    def to_record(self) -> dict[str, Any]:
        """Return the document shape written to the meetings collection."""
        return {
            "id": self.id,
            "courseCode": self.course_code,
            "date": self.date.isoformat(),
            "startHour": self.start_hour,
            "endHour": self.end_hour,
            "title": self.title,
            "roomCode": self.room_code,
            "lecturerId": self.lecturer_id,
            "semesterCode": self.semester_code,
            "notes": self.notes,
            "link": self.link,
            "type": "courseMeeting",
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MeetingInstance":
        day = parse_date(data.get("date"))
        start_hour = data.get("startHour")
        end_hour = data.get("endHour")
        if day is None:
            # Older meetings stored full start/end date-times instead of date + hours
            start = parse_datetime(data.get("start"))
            if start is None:
                raise MalformedRecordError("courseMeeting", "missing date or start")
            end = parse_datetime(data.get("end"))
            day = start.date()
            start_hour = start.strftime("%H:%M")
            end_hour = end.strftime("%H:%M") if end else None
        if not start_hour:
            raise MalformedRecordError("courseMeeting", "missing startHour")
        return cls(
            _raw=data,
            id=str(require(data, "courseMeeting", "id")),
            course_code=str(data.get("courseCode") or ""),
            date=day,
            start_hour=str(start_hour),
            end_hour=str(end_hour or ""),
            title=data.get("title") or data.get("courseName") or "",
            room_code=optional_str(data.get("roomCode")),
            lecturer_id=optional_str(data.get("lecturerId")),
            semester_code=optional_str(data.get("semesterCode")),
            notes=data.get("notes") or "",
            link=data.get("link") or data.get("zoomMeetinglink") or "",
        )
