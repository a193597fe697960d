import datetime
from dataclasses import dataclass, field
from typing import Any

from ..exceptions import MalformedRecordError
from ..utils import parse_date
from .base import CalendarDataClass, optional_str, parse_bool, require


def _required_date(data: dict[str, Any], kind: str, key: str) -> datetime.date:
    value = parse_date(require(data, kind, key))
    if value is None:
        raise MalformedRecordError(kind, f"invalid {key} {data.get(key)!r}")
    return value


@dataclass
class GeneralEvent(CalendarDataClass):
    """An institution-wide event, either all-day or with start/end hours."""

    event_code: str
    event_name: str
    start_date: datetime.date
    end_date: datetime.date | None
    all_day: bool
    start_hour: str | None = None
    end_hour: str | None = None
    notes: str = ""
    _raw: dict | None = field(default=None, repr=False)

    KIND = "event"

    @classmethod
    def _fields_from_dict(cls, data: dict[str, Any]) -> dict[str, Any]:
        return {
            "_raw": data,
            "event_code": str(require(data, cls.KIND, "eventCode", "id")),
            "event_name": str(require(data, cls.KIND, "eventName")),
            "start_date": _required_date(data, cls.KIND, "startDate"),
            "end_date": parse_date(data.get("endDate")),
            "all_day": parse_bool(data.get("allDay")),
            "start_hour": optional_str(data.get("startHour")),
            "end_hour": optional_str(data.get("endHour")),
            "notes": data.get("notes") or "",
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GeneralEvent":
        return cls(**cls._fields_from_dict(data))


@dataclass
class PersonalEvent(GeneralEvent):
    """A student's private event, visible only to its owner."""

    owner_id: str = ""

    KIND = "studentEvent"

    @classmethod
    def _fields_from_dict(cls, data: dict[str, Any]) -> dict[str, Any]:
        fields = super()._fields_from_dict(data)
        fields["owner_id"] = str(require(data, cls.KIND, "studentId", "ownerId"))
        return fields


@dataclass
class Task(CalendarDataClass):
    """An assignment with a submission deadline."""

    assignment_code: str
    assignment_name: str
    submission_date: datetime.date
    submission_hour: str | None = None
    course_code: str | None = None
    description: str = ""
    _raw: dict | None = field(default=None, repr=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Task":
        return cls(
            _raw=data,
            assignment_code=str(require(data, "task", "assignmentCode", "id")),
            assignment_name=str(require(data, "task", "assignmentName")),
            submission_date=_required_date(data, "task", "submissionDate"),
            submission_hour=optional_str(data.get("submissionHour")),
            course_code=optional_str(data.get("courseCode")),
            description=data.get("description") or "",
        )
