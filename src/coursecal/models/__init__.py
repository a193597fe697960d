from .academic import Semester, Year, find_semester
from .base import CalendarDataClass
from .blackout import BlockedDateRange
from .calendar_event import CalendarEvent, EventKind
from .course import CourseDefinition, WeeklySlot
from .directory import Lecturer, Room, Site
from .event import GeneralEvent, PersonalEvent, Task
from .meeting import MeetingInstance

__all__ = [
    "BlockedDateRange",
    "CalendarDataClass",
    "CalendarEvent",
    "CourseDefinition",
    "EventKind",
    "GeneralEvent",
    "Lecturer",
    "MeetingInstance",
    "PersonalEvent",
    "Room",
    "Semester",
    "Site",
    "Task",
    "WeeklySlot",
    "Year",
    "find_semester",
]
