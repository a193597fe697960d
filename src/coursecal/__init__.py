"""Recurring course meeting generation and calendar normalization."""

__version__ = "0.1.0"

from .aggregator import VisibilityAggregator
from .config import Config, EngineSettings, StoreSettings
from .exceptions import (
    CoursecalError,
    MalformedRecordError,
    PartialFetchFailure,
    ValidationError,
    WriteFailure,
)
from .lecturers import LecturerDirectory
from .models import (
    BlockedDateRange,
    CalendarEvent,
    CourseDefinition,
    EventKind,
    MeetingInstance,
    Semester,
    WeeklySlot,
)
from .recurrence import OverlapPolicy, expand, instance_id, is_blocked
from .regeneration import RegenerationCoordinator, RegenerationResult
from .store import DocumentStore, MemoryDocumentStore

__all__ = [
    "BlockedDateRange",
    "CalendarEvent",
    "Config",
    "CourseDefinition",
    "CoursecalError",
    "DocumentStore",
    "EngineSettings",
    "EventKind",
    "LecturerDirectory",
    "MalformedRecordError",
    "MeetingInstance",
    "MemoryDocumentStore",
    "OverlapPolicy",
    "PartialFetchFailure",
    "RegenerationCoordinator",
    "RegenerationResult",
    "Semester",
    "StoreSettings",
    "ValidationError",
    "VisibilityAggregator",
    "WeeklySlot",
    "WriteFailure",
    "expand",
    "instance_id",
    "is_blocked",
    "__version__",
]
