"""Exception classes for the meeting generation and calendar engine."""

from __future__ import annotations


class CoursecalError(Exception):
    """Base exception for coursecal errors."""

    pass


class ValidationError(CoursecalError):
    """Raised when a course, semester or date bound is missing or invalid."""

    pass


class MalformedRecordError(ValidationError):
    """Raised when a fetched record lacks a field required for its kind."""

    def __init__(self, kind: str, message: str) -> None:
        super().__init__(f"{kind}: {message}")
        self.kind = kind


class PartialFetchFailure(CoursecalError):
    """One entity kind could not be fetched or normalized during aggregation.

    Created and logged by the aggregator; the kind contributes no events
    and the failure is never raised to the caller.
    """

    def __init__(self, kind: str, cause: BaseException) -> None:
        super().__init__(f"Failed to load {kind}: {cause}")
        self.kind = kind
        self.cause = cause


class WriteFailure(CoursecalError):
    """Raised when a bulk upsert or delete fails during regeneration.

    The caller must retry the regeneration; completed writes are not rolled back.
    """

    def __init__(self, course_code: str, phase: str, cause: BaseException | None = None) -> None:
        super().__init__(f"{phase} failed for course {course_code}: {cause}")
        self.course_code = course_code
        self.phase = phase
        self.cause = cause
