import datetime
import logging
from dataclasses import dataclass, field
from typing import Any

from ..exceptions import MalformedRecordError
from ..utils import parse_date
from .base import CalendarDataClass, require

_LOGGER = logging.getLogger(__name__)


def _semester_records(data: dict[str, Any]) -> list[Any]:
    semesters = data.get("semesters")
    if semesters is None:
        return []
    if not isinstance(semesters, list):
        raise MalformedRecordError("year", "semesters must be a list")
    return semesters


@dataclass
class Semester(CalendarDataClass):
    """A semester window; both dates are inclusive."""

    semester_code: str
    semester_number: int | None
    start_date: datetime.date | None
    end_date: datetime.date | None
    year_code: str | None = None
    _raw: dict | None = field(default=None, repr=False)

    @property
    def is_valid(self) -> bool:
        return (
            self.start_date is not None
            and self.end_date is not None
            and self.start_date <= self.end_date
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any], year_code: str | None = None) -> "Semester":
        number = data.get("semesterNumber")
        try:
            number = int(number) if number is not None else None
        except (TypeError, ValueError):
            number = None
        return cls(
            _raw=data,
            semester_code=str(require(data, "semester", "semesterCode")),
            semester_number=number,
            start_date=parse_date(data.get("startDate")),
            end_date=parse_date(data.get("endDate")),
            year_code=year_code,
        )


@dataclass
class Year(CalendarDataClass):
    year_code: str
    year_number: str
    start_date: datetime.date | None
    end_date: datetime.date | None
    semesters: list[Semester] = field(default_factory=list)
    _raw: dict | None = field(default=None, repr=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Year":
        year_code = str(require(data, "year", "yearCode", "id"))
        semesters = [
            Semester.from_dict(s, year_code=year_code)
            for s in _semester_records(data)
            if isinstance(s, dict) and s.get("semesterCode")
        ]
        return cls(
            _raw=data,
            year_code=year_code,
            year_number=str(data.get("yearNumber") or year_code),
            start_date=parse_date(data.get("startDate")),
            end_date=parse_date(data.get("endDate")),
            semesters=semesters,
        )


def find_semester(years: list[dict[str, Any]], semester_code: str) -> Semester | None:
    """Locate a semester by code inside the raw year records it is nested in."""
    for raw_year in years:
        if not isinstance(raw_year, dict):
            continue
        try:
            raw_semesters = _semester_records(raw_year)
        except MalformedRecordError as e:
            _LOGGER.warning("Skipping year %s while looking up semesters: %s", raw_year.get("id"), e)
            continue
        for raw_semester in raw_semesters:
            if isinstance(raw_semester, dict) and raw_semester.get("semesterCode") == semester_code:
                return Semester.from_dict(
                    raw_semester, year_code=raw_year.get("yearCode") or raw_year.get("id")
                )
    return None
