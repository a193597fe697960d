import datetime
from dataclasses import dataclass, field
from typing import Any

from ..utils import parse_date
from .base import CalendarDataClass, require


@dataclass
class BlockedDateRange(CalendarDataClass):
    """A holiday or vacation; both dates are inclusive.

    A range missing either date never blocks anything.
    """

    code: str
    name: str
    start_date: datetime.date | None
    end_date: datetime.date | None
    kind: str = "holiday"
    _raw: dict | None = field(default=None, repr=False)

    def contains(self, day: datetime.date) -> bool:
        if self.start_date is None or self.end_date is None:
            return False
        return self.start_date <= day <= self.end_date

    @classmethod
    def from_dict(cls, data: dict[str, Any], kind: str = "holiday") -> "BlockedDateRange":
        return cls(
            _raw=data,
            code=str(require(data, kind, f"{kind}Code", "code", "id")),
            name=str(data.get(f"{kind}Name") or data.get("name") or ""),
            start_date=parse_date(data.get("startDate")),
            end_date=parse_date(data.get("endDate")),
            kind=kind,
        )
