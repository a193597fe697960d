from dataclasses import dataclass, field
from typing import Any

from .base import CalendarDataClass, require


@dataclass
class Lecturer(CalendarDataClass):
    id: str
    name: str
    email: str | None = None
    _raw: dict | None = field(default=None, repr=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Lecturer":
        return cls(
            _raw=data,
            id=str(require(data, "lecturer", "id")),
            name=str(require(data, "lecturer", "name")),
            email=data.get("email"),
        )


@dataclass
class Room(CalendarDataClass):
    room_code: str
    room_name: str
    site_code: str | None = None
    site_name: str | None = None
    _raw: dict | None = field(default=None, repr=False)


@dataclass
class Site(CalendarDataClass):
    site_code: str
    site_name: str
    rooms: list[Room] = field(default_factory=list)
    _raw: dict | None = field(default=None, repr=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Site":
        site_code = str(require(data, "site", "siteCode", "id"))
        site_name = data.get("siteName") or ""
        rooms = [
            Room(
                _raw=r,
                room_code=str(r["roomCode"]),
                room_name=r.get("roomName") or "",
                site_code=site_code,
                site_name=site_name,
            )
            for r in data.get("rooms") or []
            if isinstance(r, dict) and r.get("roomCode")
        ]
        return cls(_raw=data, site_code=site_code, site_name=site_name, rooms=rooms)
