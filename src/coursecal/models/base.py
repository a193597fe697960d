import dataclasses
from dataclasses import dataclass

from ..exceptions import MalformedRecordError


@dataclass
class CalendarDataClass:
    def __iter__(self):
        """Yield (name, value) pairs for all fields except _raw.

        Nested CalendarDataClass instances are recursively converted to dicts.
        This enables ``dict(model)`` to produce a complete, serializable representation.
        """
        for f in dataclasses.fields(self):
            if f.name == "_raw":
                continue
            value = getattr(self, f.name)
            if isinstance(value, CalendarDataClass):
                value = dict(value)
            elif isinstance(value, list):
                value = [dict(item) if isinstance(item, CalendarDataClass) else item for item in value]
            yield f.name, value


def require(data: dict, kind: str, *keys: str):
    """Return the first non-empty value among keys, or raise MalformedRecordError."""
    for key in keys:
        value = data.get(key)
        if value not in (None, ""):
            return value
    raise MalformedRecordError(kind, f"missing required field {' / '.join(keys)}")


def optional_str(value) -> str | None:
    if value in (None, ""):
        return None
    return str(value)


def parse_bool(value) -> bool:
    """Accept real booleans as well as the "true"/"false" strings older forms stored."""
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)
