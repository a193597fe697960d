"""Document store protocol and an in-memory implementation."""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

_LOGGER = logging.getLogger(__name__)


@runtime_checkable
class DocumentStore(Protocol):
    """The primitives the engine needs from the hosted document store.

    Records are plain dicts; every record carries its document id under ``id``.
    """

    async def fetch_all(self, kind: str) -> list[dict[str, Any]]: ...

    async def fetch_by_id(self, kind: str, record_id: str) -> dict[str, Any] | None: ...

    async def fetch_where(self, kind: str, field: str, value: Any) -> list[dict[str, Any]]:
        """Return every record whose ``field`` equals ``value``; filtered by the store."""
        ...

    async def bulk_upsert(self, kind: str, records: dict[str, dict[str, Any]]) -> None:
        """Create or fully overwrite each record under its key; never merges."""
        ...

    async def bulk_delete_where(self, kind: str, field: str, value: Any) -> int:
        """Delete every record whose ``field`` equals ``value``; return the count."""
        ...

    async def bulk_delete(self, kind: str, record_ids: list[str]) -> None: ...


class MemoryDocumentStore:
    """DocumentStore backed by nested dicts.

    Reads and writes deep-copy records so callers can never mutate stored state.
    """

    def __init__(self, data: dict[str, list[dict[str, Any]]] | None = None) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        for kind, records in (data or {}).items():
            self._collections[kind] = {}
            for index, record in enumerate(records):
                record_id = str(record.get("id") or f"{kind}-{index}")
                self._collections[kind][record_id] = {**copy.deepcopy(record), "id": record_id}

    @classmethod
    def from_json_file(cls, path: str | Path) -> "MemoryDocumentStore":
        """Load a ``{kind: [records]}`` snapshot from a JSON file."""
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            raise ValueError(f"Unable to read data file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Data file {path} must contain an object of collections")
        return cls(data)

    def dump(self) -> dict[str, list[dict[str, Any]]]:
        return {kind: list(copy.deepcopy(records).values()) for kind, records in self._collections.items()}

    def save_json_file(self, path: str | Path) -> None:
        Path(path).write_text(json.dumps(self.dump(), indent=2, ensure_ascii=False), encoding="utf-8")

    async def fetch_all(self, kind: str) -> list[dict[str, Any]]:
        return [copy.deepcopy(r) for r in self._collections.get(kind, {}).values()]

    async def fetch_by_id(self, kind: str, record_id: str) -> dict[str, Any] | None:
        record = self._collections.get(kind, {}).get(record_id)
        return copy.deepcopy(record) if record is not None else None

    async def fetch_where(self, kind: str, field: str, value: Any) -> list[dict[str, Any]]:
        return [copy.deepcopy(r) for r in self._collections.get(kind, {}).values() if r.get(field) == value]

    async def bulk_upsert(self, kind: str, records: dict[str, dict[str, Any]]) -> None:
        collection = self._collections.setdefault(kind, {})
        for record_id, record in records.items():
            collection[record_id] = {**copy.deepcopy(record), "id": record_id}
        _LOGGER.debug("Upserted %d records into %s", len(records), kind)

    async def bulk_delete_where(self, kind: str, field: str, value: Any) -> int:
        collection = self._collections.get(kind, {})
        doomed = [record_id for record_id, r in collection.items() if r.get(field) == value]
        for record_id in doomed:
            del collection[record_id]
        _LOGGER.debug("Deleted %d records from %s where %s == %r", len(doomed), kind, field, value)
        return len(doomed)

    async def bulk_delete(self, kind: str, record_ids: list[str]) -> None:
        collection = self._collections.get(kind, {})
        for record_id in record_ids:
            collection.pop(record_id, None)
