"""Cached lecturer id to display name lookups."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable

from .const import KIND_LECTURERS
from .exceptions import MalformedRecordError
from .models import Lecturer
from .store import DocumentStore

_LOGGER = logging.getLogger(__name__)


class LecturerDirectory:
    """Read-through cache of lecturer names.

    The lecturers collection is fetched on first use and kept until
    ``invalidate()`` is called or ``ttl`` seconds have passed (never, when
    ttl is None).
    """

    def __init__(
        self,
        store: DocumentStore,
        ttl: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self.ttl = ttl
        self._clock = clock
        self._names: dict[str, str] | None = None
        self._loaded_at = 0.0
        self._lock = asyncio.Lock()

    @property
    def is_stale(self) -> bool:
        if self._names is None:
            return True
        return self.ttl is not None and self._clock() - self._loaded_at >= self.ttl

    def invalidate(self) -> None:
        """Drop the cached names; the next lookup refetches them."""
        self._names = None

    async def names(self) -> dict[str, str]:
        """Return the id to name mapping, fetching it if the cache is stale."""
        async with self._lock:
            if self.is_stale:
                records = await self._store.fetch_all(KIND_LECTURERS)
                names = {}
                for record in records:
                    try:
                        lecturer = Lecturer.from_dict(record)
                    except MalformedRecordError as e:
                        _LOGGER.debug("Skipping lecturer record: %s", e)
                        continue
                    names[lecturer.id] = lecturer.name
                self._names = names
                self._loaded_at = self._clock()
                _LOGGER.debug("Loaded %d lecturer names", len(names))
            return dict(self._names)

    async def name_of(self, lecturer_id: str | None) -> str | None:
        if not lecturer_id:
            return None
        return (await self.names()).get(lecturer_id)
