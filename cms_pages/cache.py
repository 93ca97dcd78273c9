"""Time-limited, per-collection cache of resolved records.

Each collection maps to one :class:`CacheEntry` holding its records and the
moment they were resolved. Entries are checked for expiry when read and
evicted there; nothing runs in the background. Reads and writes for
different collections do not contend on a lock, and concurrent writes to the
same collection simply leave the last write in place.

Examples
--------
>>> from cms_pages.cache import CollectionCache
>>> cache = CollectionCache(ttl=300)
>>> cache.put("articles", ())
>>> cache.get("articles")
()
>>> cache.get("videos") is None
True
"""

from __future__ import annotations

import dataclasses as dc
import time
import typing as typ

import structlog

from ._constants import DEFAULT_CACHE_TTL

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .records import Collection

log = structlog.get_logger(__name__)


@dc.dataclass(frozen=True, slots=True)
class CacheEntry:
    """Records of one collection and when they were resolved."""

    collection: str
    records: Collection
    resolved_at: float

    def is_fresh(self, now: float, ttl: float) -> bool:
        return now - self.resolved_at < ttl


class CollectionCache:
    """Map collection names to their most recently resolved records."""

    def __init__(
        self,
        *,
        ttl: float = DEFAULT_CACHE_TTL,
        clock: cabc.Callable[[], float] = time.monotonic,
    ) -> None:
        """Create an empty cache.

        Parameters
        ----------
        ttl : float, optional
            Seconds an entry stays valid. Defaults to five minutes.
        clock : Callable[[], float], optional
            Monotonic time source in seconds; injectable for tests.
        """
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def get(self, collection: str) -> Collection | None:
        """Return fresh records for ``collection`` or None.

        An expired entry is removed before returning None, so stale records
        are never served.
        """
        entry = self._entries.get(collection)
        if entry is None:
            return None
        if entry.is_fresh(self._clock(), self.ttl):
            return entry.records
        log.debug("cache_expired", collection=collection)
        # Only drop the entry that was read; a concurrent put may have replaced it.
        if self._entries.get(collection) is entry:
            self._entries.pop(collection, None)
        return None

    def put(self, collection: str, records: Collection) -> None:
        """Store ``records`` for ``collection``, replacing any previous entry."""
        self._entries[collection] = CacheEntry(
            collection=collection,
            records=tuple(records),
            resolved_at=self._clock(),
        )

    def invalidate(self, collection: str) -> None:
        self._entries.pop(collection, None)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, collection: object) -> bool:
        return collection in self._entries

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["CacheEntry", "CollectionCache"]
