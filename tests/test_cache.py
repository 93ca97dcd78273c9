"""Unit tests for the collection cache."""

from __future__ import annotations

from cms_pages.cache import CollectionCache
from cms_pages.records import Record


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_entry_is_served_within_ttl() -> None:
    """Records stay cached until the TTL elapses."""
    clock = FakeClock()
    cache = CollectionCache(ttl=300, clock=clock)
    records = (Record.from_header("a.md", {"title": "A"}),)
    cache.put("articles", records)

    clock.now += 299

    assert cache.get("articles") == records, "expected a fresh cache hit"


def test_expired_entry_is_evicted() -> None:
    """An entry read after the TTL is dropped and reported as a miss."""
    clock = FakeClock()
    cache = CollectionCache(ttl=300, clock=clock)
    cache.put("articles", ())

    clock.now += 300

    assert cache.get("articles") is None, "expected a miss at the TTL boundary"
    assert "articles" not in cache, "expected the expired entry to be evicted"


def test_collections_are_cached_independently() -> None:
    """Invalidating one collection leaves the others in place."""
    cache = CollectionCache(ttl=300, clock=FakeClock())
    cache.put("articles", ())
    cache.put("youtube", ())

    cache.invalidate("articles")

    assert cache.get("articles") is None
    assert cache.get("youtube") == ()
    assert len(cache) == 1


def test_clear_empties_cache() -> None:
    """``clear`` drops every entry."""
    cache = CollectionCache()
    cache.put("articles", ())
    cache.clear()

    assert len(cache) == 0
