"""Artwork lookup cache."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol

ARTWORK_TTL_SECONDS = 3600

CacheKey = tuple[str, str]


@dataclass(frozen=True)
class CacheEntry:
    """Cached artwork outcome. ``art_url`` is None for a known absence."""

    art_url: str | None
    fetched_at: datetime


class ArtworkCache(Protocol):
    """Cache interface keyed by ``(media_kind, external_id)``."""

    def lookup(self, key: CacheKey) -> CacheEntry | None:
        """Return a cached entry if present and not expired."""

    def store(self, key: CacheKey, art_url: str | None) -> CacheEntry:
        """Store an artwork outcome, including an explicit absence."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class InMemoryArtworkCache(ArtworkCache):
    """In-memory cache with lazy expiry on read."""

    ttl_seconds: int = ARTWORK_TTL_SECONDS
    clock: Callable[[], datetime] = _utcnow
    _entries: dict[CacheKey, CacheEntry] = field(default_factory=dict)

    def lookup(self, key: CacheKey) -> CacheEntry | None:
        """Return a cached entry if it hasn't expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self.clock() - entry.fetched_at >= timedelta(seconds=self.ttl_seconds):
            self._entries.pop(key, None)
            return None
        return entry

    def store(self, key: CacheKey, art_url: str | None) -> CacheEntry:
        """Store an artwork outcome stamped with the current time."""
        entry = CacheEntry(art_url=art_url, fetched_at=self.clock())
        self._entries[key] = entry
        return entry

    def __len__(self) -> int:
        return len(self._entries)
