"""In-memory cache of bill snapshots keyed by billing period.

Entries are never evicted by age. Once older than the TTL they are still returned,
only reported as stale so the caller can refresh them in the background. An entry
disappears only through invalidate() (a rejected save) or clear() (sign-out).

Writes are ordered per period by tickets. A caller that will write later (a reload
waiting on the network) reserves a ticket before it suspends; when it finally
writes, the write is rejected if a newer ticket already landed for that period.
A slow response therefore cannot overwrite a newer optimistic edit.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable

from rentbill.services.bill_snapshot import BillSnapshot
from rentbill.services.config import DEFAULT_BILL_CACHE_TTL_SECONDS, BillingConfig
from rentbill.services.periods import PeriodKey

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """Last known snapshot of a period and when it was captured."""

    snapshot: BillSnapshot
    captured_at: float
    ticket: int

    def is_stale(self, now: float, ttl_seconds: float) -> bool:
        return now - self.captured_at > ttl_seconds


@dataclass
class CacheStats:
    """Hit/miss counters for observability."""

    hits: int = 0
    misses: int = 0

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0


class BillCache:
    """Period-keyed snapshot store with live staleness and ordered writes."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_BILL_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[PeriodKey, CacheEntry] = {}
        # Newest ticket applied per period, kept after invalidation
        self._latest_ticket: dict[PeriodKey, int] = {}
        self._sequence = 0
        # Tickets issued before the last clear() are rejected
        self._floor = 0
        self.stats = CacheStats()

    @classmethod
    def from_config(cls, config: BillingConfig) -> "BillCache":
        return cls(ttl_seconds=config.bill_cache_ttl_seconds)

    def get(self, key: PeriodKey) -> BillSnapshot | None:
        """Return the cached snapshot, stale or not, and count the hit or miss."""
        entry = self._entries.get(key)
        if entry is None:
            self.stats.misses += 1
            logger.debug("Bill cache miss for %s", key)
            return None

        self.stats.hits += 1
        logger.debug("Bill cache hit for %s", key)
        return entry.snapshot

    def entry(self, key: PeriodKey) -> CacheEntry | None:
        """Raw entry without touching the hit/miss counters."""
        return self._entries.get(key)

    def is_stale(self, key: PeriodKey) -> bool:
        """True iff an entry exists and is older than the TTL."""
        entry = self._entries.get(key)
        if entry is None:
            return False
        return entry.is_stale(self._clock(), self.ttl_seconds)

    def reserve(self) -> int:
        """Issue a write ticket newer than every ticket issued so far."""
        self._sequence += 1
        return self._sequence

    def set(self, key: PeriodKey, snapshot: BillSnapshot, ticket: int | None = None) -> bool:
        """Insert or overwrite the entry for key, resetting its capture time.

        Args:
            key: Period to write
            snapshot: Snapshot to store
            ticket: Ticket reserved when the write was initiated (None = newest)

        Returns:
            False if the write was rejected because a newer one already landed
        """
        if ticket is None:
            ticket = self.reserve()
        if not self._accepts(key, ticket):
            logger.debug("Rejected out-of-order cache write for %s (ticket %d)", key, ticket)
            return False

        self._entries[key] = CacheEntry(snapshot=snapshot, captured_at=self._clock(), ticket=ticket)
        self._latest_ticket[key] = ticket
        return True

    def invalidate(self, key: PeriodKey, ticket: int | None = None) -> bool:
        """Remove the entry for key.

        Writes reserved before the invalidation are rejected afterwards.

        Returns:
            False if a write newer than ticket landed and the entry was kept
        """
        if ticket is not None and not self._accepts(key, ticket):
            return False
        self._entries.pop(key, None)
        self._latest_ticket[key] = ticket if ticket is not None else self.reserve()
        logger.debug("Invalidated bill cache entry for %s", key)
        return True

    def clear(self) -> None:
        """Remove all entries and reject every write reserved before now."""
        self._entries.clear()
        self._latest_ticket.clear()
        self._floor = self._sequence
        logger.info("Bill cache cleared")

    def _accepts(self, key: PeriodKey, ticket: int) -> bool:
        return ticket > self._floor and ticket >= self._latest_ticket.get(key, 0)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["BillCache", "CacheEntry", "CacheStats"]
