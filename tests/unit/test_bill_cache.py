"""Tests for the period-keyed bill cache."""

from decimal import Decimal

from rentbill.services.bill_snapshot import BillSnapshot
from rentbill.services.periods import PeriodKey

KEY = PeriodKey(7, 3, 2025)
OTHER = PeriodKey(7, 4, 2025)


def snapshot(rent: str) -> BillSnapshot:
    return BillSnapshot(rent_amount=Decimal(rent))


class TestBillCache:
    """Test cache reads, staleness and ordered writes."""

    def test_get_miss_and_hit(self, cache) -> None:
        assert cache.get(KEY) is None

        cache.set(KEY, snapshot("9000"))

        assert cache.get(KEY) == snapshot("9000")
        assert cache.stats.hits == 1
        assert cache.stats.misses == 1
        assert cache.stats.hit_rate == 0.5

    def test_staleness_threshold(self, cache, clock) -> None:
        cache.set(KEY, snapshot("9000"))

        clock.advance(899)
        assert not cache.is_stale(KEY)

        clock.advance(2)
        assert cache.is_stale(KEY)

    def test_stale_entries_are_still_returned(self, cache, clock) -> None:
        cache.set(KEY, snapshot("9000"))
        clock.advance(3600)

        assert cache.is_stale(KEY)
        assert cache.get(KEY) == snapshot("9000")

    def test_missing_entry_is_not_stale(self, cache) -> None:
        assert not cache.is_stale(KEY)

    def test_set_resets_capture_time(self, cache, clock) -> None:
        cache.set(KEY, snapshot("9000"))
        clock.advance(1000)
        cache.set(KEY, snapshot("9500"))

        assert not cache.is_stale(KEY)
        assert cache.entry(KEY).captured_at == clock.now

    def test_invalidate_and_clear(self, cache) -> None:
        cache.set(KEY, snapshot("9000"))
        cache.set(OTHER, snapshot("9000"))

        cache.invalidate(KEY)
        assert KEY not in cache
        assert OTHER in cache

        cache.clear()
        assert len(cache) == 0

    def test_older_ticket_cannot_overwrite_newer_write(self, cache) -> None:
        reload_ticket = cache.reserve()
        cache.set(KEY, snapshot("9500"))  # optimistic edit lands first

        assert cache.set(KEY, snapshot("9000"), ticket=reload_ticket) is False
        assert cache.get(KEY) == snapshot("9500")

    def test_ticket_order_is_per_period(self, cache) -> None:
        ticket = cache.reserve()
        cache.set(OTHER, snapshot("1"))

        assert cache.set(KEY, snapshot("9000"), ticket=ticket) is True

    def test_one_ticket_may_write_many_periods(self, cache) -> None:
        ticket = cache.reserve()

        assert cache.set(KEY, snapshot("1"), ticket=ticket)
        assert cache.set(OTHER, snapshot("2"), ticket=ticket)

    def test_invalidate_with_old_ticket_keeps_newer_entry(self, cache) -> None:
        ticket = cache.reserve()
        cache.set(KEY, snapshot("9500"))

        assert cache.invalidate(KEY, ticket=ticket) is False
        assert KEY in cache

    def test_writes_reserved_before_clear_are_rejected(self, cache) -> None:
        ticket = cache.reserve()
        cache.clear()

        assert cache.set(KEY, snapshot("9000"), ticket=ticket) is False
        assert KEY not in cache
        assert cache.set(KEY, snapshot("9000")) is True

    def test_writes_reserved_before_invalidate_are_rejected(self, cache) -> None:
        cache.set(KEY, snapshot("9500"))
        in_flight = cache.reserve()

        cache.invalidate(KEY)

        assert cache.set(KEY, snapshot("9000"), ticket=in_flight) is False
        assert KEY not in cache
        assert cache.set(KEY, snapshot("9000"), ticket=cache.reserve()) is True


def test_ttl_from_config() -> None:
    from rentbill.services.bill_cache import BillCache
    from rentbill.services.config import BillingConfig

    cache = BillCache.from_config(BillingConfig(bill_cache_ttl_seconds=60))

    assert cache.ttl_seconds == 60
