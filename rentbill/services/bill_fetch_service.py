"""Cache-first loading of monthly bills for the bill screen.

Switching months shows something immediately: the cached snapshot when there is
one (refreshed in the background once stale), otherwise a placeholder while the
real period loads. Neighbouring months are preloaded into the cache after every
successful load so the next switch is a cache hit.

Responses are applied to the view only while they are still wanted: the request
register must still hold the token captured when the reload was issued, and the
period must still be on screen. Preloads never touch the view.
"""

import asyncio
import logging
from datetime import date
from typing import Callable, Coroutine

from rentbill.services.bill_cache import BillCache
from rentbill.services.bill_snapshot import (
    BillSnapshot,
    fresh_snapshot,
    placeholder_snapshot,
    snapshot_from_record,
)
from rentbill.services.bill_store import BillRecordStore
from rentbill.services.bill_view import BillView, NoticeKind
from rentbill.services.errors import BillStoreError
from rentbill.services.periods import PeriodKey, RequestRegister, RequestToken

logger = logging.getLogger(__name__)

LOAD_FAILED_MESSAGE = "Could not load the bill for this month."


class BillFetchService:
    """Decides between cache, background refresh and blocking load for a period."""

    def __init__(
        self,
        store: BillRecordStore,
        cache: BillCache,
        view: BillView,
        register: RequestRegister | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.store = store
        self.cache = cache
        self.view = view
        self.register = register or RequestRegister()
        self._today = today
        self._background: set[asyncio.Task] = set()
        self._preloading: set[PeriodKey] = set()

    async def open_period(self, month: int, year: int) -> None:
        """Display the renter's bill for month/year."""
        await self.show(self.view.key_for(month, year))

    async def show_previous_month(self) -> None:
        await self.show(self._require_active().previous())

    async def show_next_month(self) -> None:
        await self.show(self._require_active().next())

    async def show(self, key: PeriodKey) -> None:
        """Make key the active period and bring its snapshot on screen.

        Cache hit: applied synchronously; fresh entries only trigger a preload of
        the neighbours, stale ones a background refresh. Cache miss: a placeholder
        is applied before the first suspension, then the period loads in the
        foreground.
        """
        self.view.activate(key)

        cached = self.cache.get(key)
        if cached is not None:
            self.view.apply(key, cached)
            if self.cache.is_stale(key):
                self.view.is_stale = True
                self._spawn(self.reload(key, background=True), f"refresh {key}")
            else:
                self.preload(key)
            return

        self.view.apply(key, placeholder_snapshot(self.view.monthly_rent, self._today()))
        await self.reload(key)

    async def reload(self, key: PeriodKey, background: bool = False) -> BillSnapshot | None:
        """Load key from the store and apply it if it is still wanted.

        Returns:
            The applied snapshot, or None if the load failed or was superseded
        """
        token = self.register.issue(key)
        ticket = self.cache.reserve()
        if not background and self.view.is_active(key):
            self.view.is_loading = True

        try:
            snapshot = await self._fetch_snapshot(key)
        except BillStoreError as e:
            logger.error("Error loading bill %s: %s", key, e)
            if self._still_wanted(token):
                self.view.is_loading = False
                self.view.show_notice(key, NoticeKind.READ, LOAD_FAILED_MESSAGE)
            return None

        if not self._still_wanted(token):
            logger.debug("Ignoring superseded response for %s", key)
            return None

        self.view.is_loading = False
        self.view.is_stale = False
        if not self.cache.set(key, snapshot, ticket=ticket):
            return self._apply_rejected(key, snapshot)

        self.view.apply(key, snapshot)
        self.preload(key)
        return snapshot

    async def retry_load(self) -> BillSnapshot | None:
        """Retry loading the active period after a read failure."""
        key = self._require_active()
        self.view.dismiss_notice()
        return await self.reload(key)

    def preload(self, key: PeriodKey) -> None:
        """Schedule cache-only loads of the months before and after key."""
        for neighbour in key.adjacent():
            if neighbour not in self.cache and neighbour not in self._preloading:
                self._spawn(self.preload_period(neighbour), f"preload {neighbour}")

    async def preload_period(self, key: PeriodKey) -> bool:
        """Load key into the cache unless it is already there.

        Failures are logged and swallowed: nobody asked for this period yet.

        Returns:
            True if the cache was populated
        """
        if key in self.cache or key in self._preloading:
            return False

        self._preloading.add(key)
        try:
            return await self.load_into_cache(key)
        finally:
            self._preloading.discard(key)

    async def load_into_cache(self, key: PeriodKey) -> bool:
        """Read key from the store into the cache, even if a preload is running."""
        ticket = self.cache.reserve()
        try:
            snapshot = await self._fetch_snapshot(key)
        except BillStoreError as e:
            logger.warning("Preload of %s failed: %s", key, e)
            return False

        return self.cache.set(key, snapshot, ticket=ticket)

    async def warm_cache(self) -> int:
        """Populate the cache with every saved period of the renter in one read.

        Returns:
            Number of periods written to the cache
        """
        ticket = self.cache.reserve()
        try:
            periods = await self.store.read_all_periods(self.view.renter_id)
        except BillStoreError as e:
            logger.warning("Bulk load for renter %d failed: %s", self.view.renter_id, e)
            return 0

        today = self._today()
        count = 0
        for details in periods:
            if details.bill is None:
                continue
            key = PeriodKey(self.view.renter_id, details.bill.month, details.bill.year)
            if self.cache.set(key, snapshot_from_record(details, today), ticket=ticket):
                count += 1

        logger.info("Cached %d bills for renter %d", count, self.view.renter_id)
        return count

    async def wait_for_background(self) -> None:
        """Wait until every scheduled refresh and preload has finished."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    def cancel_background(self) -> None:
        for task in list(self._background):
            task.cancel()

    async def _fetch_snapshot(self, key: PeriodKey) -> BillSnapshot:
        details = await self.store.read_period(key.renter_id, key.month, key.year)
        if details.bill is not None:
            return snapshot_from_record(details, self._today())
        return fresh_snapshot(self.view.monthly_rent, details.previous_readings, self._today())

    def _apply_rejected(self, key: PeriodKey, snapshot: BillSnapshot) -> BillSnapshot | None:
        entry = self.cache.entry(key)
        if entry is not None:
            logger.info("Discarding reload of %s: a newer write landed first", key)
            if self.view.is_saving:
                # The view holds the edit being saved
                return None
            self.view.apply(key, entry.snapshot)
            return entry.snapshot

        # Invalidated while in flight: show what arrived, then read again
        logger.info("Reload of %s was invalidated in flight, refreshing", key)
        self.view.apply(key, snapshot)
        self.view.is_stale = True
        self._spawn(self.reload(key, background=True), f"refresh {key}")
        return snapshot

    def _still_wanted(self, token: RequestToken) -> bool:
        return self.register.is_current(token) and self.view.is_active(token.key)

    def _require_active(self) -> PeriodKey:
        if self.view.active_key is None:
            raise RuntimeError("No billing period is displayed")
        return self.view.active_key

    def _spawn(self, coro: Coroutine, name: str) -> None:
        task = asyncio.create_task(coro, name=name)
        self._background.add(task)
        task.add_done_callback(self._on_background_done)

    def _on_background_done(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Background task %s failed", task.get_name(), exc_info=exc)


__all__ = ["BillFetchService", "LOAD_FAILED_MESSAGE"]
