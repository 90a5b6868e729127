"""Optimistic saving of the displayed bill.

A save writes the edited snapshot into the cache before the store confirms it, so
navigating away and back shows the edit immediately. On success the identifiers
assigned by the store are adopted; on failure the cache entry is dropped and the
period reloaded from the store, keeping the rejected edit for a retry.

Per period: IDLE -> SAVING -> CONFIRMED, or SAVING -> ROLLED_BACK -> (reload) -> IDLE.
"""

import logging
from datetime import date
from enum import Enum
from typing import Callable

from rentbill.schemas.bills import SaveBillResult
from rentbill.services.bill_cache import BillCache
from rentbill.services.bill_fetch_service import BillFetchService
from rentbill.services.bill_snapshot import (
    BillSnapshot,
    build_save_request,
    reconcile_identifiers,
)
from rentbill.services.bill_store import BillRecordStore
from rentbill.services.bill_view import BillView, NoticeKind
from rentbill.services.errors import BillStoreError
from rentbill.services.periods import PeriodKey

logger = logging.getLogger(__name__)

SAVE_FAILED_MESSAGE = "Failed to save bill. The data has been restored to the last saved state."


class SaveState(str, Enum):
    """Lifecycle of the most recent save of one period."""

    IDLE = "idle"
    SAVING = "saving"
    CONFIRMED = "confirmed"
    ROLLED_BACK = "rolled_back"


class BillSaveService:
    """Persists edited bills with immediate cache feedback and rollback on failure."""

    def __init__(
        self,
        store: BillRecordStore,
        cache: BillCache,
        view: BillView,
        fetcher: BillFetchService,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.store = store
        self.cache = cache
        self.view = view
        self.fetcher = fetcher
        self._today = today
        self._states: dict[PeriodKey, SaveState] = {}
        # Cache ticket of the newest save per period
        self._latest_save: dict[PeriodKey, int] = {}

    def state(self, key: PeriodKey) -> SaveState:
        return self._states.get(key, SaveState.IDLE)

    async def save(
        self,
        key: PeriodKey | None = None,
        edited: BillSnapshot | None = None,
    ) -> SaveState:
        """Save a period, by default the one on screen with its current edits.

        Args:
            key: Period to save (defaults to the active period)
            edited: Snapshot to persist (defaults to the displayed snapshot)

        Returns:
            CONFIRMED if the store accepted the bill, ROLLED_BACK otherwise

        Raises:
            RuntimeError: If no period or snapshot is available to save
        """
        key = key or self.view.active_key
        if key is None:
            raise RuntimeError("No billing period is displayed")
        if edited is None:
            if not self.view.is_active(key) or self.view.snapshot is None:
                raise RuntimeError(f"No snapshot to save for {key}")
            edited = self.view.snapshot

        self._states[key] = SaveState.SAVING
        self.view.begin_saving(key)

        ticket = self.cache.reserve()
        self.cache.set(key, edited, ticket=ticket)
        self._latest_save[key] = ticket

        request = build_save_request(key, edited, self._today())
        try:
            result = await self.store.save_period(request)
        except BillStoreError as e:
            logger.error("Error saving bill %s: %s", key, e)
            return await self._roll_back(key, edited, ticket)

        return self._confirm(key, edited, ticket, result)

    async def retry(self) -> SaveState:
        """Save the edit the store rejected last time.

        Raises:
            RuntimeError: If there is no rejected edit for the displayed period
        """
        key = self.view.active_key
        edit = self.view.unsaved_edit
        if key is None or edit is None:
            raise RuntimeError("There is no rejected edit to retry")

        self.view.apply(key, edit)
        self.view.dismiss_notice()
        return await self.save(key, edit)

    def _confirm(
        self,
        key: PeriodKey,
        edited: BillSnapshot,
        ticket: int,
        result: SaveBillResult,
    ) -> SaveState:
        reconciled = reconcile_identifiers(edited, result)

        if self._latest_save.get(key) != ticket:
            logger.info("Save of %s confirmed after a newer save was issued, ignoring", key)
            return SaveState.CONFIRMED

        del self._latest_save[key]
        self.cache.set(key, reconciled)
        self._drop_carried_forward(key.next())
        self._states[key] = SaveState.CONFIRMED
        self.view.end_saving(key)

        if self.view.is_active(key):
            # Later edits keep their own values; only an untouched view adopts the ids
            if self.view.snapshot == edited:
                self.view.apply(key, reconciled)
            if self.view.unsaved_edit == edited:
                self.view.unsaved_edit = None
            if self.view.notice is not None and self.view.notice.kind is NoticeKind.WRITE:
                self.view.dismiss_notice()

        logger.info("Saved bill %s as bill %d", key, result.bill_id)
        return SaveState.CONFIRMED

    def _drop_carried_forward(self, key: PeriodKey) -> None:
        """Drop key if its cached readings were carried forward from the period just saved."""
        if key in self._latest_save:
            return
        entry = self.cache.entry(key)
        if entry is not None and entry.snapshot.is_saved:
            return
        # Also fences a load of key that is still in flight
        self.cache.invalidate(key)

    async def _roll_back(self, key: PeriodKey, edited: BillSnapshot, ticket: int) -> SaveState:
        if self._latest_save.get(key) != ticket:
            logger.warning("Save of %s failed after a newer save was issued, ignoring", key)
            return SaveState.ROLLED_BACK

        self._states[key] = SaveState.ROLLED_BACK
        self.cache.invalidate(key)
        if self.view.is_active(key):
            self.view.unsaved_edit = edited

        try:
            if self.view.is_active(key):
                await self.fetcher.reload(key)
            else:
                await self.fetcher.load_into_cache(key)
        finally:
            if self._latest_save.get(key) == ticket:
                del self._latest_save[key]
                self.view.end_saving(key)

        self.view.show_notice(key, NoticeKind.WRITE, SAVE_FAILED_MESSAGE)
        if self._states.get(key) is SaveState.ROLLED_BACK:
            self._states[key] = SaveState.IDLE
        return SaveState.ROLLED_BACK


__all__ = ["BillSaveService", "SAVE_FAILED_MESSAGE", "SaveState"]
