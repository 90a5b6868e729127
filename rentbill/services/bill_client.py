"""Bill screen of one renter wired against the rentbill HTTP API."""

import logging
from datetime import date
from typing import Callable

from rentbill.schemas.renters import RenterData
from rentbill.services.bill_cache import BillCache
from rentbill.services.bill_fetch_service import BillFetchService
from rentbill.services.bill_save_service import BillSaveService
from rentbill.services.bill_view import BillView
from rentbill.services.config import BillingConfig, get_config
from rentbill.services.errors import BillStoreError
from rentbill.services.http_bill_store import HttpBillRecordStore

logger = logging.getLogger(__name__)


class BillClient:
    """Cache, view and coordinators for one renter sharing a single HTTP store.

    Fresh months default to the renter's monthly rent, read once when connecting.
    """

    def __init__(
        self,
        store: HttpBillRecordStore,
        renter: RenterData,
        cache: BillCache,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.store = store
        self.renter = renter
        self.cache = cache
        self.view = BillView(renter.id, renter.monthly_rent)
        self.fetcher = BillFetchService(store, cache, self.view, today=today)
        self.saver = BillSaveService(store, cache, self.view, self.fetcher, today=today)

    @classmethod
    async def connect(
        cls,
        store: HttpBillRecordStore,
        renter_id: int,
        config: BillingConfig | None = None,
        today: Callable[[], date] = date.today,
    ) -> "BillClient":
        """
        Read the renter record and build the screen around it.

        Raises:
            BillReadError: If the renter could not be read
        """
        config = config or get_config()
        renter = await store.read_renter(renter_id)
        logger.info("Opened bills of renter %d (%s)", renter.id, renter.name)
        return cls(store, renter, BillCache.from_config(config), today)

    @classmethod
    async def open(cls, renter_id: int, config: BillingConfig | None = None) -> "BillClient":
        """Connect to the configured API with a client owned by the screen."""
        config = config or get_config()
        store = HttpBillRecordStore.from_config(config)
        try:
            return await cls.connect(store, renter_id, config)
        except BillStoreError:
            await store.aclose()
            raise

    async def aclose(self) -> None:
        self.fetcher.cancel_background()
        await self.store.aclose()

    async def __aenter__(self) -> "BillClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


__all__ = ["BillClient"]
