"""Exception classes for bill storage and synchronization.

Stores translate driver and transport errors into these so coordinators only ever
handle one family of failures.
"""


class BillingError(Exception):
    """Base exception for billing errors."""

    pass


class BillStoreError(BillingError):
    """Bill record store failed (database, network, or server error)."""

    pass


class BillReadError(BillStoreError):
    """Reading one or more billing periods failed."""

    pass


class BillWriteError(BillStoreError):
    """Saving a billing period failed; nothing was persisted."""

    pass


class RenterNotFoundError(BillWriteError):
    """Renter referenced by a bill or request does not exist."""

    def __init__(self, renter_id: int):
        self.renter_id = renter_id
        super().__init__(f"Renter {renter_id} not found")
