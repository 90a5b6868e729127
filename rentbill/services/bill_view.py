"""State of the bill screen for one renter.

Holds the period on display, the snapshot being edited, and the status flags the
screen renders (loading, saving, "may be outdated", error notice). Coordinators
write into it; apply() refuses snapshots for any period other than the active one.
"""

import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Any

from rentbill.services.bill_snapshot import BillSnapshot
from rentbill.services.periods import PeriodKey

logger = logging.getLogger(__name__)


class NoticeKind(str, Enum):
    """Which operation a user-facing notice is about."""

    READ = "read"
    WRITE = "write"


@dataclass(frozen=True)
class ViewNotice:
    """Error shown to the user, optionally with a retry action."""

    kind: NoticeKind
    message: str
    retryable: bool = True


class BillView:
    """Bill screen state for one renter."""

    def __init__(self, renter_id: int, monthly_rent: Decimal) -> None:
        self.renter_id = renter_id
        self.monthly_rent = monthly_rent
        self.active_key: PeriodKey | None = None
        self.snapshot: BillSnapshot | None = None
        self.is_stale = False
        self.is_loading = False
        self.notice: ViewNotice | None = None
        self.unsaved_edit: BillSnapshot | None = None
        self._saving: set[PeriodKey] = set()

    @property
    def is_saving(self) -> bool:
        """True while a save for the displayed period is pending."""
        return self.active_key is not None and self.active_key in self._saving

    def key_for(self, month: int, year: int) -> PeriodKey:
        return PeriodKey(self.renter_id, month, year)

    def activate(self, key: PeriodKey) -> None:
        """Switch the displayed period and reset its per-period flags."""
        if key.renter_id != self.renter_id:
            raise ValueError(f"Period {key} belongs to another renter than {self.renter_id}")
        self.active_key = key
        self.is_stale = False
        self.is_loading = False
        self.notice = None
        self.unsaved_edit = None

    def is_active(self, key: PeriodKey) -> bool:
        return self.active_key == key

    def apply(self, key: PeriodKey, snapshot: BillSnapshot) -> bool:
        """Display snapshot if key is still the active period.

        Returns:
            True if the view changed
        """
        if not self.is_active(key):
            logger.debug("Not applying snapshot for inactive period %s", key)
            return False
        self.snapshot = snapshot
        return True

    def edit(self, **changes: Any) -> BillSnapshot:
        """Record a user edit on the displayed snapshot.

        Raises:
            RuntimeError: If no period is displayed yet
        """
        if self.snapshot is None:
            raise RuntimeError("No bill is displayed")
        self.snapshot = replace(self.snapshot, **changes)
        return self.snapshot

    def begin_saving(self, key: PeriodKey) -> None:
        self._saving.add(key)

    def end_saving(self, key: PeriodKey) -> None:
        self._saving.discard(key)

    def show_notice(self, key: PeriodKey, kind: NoticeKind, message: str) -> None:
        """Show an error for key, if it is still on screen."""
        if self.is_active(key):
            self.notice = ViewNotice(kind=kind, message=message)

    def dismiss_notice(self) -> None:
        self.notice = None


__all__ = ["BillView", "NoticeKind", "ViewNotice"]
