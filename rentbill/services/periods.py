"""Billing period addressing and request supersession.

A PeriodKey names one renter's bill for one calendar month. A RequestRegister is
the single slot that decides whether a reload response is still wanted: every
reload captures a token when issued, and only the newest token may touch the view.
"""

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class PeriodKey:
    """One renter's billing period (month 1-12 of a year)."""

    renter_id: int
    month: int
    year: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"Month must be between 1 and 12, got {self.month}")

    @classmethod
    def from_date(cls, renter_id: int, day: date) -> "PeriodKey":
        """Period containing the given day."""
        return cls(renter_id=renter_id, month=day.month, year=day.year)

    @property
    def token(self) -> str:
        """Stable string form, e.g. '7-2025-1'."""
        return f"{self.renter_id}-{self.year}-{self.month}"

    def previous(self) -> "PeriodKey":
        if self.month == 1:
            return PeriodKey(self.renter_id, 12, self.year - 1)
        return PeriodKey(self.renter_id, self.month - 1, self.year)

    def next(self) -> "PeriodKey":
        if self.month == 12:
            return PeriodKey(self.renter_id, 1, self.year + 1)
        return PeriodKey(self.renter_id, self.month + 1, self.year)

    def adjacent(self) -> tuple["PeriodKey", "PeriodKey"]:
        """(previous, next) periods of the same renter."""
        return self.previous(), self.next()

    def __str__(self) -> str:
        return self.token


@dataclass(frozen=True)
class RequestToken:
    """Value captured by a reload when it is issued."""

    key: PeriodKey
    generation: int


class RequestRegister:
    """Single-slot register of the most recently issued reload.

    issue() bumps a generation counter, so two reloads of the same period are
    still told apart: the later one supersedes the earlier one.
    """

    def __init__(self) -> None:
        self._generation = 0
        self._current: RequestToken | None = None

    @property
    def current(self) -> RequestToken | None:
        return self._current

    def issue(self, key: PeriodKey) -> RequestToken:
        self._generation += 1
        self._current = RequestToken(key=key, generation=self._generation)
        return self._current

    def is_current(self, token: RequestToken) -> bool:
        return self._current is not None and self._current.generation == token.generation


__all__ = ["PeriodKey", "RequestRegister", "RequestToken"]
