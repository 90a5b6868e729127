"""Bill line-item formulas.

Pure functions of a bill snapshot. Disabled charges contribute zero.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, NamedTuple

if TYPE_CHECKING:
    from rentbill.services.bill_snapshot import BillSnapshot, ElectricityData, MotorData

CENT = Decimal("0.01")


class BillTotals(NamedTuple):
    """Computed amounts persisted alongside a bill."""

    electricity_amount: Decimal
    motor_amount: Decimal
    total_amount: Decimal
    total_payments: Decimal
    pending_amount: Decimal


def electricity_amount(enabled: bool, data: "ElectricityData") -> Decimal:
    """(final - initial) * multiplier."""
    if not enabled:
        return Decimal("0")
    consumption = Decimal(data.final_reading - data.initial_reading)
    return (consumption * data.multiplier).quantize(CENT, rounding=ROUND_HALF_UP)


def motor_amount(enabled: bool, data: "MotorData") -> Decimal:
    """(final - initial) / people * multiplier, split evenly between occupants."""
    if not enabled or data.number_of_people <= 0:
        return Decimal("0")
    consumption = Decimal(data.final_reading - data.initial_reading)
    share = consumption / Decimal(data.number_of_people)
    return (share * data.multiplier).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_totals(snapshot: "BillSnapshot") -> BillTotals:
    """Compute every derived amount of a bill."""
    electricity = electricity_amount(snapshot.electricity_enabled, snapshot.electricity)
    motor = motor_amount(snapshot.motor_enabled, snapshot.motor)
    water = snapshot.water_amount if snapshot.water_enabled else Decimal("0")
    maintenance = snapshot.maintenance_amount if snapshot.maintenance_enabled else Decimal("0")
    expenses = sum((expense.amount for expense in snapshot.expenses), Decimal("0"))
    payments = sum((payment.amount for payment in snapshot.payments), Decimal("0"))

    total = snapshot.rent_amount + electricity + motor + water + maintenance + expenses
    return BillTotals(
        electricity_amount=electricity,
        motor_amount=motor,
        total_amount=total,
        total_payments=payments,
        pending_amount=total - payments,
    )


__all__ = ["BillTotals", "calculate_totals", "electricity_amount", "motor_amount"]
