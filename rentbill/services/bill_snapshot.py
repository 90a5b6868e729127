"""Editable state of one billing period and its conversions.

A BillSnapshot is what the bill screen edits and what the bill cache stores. It is
immutable: edits produce a new snapshot with dataclasses.replace(), so a snapshot
held by the cache can never change underneath it.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal

from rentbill.models.bill_payment import PaymentMethod
from rentbill.schemas.bills import (
    AdditionalExpenseData,
    BillPaymentData,
    BillWithDetails,
    MonthlyBillData,
    PreviousReadings,
    SaveBillRequest,
    SaveBillResult,
)
from rentbill.services.bill_calculator import calculate_totals
from rentbill.services.periods import PeriodKey

DEFAULT_MULTIPLIER = Decimal("9")
DEFAULT_NUMBER_OF_PEOPLE = 2


@dataclass(frozen=True)
class ElectricityData:
    """Electricity meter inputs."""

    initial_reading: int = 0
    final_reading: int = 0
    multiplier: Decimal = DEFAULT_MULTIPLIER
    reading_date: date | None = None


@dataclass(frozen=True)
class MotorData:
    """Water-pump meter inputs; the charge is split between occupants."""

    initial_reading: int = 0
    final_reading: int = 0
    multiplier: Decimal = DEFAULT_MULTIPLIER
    number_of_people: int = DEFAULT_NUMBER_OF_PEOPLE
    reading_date: date | None = None


@dataclass(frozen=True)
class ExpenseEntry:
    description: str
    amount: Decimal
    expense_date: date
    id: int | None = None


@dataclass(frozen=True)
class PaymentEntry:
    amount: Decimal
    payment_date: date
    method: PaymentMethod = PaymentMethod.CASH
    note: str | None = None
    id: int | None = None


@dataclass(frozen=True)
class BillSnapshot:
    """Full editable state of one period."""

    rent_amount: Decimal
    electricity_enabled: bool = False
    electricity: ElectricityData = field(default_factory=ElectricityData)
    motor_enabled: bool = False
    motor: MotorData = field(default_factory=MotorData)
    water_enabled: bool = False
    water_amount: Decimal = Decimal("0")
    maintenance_enabled: bool = False
    maintenance_amount: Decimal = Decimal("0")
    expenses: tuple[ExpenseEntry, ...] = ()
    payments: tuple[PaymentEntry, ...] = ()
    # Stored bill id, None while the period has no saved bill
    bill_id: int | None = field(default=None, compare=False)

    @property
    def is_saved(self) -> bool:
        return self.bill_id is not None

    @property
    def is_fully_identified(self) -> bool:
        """True when every expense and payment carries a durable identifier."""
        return all(e.id is not None for e in self.expenses) and all(
            p.id is not None for p in self.payments
        )


def carry_forward_readings(
    previous: PreviousReadings | None,
    today: date | None = None,
) -> tuple[ElectricityData, MotorData]:
    """Start a fresh period's meters where the previous period ended.

    Initial and final readings both equal the previous final reading, so nothing is
    billed until a new final reading is entered. Zero when there is no previous bill.
    Must be called with the previous period's current readings every time a fresh
    period is built, never reused from an earlier result.
    """
    previous = previous or PreviousReadings()
    today = today or date.today()
    electricity = ElectricityData(
        initial_reading=previous.electricity_final,
        final_reading=previous.electricity_final,
        reading_date=today,
    )
    motor = MotorData(
        initial_reading=previous.motor_final,
        final_reading=previous.motor_final,
        reading_date=today,
    )
    return electricity, motor


def fresh_snapshot(
    base_amount: Decimal,
    previous: PreviousReadings | None,
    today: date | None = None,
) -> BillSnapshot:
    """Snapshot for a period with no saved bill: base rent only, readings carried forward."""
    electricity, motor = carry_forward_readings(previous, today)
    return BillSnapshot(rent_amount=base_amount, electricity=electricity, motor=motor)


def placeholder_snapshot(base_amount: Decimal, today: date | None = None) -> BillSnapshot:
    """Shown on a cache miss until the real period arrives."""
    return fresh_snapshot(base_amount, None, today)


def snapshot_from_record(details: BillWithDetails, today: date | None = None) -> BillSnapshot:
    """Map a stored bill with its expenses and payments into a snapshot.

    Raises:
        ValueError: If details carries no bill
    """
    bill = details.bill
    if bill is None:
        raise ValueError("Cannot map a period without a saved bill")
    today = today or date.today()

    return BillSnapshot(
        rent_amount=bill.rent_amount,
        electricity_enabled=bill.electricity_enabled,
        electricity=ElectricityData(
            initial_reading=bill.electricity_initial_reading or 0,
            final_reading=bill.electricity_final_reading or 0,
            multiplier=(
                bill.electricity_multiplier
                if bill.electricity_multiplier is not None
                else DEFAULT_MULTIPLIER
            ),
            reading_date=bill.electricity_reading_date or today,
        ),
        motor_enabled=bill.motor_enabled,
        motor=MotorData(
            initial_reading=bill.motor_initial_reading or 0,
            final_reading=bill.motor_final_reading or 0,
            multiplier=(
                bill.motor_multiplier if bill.motor_multiplier is not None else DEFAULT_MULTIPLIER
            ),
            number_of_people=bill.motor_number_of_people or DEFAULT_NUMBER_OF_PEOPLE,
            reading_date=bill.motor_reading_date or today,
        ),
        water_enabled=bill.water_enabled,
        water_amount=bill.water_amount,
        maintenance_enabled=bill.maintenance_enabled,
        maintenance_amount=bill.maintenance_amount,
        expenses=tuple(
            ExpenseEntry(
                id=expense.id,
                description=expense.description,
                amount=expense.amount,
                expense_date=expense.expense_date,
            )
            for expense in details.expenses
        ),
        payments=tuple(
            PaymentEntry(
                id=payment.id,
                amount=payment.amount,
                payment_date=payment.payment_date,
                method=payment.payment_type,
                note=payment.note,
            )
            for payment in details.payments
        ),
        bill_id=bill.id,
    )


def build_save_request(
    key: PeriodKey,
    snapshot: BillSnapshot,
    today: date | None = None,
) -> SaveBillRequest:
    """Build the write transaction payload for a period."""
    today = today or date.today()
    totals = calculate_totals(snapshot)

    bill = MonthlyBillData(
        renter_id=key.renter_id,
        month=key.month,
        year=key.year,
        rent_amount=snapshot.rent_amount,
        electricity_enabled=snapshot.electricity_enabled,
        electricity_initial_reading=snapshot.electricity.initial_reading,
        electricity_final_reading=snapshot.electricity.final_reading,
        electricity_multiplier=snapshot.electricity.multiplier,
        electricity_reading_date=snapshot.electricity.reading_date or today,
        electricity_amount=totals.electricity_amount,
        motor_enabled=snapshot.motor_enabled,
        motor_initial_reading=snapshot.motor.initial_reading,
        motor_final_reading=snapshot.motor.final_reading,
        motor_multiplier=snapshot.motor.multiplier,
        motor_number_of_people=snapshot.motor.number_of_people,
        motor_reading_date=snapshot.motor.reading_date or today,
        motor_amount=totals.motor_amount,
        water_enabled=snapshot.water_enabled,
        water_amount=snapshot.water_amount,
        maintenance_enabled=snapshot.maintenance_enabled,
        maintenance_amount=snapshot.maintenance_amount,
        total_amount=totals.total_amount,
        total_payments=totals.total_payments,
        pending_amount=totals.pending_amount,
    )
    expenses = [
        AdditionalExpenseData(
            id=expense.id,
            description=expense.description,
            amount=expense.amount,
            expense_date=expense.expense_date,
        )
        for expense in snapshot.expenses
    ]
    payments = [
        BillPaymentData(
            id=payment.id,
            amount=payment.amount,
            payment_date=payment.payment_date,
            payment_type=payment.method,
            note=payment.note,
        )
        for payment in snapshot.payments
    ]
    return SaveBillRequest(bill=bill, expenses=expenses, payments=payments)


def reconcile_identifiers(snapshot: BillSnapshot, result: SaveBillResult) -> BillSnapshot:
    """Adopt the identifiers a save assigned, matched by list position.

    An entry keeps its existing id when the result has none at its position.
    """
    expenses = tuple(
        replace(expense, id=_id_at(result.expense_ids, index, expense.id))
        for index, expense in enumerate(snapshot.expenses)
    )
    payments = tuple(
        replace(payment, id=_id_at(result.payment_ids, index, payment.id))
        for index, payment in enumerate(snapshot.payments)
    )
    return replace(snapshot, expenses=expenses, payments=payments, bill_id=result.bill_id)


def _id_at(ids: list[int], index: int, fallback: int | None) -> int | None:
    if index < len(ids) and ids[index]:
        return ids[index]
    return fallback


__all__ = [
    "BillSnapshot",
    "ElectricityData",
    "ExpenseEntry",
    "MotorData",
    "PaymentEntry",
    "build_save_request",
    "carry_forward_readings",
    "fresh_snapshot",
    "placeholder_snapshot",
    "reconcile_identifiers",
    "snapshot_from_record",
]
