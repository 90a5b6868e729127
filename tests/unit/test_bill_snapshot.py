"""Tests for bill snapshot mapping, carry-forward and identifier reconciliation."""

from dataclasses import FrozenInstanceError
from datetime import date
from decimal import Decimal

import pytest

from rentbill.models.bill_payment import PaymentMethod
from rentbill.schemas.bills import (
    AdditionalExpenseData,
    BillPaymentData,
    BillWithDetails,
    MonthlyBillData,
    PreviousReadings,
    SaveBillResult,
)
from rentbill.services.bill_snapshot import (
    BillSnapshot,
    ExpenseEntry,
    PaymentEntry,
    build_save_request,
    carry_forward_readings,
    fresh_snapshot,
    placeholder_snapshot,
    reconcile_identifiers,
    snapshot_from_record,
)
from rentbill.services.periods import PeriodKey

TODAY = date(2025, 3, 15)


class TestCarryForward:
    """Fresh periods start their meters where the previous period ended."""

    def test_previous_final_becomes_initial_and_final(self) -> None:
        electricity, motor = carry_forward_readings(
            PreviousReadings(electricity_final=1236, motor_final=88), TODAY
        )

        assert electricity.initial_reading == electricity.final_reading == 1236
        assert motor.initial_reading == motor.final_reading == 88
        assert electricity.reading_date == TODAY

    def test_no_previous_period_starts_at_zero(self) -> None:
        electricity, motor = carry_forward_readings(None, TODAY)

        assert electricity.initial_reading == electricity.final_reading == 0
        assert motor.initial_reading == motor.final_reading == 0

    def test_fresh_snapshot_disables_charges(self) -> None:
        snapshot = fresh_snapshot(Decimal("9000"), PreviousReadings(electricity_final=1236), TODAY)

        assert snapshot.electricity.initial_reading == 1236
        assert snapshot.electricity.final_reading == 1236
        assert snapshot.electricity_enabled is False
        assert snapshot.motor_enabled is False
        assert snapshot.water_enabled is False
        assert snapshot.maintenance_enabled is False

    def test_fresh_period_scenario(self) -> None:
        snapshot = fresh_snapshot(Decimal("9000"), PreviousReadings(electricity_final=7879), TODAY)

        assert snapshot.electricity.initial_reading == 7879
        assert snapshot.electricity.final_reading == 7879
        assert snapshot.rent_amount == Decimal("9000")
        assert snapshot.electricity_enabled is False
        assert snapshot.expenses == ()
        assert snapshot.payments == ()

    def test_placeholder_has_zero_readings(self) -> None:
        snapshot = placeholder_snapshot(Decimal("9000"), TODAY)

        assert snapshot.rent_amount == Decimal("9000")
        assert snapshot.electricity.final_reading == 0
        assert snapshot.motor.final_reading == 0


class TestSnapshotFromRecord:
    """Stored bills map field for field into snapshots."""

    def _details(self, **bill_fields) -> BillWithDetails:
        bill = MonthlyBillData(renter_id=7, month=3, year=2025, id=11, **bill_fields)
        return BillWithDetails(
            bill=bill,
            expenses=[
                AdditionalExpenseData(
                    id=21, description="Plumber", amount=Decimal("350"), expense_date=date(2025, 3, 2)
                )
            ],
            payments=[
                BillPaymentData(
                    id=31,
                    amount=Decimal("5000"),
                    payment_date=date(2025, 3, 5),
                    payment_type=PaymentMethod.ONLINE,
                    note="UPI",
                )
            ],
        )

    def test_maps_fields_and_children(self) -> None:
        details = self._details(
            rent_amount=Decimal("9000"),
            electricity_enabled=True,
            electricity_initial_reading=7879,
            electricity_final_reading=7979,
            water_enabled=True,
            water_amount=Decimal("200"),
        )

        snapshot = snapshot_from_record(details, TODAY)

        assert snapshot.rent_amount == Decimal("9000")
        assert snapshot.electricity_enabled is True
        assert snapshot.electricity.initial_reading == 7879
        assert snapshot.electricity.final_reading == 7979
        assert snapshot.water_amount == Decimal("200")
        assert snapshot.expenses == (
            ExpenseEntry(id=21, description="Plumber", amount=Decimal("350"), expense_date=date(2025, 3, 2)),
        )
        assert snapshot.payments[0].id == 31
        assert snapshot.payments[0].method is PaymentMethod.ONLINE
        assert snapshot.is_fully_identified

    def test_missing_values_get_defaults(self) -> None:
        details = self._details(electricity_multiplier=None, motor_multiplier=None, motor_number_of_people=None)

        snapshot = snapshot_from_record(details, TODAY)

        assert snapshot.electricity.multiplier == Decimal("9")
        assert snapshot.motor.multiplier == Decimal("9")
        assert snapshot.motor.number_of_people == 2
        assert snapshot.electricity.reading_date == TODAY
        assert snapshot.motor.reading_date == TODAY

    def test_period_without_bill_rejected(self) -> None:
        with pytest.raises(ValueError):
            snapshot_from_record(BillWithDetails(), TODAY)


class TestSaveRequest:
    """Snapshots convert into the write transaction payload."""

    def test_build_save_request_computes_totals(self) -> None:
        snapshot = BillSnapshot(
            rent_amount=Decimal("9000"),
            expenses=(ExpenseEntry("Plumber", Decimal("350"), date(2025, 3, 2)),),
            payments=(PaymentEntry(Decimal("5000"), date(2025, 3, 5)),),
        )

        request = build_save_request(PeriodKey(7, 3, 2025), snapshot, TODAY)

        assert request.bill.renter_id == 7
        assert request.bill.month == 3
        assert request.bill.year == 2025
        assert request.bill.total_amount == Decimal("9350")
        assert request.bill.pending_amount == Decimal("4350")
        assert request.bill.electricity_reading_date == TODAY
        assert [e.description for e in request.expenses] == ["Plumber"]
        assert request.expenses[0].id is None
        assert request.payments[0].payment_type is PaymentMethod.CASH

    def test_reconcile_assigns_ids_by_position(self) -> None:
        snapshot = BillSnapshot(
            rent_amount=Decimal("9000"),
            expenses=(
                ExpenseEntry("Plumber", Decimal("350"), TODAY, id=21),
                ExpenseEntry("Paint", Decimal("800"), TODAY),
            ),
            payments=(PaymentEntry(Decimal("5000"), TODAY),),
        )
        result = SaveBillResult(bill_id=11, expense_ids=[41, 42], payment_ids=[43])

        reconciled = reconcile_identifiers(snapshot, result)

        assert [e.id for e in reconciled.expenses] == [41, 42]
        assert [p.id for p in reconciled.payments] == [43]
        assert reconciled.expenses[1].amount == Decimal("800")
        assert reconciled.is_fully_identified

    def test_reconcile_keeps_existing_id_when_result_is_short(self) -> None:
        snapshot = BillSnapshot(
            rent_amount=Decimal("9000"),
            expenses=(ExpenseEntry("Plumber", Decimal("350"), TODAY, id=21),),
        )

        reconciled = reconcile_identifiers(snapshot, SaveBillResult(bill_id=11))

        assert reconciled.expenses[0].id == 21

    def test_reconciled_snapshot_is_saved(self) -> None:
        snapshot = BillSnapshot(rent_amount=Decimal("9000"))

        reconciled = reconcile_identifiers(snapshot, SaveBillResult(bill_id=11))

        assert not snapshot.is_saved
        assert reconciled.is_saved
        assert reconciled.bill_id == 11
        assert reconciled == snapshot

    def test_snapshots_are_immutable(self) -> None:
        snapshot = BillSnapshot(rent_amount=Decimal("9000"))
        with pytest.raises(FrozenInstanceError):
            snapshot.rent_amount = Decimal("1")
