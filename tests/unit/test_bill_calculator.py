"""Tests for bill line-item formulas."""

from datetime import date
from decimal import Decimal

from rentbill.services.bill_calculator import calculate_totals, electricity_amount, motor_amount
from rentbill.services.bill_snapshot import (
    BillSnapshot,
    ElectricityData,
    ExpenseEntry,
    MotorData,
    PaymentEntry,
)


def test_electricity_amount_uses_multiplier() -> None:
    data = ElectricityData(initial_reading=7879, final_reading=7979, multiplier=Decimal("9"))
    assert electricity_amount(True, data) == Decimal("900.00")


def test_disabled_charges_are_zero() -> None:
    data = ElectricityData(initial_reading=0, final_reading=100)
    assert electricity_amount(False, data) == Decimal("0")
    assert motor_amount(False, MotorData(initial_reading=0, final_reading=100)) == Decimal("0")


def test_motor_amount_split_between_people() -> None:
    data = MotorData(initial_reading=100, final_reading=110, multiplier=Decimal("9"), number_of_people=3)
    # 10 / 3 * 9 = 30
    assert motor_amount(True, data) == Decimal("30.00")


def test_motor_amount_rounds_half_up() -> None:
    data = MotorData(initial_reading=0, final_reading=1, multiplier=Decimal("1"), number_of_people=8)
    # 0.125 -> 0.13
    assert motor_amount(True, data) == Decimal("0.13")


def test_motor_amount_without_people_is_zero() -> None:
    data = MotorData(initial_reading=0, final_reading=50, number_of_people=0)
    assert motor_amount(True, data) == Decimal("0")


def test_calculate_totals() -> None:
    snapshot = BillSnapshot(
        rent_amount=Decimal("9000"),
        electricity_enabled=True,
        electricity=ElectricityData(initial_reading=100, final_reading=150),
        motor_enabled=True,
        motor=MotorData(initial_reading=10, final_reading=14, number_of_people=2),
        water_enabled=True,
        water_amount=Decimal("200"),
        maintenance_enabled=False,
        maintenance_amount=Decimal("500"),
        expenses=(ExpenseEntry("Plumber", Decimal("350"), date(2025, 3, 2)),),
        payments=(PaymentEntry(Decimal("5000"), date(2025, 3, 5)),),
    )

    totals = calculate_totals(snapshot)

    assert totals.electricity_amount == Decimal("450.00")
    assert totals.motor_amount == Decimal("18.00")
    assert totals.total_amount == Decimal("10018.00")
    assert totals.total_payments == Decimal("5000")
    assert totals.pending_amount == Decimal("5018.00")
