"""Pydantic schemas for monthly bills, their expenses and payments."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from rentbill.models.bill_payment import PaymentMethod


class MonthlyBillData(BaseModel):
    """Bill fields as stored, including computed line amounts and totals."""

    id: int | None = None
    renter_id: int
    month: int = Field(..., ge=1, le=12)
    year: int
    rent_amount: Decimal = Decimal("0")

    electricity_enabled: bool = False
    electricity_initial_reading: int = 0
    electricity_final_reading: int = 0
    electricity_multiplier: Decimal | None = Decimal("9")
    electricity_reading_date: date | None = None
    electricity_amount: Decimal = Decimal("0")

    motor_enabled: bool = False
    motor_initial_reading: int = 0
    motor_final_reading: int = 0
    motor_multiplier: Decimal | None = Decimal("9")
    motor_number_of_people: int | None = 2
    motor_reading_date: date | None = None
    motor_amount: Decimal = Decimal("0")

    water_enabled: bool = False
    water_amount: Decimal = Decimal("0")

    maintenance_enabled: bool = False
    maintenance_amount: Decimal = Decimal("0")

    total_amount: Decimal = Decimal("0")
    total_payments: Decimal = Decimal("0")
    pending_amount: Decimal = Decimal("0")

    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class AdditionalExpenseData(BaseModel):
    """Expense line; id is None until the first successful save."""

    id: int | None = None
    monthly_bill_id: int | None = None
    description: str = Field(..., min_length=1)
    amount: Decimal
    expense_date: date

    model_config = ConfigDict(from_attributes=True)


class BillPaymentData(BaseModel):
    """Payment line; id is None until the first successful save."""

    id: int | None = None
    monthly_bill_id: int | None = None
    amount: Decimal
    payment_date: date
    payment_type: PaymentMethod = PaymentMethod.CASH
    note: str | None = None

    model_config = ConfigDict(from_attributes=True)


class PreviousReadings(BaseModel):
    """Final meter readings of the preceding month (zero when it has no bill)."""

    electricity_final: int = 0
    motor_final: int = 0


class BillWithDetails(BaseModel):
    """One period as read from the store; bill is None when nothing was saved yet."""

    bill: MonthlyBillData | None = None
    expenses: list[AdditionalExpenseData] = Field(default_factory=list)
    payments: list[BillPaymentData] = Field(default_factory=list)
    previous_readings: PreviousReadings = Field(default_factory=PreviousReadings)


class SaveBillRequest(BaseModel):
    """Write transaction payload: bill fields plus full replacement child lists."""

    bill: MonthlyBillData
    expenses: list[AdditionalExpenseData] = Field(default_factory=list)
    payments: list[BillPaymentData] = Field(default_factory=list)


class SaveBillResult(BaseModel):
    """Identifiers assigned by a save, positionally matching the request lists."""

    bill_id: int
    expense_ids: list[int] = Field(default_factory=list)
    payment_ids: list[int] = Field(default_factory=list)
    success: bool = True


__all__ = [
    "AdditionalExpenseData",
    "BillPaymentData",
    "BillWithDetails",
    "MonthlyBillData",
    "PreviousReadings",
    "SaveBillRequest",
    "SaveBillResult",
]
