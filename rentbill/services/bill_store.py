"""Bill record store: the authoritative source of monthly bills.

BillRecordStore is the contract the bill cache coordinators depend on.
BillRecordService implements it over the database and backs the HTTP API;
HttpBillRecordStore (http_bill_store.py) implements it over that API.
"""

import logging
from abc import ABC, abstractmethod

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from rentbill.models.additional_expense import AdditionalExpense
from rentbill.models.bill_payment import BillPayment
from rentbill.models.monthly_bill import MonthlyBill
from rentbill.models.renter import Renter
from rentbill.schemas.bills import (
    AdditionalExpenseData,
    BillPaymentData,
    BillWithDetails,
    MonthlyBillData,
    PreviousReadings,
    SaveBillRequest,
    SaveBillResult,
)
from rentbill.services.audit_service import AuditService
from rentbill.services.errors import BillReadError, BillWriteError, RenterNotFoundError
from rentbill.services.periods import PeriodKey

logger = logging.getLogger(__name__)

# Bill columns owned by the database rather than the request
_READ_ONLY_BILL_FIELDS = {"id", "renter_id", "month", "year", "created_at", "updated_at"}


class BillRecordStore(ABC):
    """Read and write billing periods.

    Reads are idempotent and safe to retry. save_period is atomic: the bill and all
    of its expenses and payments are replaced together, or nothing changes.
    """

    @abstractmethod
    async def read_period(self, renter_id: int, month: int, year: int) -> BillWithDetails:
        """Read one period plus the preceding period's final readings.

        Raises:
            BillReadError: If the store cannot be read
        """

    @abstractmethod
    async def read_all_periods(self, renter_id: int) -> list[BillWithDetails]:
        """Read every saved period of a renter, newest first.

        Raises:
            BillReadError: If the store cannot be read
        """

    @abstractmethod
    async def save_period(self, request: SaveBillRequest) -> SaveBillResult:
        """Replace one period's bill, expenses and payments in one transaction.

        Returns:
            Identifiers of the bill and of every expense/payment, in request order

        Raises:
            BillWriteError: If nothing was saved
        """


class BillRecordService(BillRecordStore):
    """Database-backed bill record store."""

    def __init__(self, session: AsyncSession):
        """Initialize with async database session."""
        self.session = session

    async def read_period(self, renter_id: int, month: int, year: int) -> BillWithDetails:
        key = PeriodKey(renter_id, month, year)
        try:
            bill = await self._get_bill(key)
            previous_bill = await self._get_bill(key.previous())
        except SQLAlchemyError as e:
            logger.error("Error reading bill %s: %s", key, e)
            raise BillReadError(f"Failed to fetch bill details: {e}") from e

        previous_readings = PreviousReadings(
            electricity_final=previous_bill.electricity_final_reading if previous_bill else 0,
            motor_final=previous_bill.motor_final_reading if previous_bill else 0,
        )
        if bill is None:
            return BillWithDetails(bill=None, previous_readings=previous_readings)
        return self._to_details(bill, previous_readings)

    async def read_all_periods(self, renter_id: int) -> list[BillWithDetails]:
        stmt = (
            select(MonthlyBill)
            .where(MonthlyBill.renter_id == renter_id)
            .options(selectinload(MonthlyBill.expenses), selectinload(MonthlyBill.payments))
            .order_by(MonthlyBill.year.desc(), MonthlyBill.month.desc())
        )
        try:
            result = await self.session.execute(stmt)
            bills = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Error reading bills of renter %d: %s", renter_id, e)
            raise BillReadError(f"Failed to fetch bills: {e}") from e

        # Previous readings only matter for periods without a bill
        return [self._to_details(bill, PreviousReadings()) for bill in bills]

    async def save_period(self, request: SaveBillRequest) -> SaveBillResult:
        data = request.bill
        key = PeriodKey(data.renter_id, data.month, data.year)

        try:
            renter = await self.session.get(Renter, data.renter_id)
            if renter is None:
                raise RenterNotFoundError(data.renter_id)

            bill = await self._get_bill(key)
            if bill is None:
                bill = MonthlyBill(renter_id=key.renter_id, month=key.month, year=key.year)
                self.session.add(bill)

            for field, value in data.model_dump(exclude=_READ_ONLY_BILL_FIELDS).items():
                setattr(bill, field, value)

            # Full replacement: delete-orphan cascade removes the previous rows
            expenses = [
                AdditionalExpense(
                    description=expense.description,
                    amount=expense.amount,
                    expense_date=expense.expense_date,
                )
                for expense in request.expenses
            ]
            payments = [
                BillPayment(
                    amount=payment.amount,
                    payment_date=payment.payment_date,
                    payment_type=payment.payment_type,
                    note=payment.note,
                )
                for payment in request.payments
            ]
            bill.expenses = expenses
            bill.payments = payments
            await self.session.flush()

            AuditService.log(
                session=self.session,
                entity_type="monthly_bill",
                entity_id=bill.id,
                action="save",
                changes={
                    "period": key.token,
                    "total_amount": str(bill.total_amount),
                    "pending_amount": str(bill.pending_amount),
                    "expenses": len(expenses),
                    "payments": len(payments),
                },
            )
            result = SaveBillResult(
                bill_id=bill.id,
                expense_ids=[expense.id for expense in expenses],
                payment_ids=[payment.id for payment in payments],
                success=True,
            )
            await self.session.commit()
        except RenterNotFoundError:
            await self.session.rollback()
            raise
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Error saving bill %s: %s", key, e)
            raise BillWriteError(f"Failed to save bill: {e}") from e

        logger.info(
            "Saved bill %s (id=%d) with %d expenses and %d payments",
            key,
            result.bill_id,
            len(result.expense_ids),
            len(result.payment_ids),
        )
        return result

    async def _get_bill(self, key: PeriodKey) -> MonthlyBill | None:
        stmt = (
            select(MonthlyBill)
            .where(
                MonthlyBill.renter_id == key.renter_id,
                MonthlyBill.month == key.month,
                MonthlyBill.year == key.year,
            )
            .options(selectinload(MonthlyBill.expenses), selectinload(MonthlyBill.payments))
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    def _to_details(bill: MonthlyBill, previous_readings: PreviousReadings) -> BillWithDetails:
        return BillWithDetails(
            bill=MonthlyBillData.model_validate(bill),
            expenses=[AdditionalExpenseData.model_validate(e) for e in bill.expenses],
            payments=[BillPaymentData.model_validate(p) for p in bill.payments],
            previous_readings=previous_readings,
        )


__all__ = ["BillRecordService", "BillRecordStore"]
