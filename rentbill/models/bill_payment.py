"""Payment received against a monthly bill."""

from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, ForeignKey, Numeric, String
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentbill.models import Base, BaseModel


class PaymentMethod(str, Enum):
    """How a payment was received."""

    CASH = "cash"
    ONLINE = "online"


class BillPayment(Base, BaseModel):
    """Payment entry; several partial payments may settle one bill."""

    __tablename__ = "bill_payments"

    monthly_bill_id: Mapped[int] = mapped_column(
        ForeignKey("monthly_bills.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    payment_type: Mapped[PaymentMethod] = mapped_column(
        SQLEnum(PaymentMethod),
        nullable=False,
        default=PaymentMethod.CASH,
    )
    note: Mapped[str | None] = mapped_column(String(500), nullable=True)

    monthly_bill: Mapped["MonthlyBill"] = relationship(  # noqa: F821
        "MonthlyBill", back_populates="payments"
    )

    def __repr__(self) -> str:
        return (
            f"<BillPayment(id={self.id}, monthly_bill_id={self.monthly_bill_id}, "
            f"amount={self.amount}, payment_type={self.payment_type})>"
        )


__all__ = ["BillPayment", "PaymentMethod"]
