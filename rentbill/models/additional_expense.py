"""Ad-hoc expense line attached to a monthly bill."""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentbill.models import Base, BaseModel


class AdditionalExpense(Base, BaseModel):
    """Extra charge (repairs, cleaning, etc.) billed on top of the regular lines."""

    __tablename__ = "additional_expenses"

    monthly_bill_id: Mapped[int] = mapped_column(
        ForeignKey("monthly_bills.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    expense_date: Mapped[date] = mapped_column("date", Date, nullable=False)

    monthly_bill: Mapped["MonthlyBill"] = relationship(  # noqa: F821
        "MonthlyBill", back_populates="expenses"
    )

    def __repr__(self) -> str:
        return (
            f"<AdditionalExpense(id={self.id}, monthly_bill_id={self.monthly_bill_id}, "
            f"description={self.description}, amount={self.amount})>"
        )


__all__ = ["AdditionalExpense"]
