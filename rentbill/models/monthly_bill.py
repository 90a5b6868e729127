"""Monthly bill ORM model: one row per renter per calendar month."""

from datetime import date
from decimal import Decimal

from sqlalchemy import Boolean, Date, ForeignKey, Index, Integer, Numeric, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentbill.models import Base, BaseModel


class MonthlyBill(Base, BaseModel):
    """
    Bill for one renter and one month.

    Each optional charge (electricity, motor, water, maintenance) has an enabled flag
    and its own inputs. Line amounts and totals are stored as computed at save time so
    list views and the dashboard never recompute them.
    """

    __tablename__ = "monthly_bills"

    renter_id: Mapped[int] = mapped_column(
        ForeignKey("renters.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    month: Mapped[int] = mapped_column(Integer, nullable=False, comment="Calendar month 1-12")
    year: Mapped[int] = mapped_column(Integer, nullable=False)

    rent_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0")
    )

    # Electricity
    electricity_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    electricity_initial_reading: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    electricity_final_reading: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    electricity_multiplier: Mapped[Decimal | None] = mapped_column(
        Numeric(5, 2), nullable=True, default=Decimal("9"), comment="Price per unit"
    )
    electricity_reading_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    electricity_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0")
    )

    # Motor (water pump), split between occupants
    motor_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    motor_initial_reading: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    motor_final_reading: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    motor_multiplier: Mapped[Decimal | None] = mapped_column(
        Numeric(5, 2), nullable=True, default=Decimal("9")
    )
    motor_number_of_people: Mapped[int | None] = mapped_column(Integer, nullable=True, default=2)
    motor_reading_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    motor_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0")
    )

    # Water
    water_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    water_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0")
    )

    # Maintenance
    maintenance_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    maintenance_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0")
    )

    # Totals
    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0")
    )
    total_payments: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0")
    )
    pending_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0"), index=True
    )

    # Relationships
    renter: Mapped["Renter"] = relationship("Renter", back_populates="bills")  # noqa: F821
    expenses: Mapped[list["AdditionalExpense"]] = relationship(  # noqa: F821
        "AdditionalExpense",
        back_populates="monthly_bill",
        cascade="all, delete-orphan",
        order_by="AdditionalExpense.id",
    )
    payments: Mapped[list["BillPayment"]] = relationship(  # noqa: F821
        "BillPayment",
        back_populates="monthly_bill",
        cascade="all, delete-orphan",
        order_by="BillPayment.id",
    )

    __table_args__ = (
        UniqueConstraint("renter_id", "month", "year", name="unique_renter_month_year"),
        Index("idx_monthly_bills_lookup", "renter_id", "year", "month"),
    )

    def __repr__(self) -> str:
        return (
            f"<MonthlyBill(id={self.id}, renter_id={self.renter_id}, "
            f"month={self.month}, year={self.year}, total_amount={self.total_amount})>"
        )


__all__ = ["MonthlyBill"]
