"""Renter ORM model: a tenant with a monthly base rent."""

from datetime import date
from decimal import Decimal

from sqlalchemy import Boolean, Date, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentbill.models import Base, BaseModel


class Renter(Base, BaseModel):
    """A renter billed once per calendar month.

    monthly_rent is the default base amount used when a month has no saved bill yet.
    Archived renters keep is_active=False and their bill history.
    """

    __tablename__ = "renters"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Renter display name",
    )
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    property_address: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
        comment="Address of the rented unit",
    )
    monthly_rent: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        default=Decimal("0"),
        comment="Default base amount for a fresh month",
    )
    move_in_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        comment="False once the renter is archived",
    )

    bills: Mapped[list["MonthlyBill"]] = relationship(  # noqa: F821
        "MonthlyBill",
        back_populates="renter",
        cascade="all, delete-orphan",
    )

    __table_args__ = (Index("idx_renters_active", "is_active"),)

    def __repr__(self) -> str:
        return (
            f"<Renter(id={self.id}, name={self.name}, "
            f"monthly_rent={self.monthly_rent}, is_active={self.is_active})>"
        )


__all__ = ["Renter"]
