"""Pydantic schemas for renters and the dashboard."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class RenterCreate(BaseModel):
    """Request payload for POST /api/renters."""

    name: str = Field(..., min_length=1, description="Renter display name")
    email: str | None = Field(None, description="Contact email")
    phone: str | None = Field(None, description="Contact phone")
    property_address: str | None = Field(None, description="Address of the rented unit")
    monthly_rent: Decimal = Field(Decimal("0"), ge=0, description="Default base amount")
    move_in_date: date | None = None
    is_active: bool = True


class RenterStatusUpdate(BaseModel):
    """Request payload for PATCH /api/renters/{id}."""

    is_active: bool


class RenterData(BaseModel):
    """Renter as returned by the API."""

    id: int
    name: str
    email: str | None = None
    phone: str | None = None
    property_address: str | None = None
    monthly_rent: Decimal
    move_in_date: date | None = None
    is_active: bool
    created_at: datetime | None = None
    total_pending: Decimal = Decimal("0")

    model_config = ConfigDict(from_attributes=True)


class DashboardMetrics(BaseModel):
    """Headline numbers for the dashboard."""

    total_renters: int
    total_monthly_rent: Decimal
    pending_amount: Decimal


class DashboardSummary(BaseModel):
    """Response schema for GET /api/dashboard."""

    active_renters: list[RenterData]
    archived_renters: list[RenterData]
    metrics: DashboardMetrics


__all__ = [
    "DashboardMetrics",
    "DashboardSummary",
    "RenterCreate",
    "RenterData",
    "RenterStatusUpdate",
]
