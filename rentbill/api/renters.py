"""Renter management and dashboard endpoints."""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from rentbill.schemas.renters import (
    DashboardSummary,
    RenterCreate,
    RenterData,
    RenterStatusUpdate,
)
from rentbill.services import get_async_session
from rentbill.services.renter_service import RenterService

router = APIRouter(prefix="/api", tags=["renters"])


@router.get("/renters", response_model=list[RenterData])
async def list_renters(
    archived: bool = Query(False, description="List archived instead of active renters"),
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> list[RenterData]:
    return await RenterService(session).list_renters(active=not archived)


@router.post("/renters", response_model=RenterData, status_code=status.HTTP_201_CREATED)
async def create_renter(
    payload: RenterCreate,
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> RenterData:
    return await RenterService(session).create_renter(payload)


@router.get("/renters/{renter_id}", response_model=RenterData)
async def get_renter(
    renter_id: int,
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> RenterData:
    """
    Get a renter; monthly_rent is the default base amount of a fresh month.

    Returns:
        200: RenterData
        404: renter_not_found
    """
    return await RenterService(session).get_renter(renter_id)


@router.patch("/renters/{renter_id}", response_model=RenterData)
async def update_renter_status(
    renter_id: int,
    payload: RenterStatusUpdate,
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> RenterData:
    """Archive (is_active=false) or restore a renter."""
    return await RenterService(session).set_active(renter_id, payload.is_active)


@router.delete("/renters/{renter_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_renter(
    renter_id: int,
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> Response:
    await RenterService(session).delete_renter(renter_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/dashboard", response_model=DashboardSummary)
async def get_dashboard(
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> DashboardSummary:
    """Active and archived renters with rent and pending totals."""
    return await RenterService(session).get_dashboard_summary()
