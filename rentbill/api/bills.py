"""Bill record endpoints: read one period, read all periods, save a period."""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from rentbill.schemas.bills import BillWithDetails, SaveBillRequest, SaveBillResult
from rentbill.services import get_async_session
from rentbill.services.bill_store import BillRecordService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["bills"])


@router.get("/bills", response_model=BillWithDetails)
async def get_bill(
    renter_id: int = Query(..., description="Renter ID"),
    month: int = Query(..., ge=1, le=12),
    year: int = Query(...),
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> BillWithDetails:
    """
    Get one period's bill with its expenses, payments and the previous readings.

    Returns:
        200: BillWithDetails (bill is null when nothing was saved for the period)
        500: read_failed
    """
    details = await BillRecordService(session).read_period(renter_id, month, year)
    logger.debug(
        "bills.get: renter_id=%d period=%d-%02d found=%s",
        renter_id,
        year,
        month,
        details.bill is not None,
    )
    return details


@router.post("/bills", response_model=SaveBillResult)
async def save_bill(
    payload: SaveBillRequest,
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> SaveBillResult:
    """
    Save a period: upsert the bill and replace all of its expenses and payments.

    Returns:
        200: SaveBillResult with identifiers in request order
        404: renter_not_found
        500: write_failed (nothing was saved)
    """
    return await BillRecordService(session).save_period(payload)


@router.get("/renters/{renter_id}/bills", response_model=list[BillWithDetails])
async def list_renter_bills(
    renter_id: int,
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> list[BillWithDetails]:
    """Get every saved bill of a renter, newest first."""
    periods = await BillRecordService(session).read_all_periods(renter_id)
    logger.debug("bills.list: renter_id=%d count=%d", renter_id, len(periods))
    return periods
