"""Renter service for querying and managing renters."""

import logging
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rentbill.models.monthly_bill import MonthlyBill
from rentbill.models.renter import Renter
from rentbill.schemas.renters import (
    DashboardMetrics,
    DashboardSummary,
    RenterCreate,
    RenterData,
)
from rentbill.services.audit_service import AuditService
from rentbill.services.errors import BillReadError, BillWriteError, RenterNotFoundError

logger = logging.getLogger(__name__)


class RenterService:
    """Service for renter-related operations."""

    def __init__(self, session: AsyncSession):
        """Initialize with database session."""
        self.session = session

    async def create_renter(self, payload: RenterCreate) -> RenterData:
        """
        Create a new renter.

        Args:
            payload: Renter fields

        Returns:
            Created renter with zero pending amount

        Raises:
            BillWriteError: If the renter could not be stored
        """
        renter = Renter(**payload.model_dump())
        try:
            self.session.add(renter)
            await self.session.flush()
            AuditService.log(
                session=self.session,
                entity_type="renter",
                entity_id=renter.id,
                action="create",
                changes={"name": renter.name, "monthly_rent": str(renter.monthly_rent)},
            )
            data = RenterData.model_validate(renter)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Error creating renter %s: %s", payload.name, e)
            raise BillWriteError(f"Failed to create renter: {e}") from e

        logger.info("Created renter %d (%s)", data.id, data.name)
        return data

    async def get_renter(self, renter_id: int) -> RenterData:
        """
        Get renter by ID with the pending amount across all bills.

        Raises:
            RenterNotFoundError: If no renter has this ID
        """
        try:
            renter = await self.session.get(Renter, renter_id)
            if renter is None:
                raise RenterNotFoundError(renter_id)
            pending = await self._pending_by_renter([renter_id])
        except SQLAlchemyError as e:
            raise BillReadError(f"Failed to fetch renter: {e}") from e

        return self._to_data(renter, pending)

    async def list_renters(self, active: bool = True) -> list[RenterData]:
        """
        List active or archived renters ordered by name.

        Args:
            active: True for active renters, False for archived ones
        """
        stmt = select(Renter).where(Renter.is_active == active).order_by(Renter.name)
        try:
            result = await self.session.execute(stmt)
            renters = result.scalars().all()
            pending = await self._pending_by_renter([r.id for r in renters])
        except SQLAlchemyError as e:
            logger.error("Error listing renters: %s", e)
            raise BillReadError(f"Failed to fetch renters: {e}") from e

        return [self._to_data(renter, pending) for renter in renters]

    async def set_active(self, renter_id: int, is_active: bool) -> RenterData:
        """
        Archive or restore a renter.

        Raises:
            RenterNotFoundError: If no renter has this ID
        """
        try:
            renter = await self.session.get(Renter, renter_id)
            if renter is None:
                raise RenterNotFoundError(renter_id)
            renter.is_active = is_active
            AuditService.log(
                session=self.session,
                entity_type="renter",
                entity_id=renter_id,
                action="restore" if is_active else "archive",
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise BillWriteError(f"Failed to update renter: {e}") from e

        logger.info("Renter %d is_active=%s", renter_id, is_active)
        return await self.get_renter(renter_id)

    async def delete_renter(self, renter_id: int) -> None:
        """
        Delete a renter together with all of their bills.

        Raises:
            RenterNotFoundError: If no renter has this ID
        """
        try:
            renter = await self.session.get(Renter, renter_id)
            if renter is None:
                raise RenterNotFoundError(renter_id)
            await self.session.delete(renter)
            AuditService.log(
                session=self.session,
                entity_type="renter",
                entity_id=renter_id,
                action="delete",
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise BillWriteError(f"Failed to delete renter: {e}") from e

        logger.info("Deleted renter %d", renter_id)

    async def get_dashboard_summary(self) -> DashboardSummary:
        """Active and archived renters plus headline totals of the active ones."""
        active = await self.list_renters(active=True)
        archived = await self.list_renters(active=False)

        metrics = DashboardMetrics(
            total_renters=len(active),
            total_monthly_rent=sum((r.monthly_rent for r in active), Decimal("0")),
            pending_amount=sum((r.total_pending for r in active), Decimal("0")),
        )
        return DashboardSummary(
            active_renters=active,
            archived_renters=archived,
            metrics=metrics,
        )

    async def _pending_by_renter(self, renter_ids: list[int]) -> dict[int, Decimal]:
        if not renter_ids:
            return {}
        stmt = (
            select(MonthlyBill.renter_id, func.sum(MonthlyBill.pending_amount))
            .where(MonthlyBill.renter_id.in_(renter_ids))
            .group_by(MonthlyBill.renter_id)
        )
        result = await self.session.execute(stmt)
        return {renter_id: Decimal(total or 0) for renter_id, total in result.all()}

    @staticmethod
    def _to_data(renter: Renter, pending: dict[int, Decimal]) -> RenterData:
        data = RenterData.model_validate(renter)
        data.total_pending = pending.get(renter.id, Decimal("0"))
        return data


__all__ = ["RenterService"]
