"""Audit service for logging bill and renter changes."""

from sqlalchemy.ext.asyncio import AsyncSession

from rentbill.models.audit_log import AuditLog


class AuditService:
    """Service for audit log operations.

    Entries join the caller's transaction and are committed (or rolled back) with it.
    """

    @staticmethod
    def log(
        session: AsyncSession,
        entity_type: str,
        entity_id: int,
        action: str,
        changes: dict | None = None,
    ) -> AuditLog:
        """Create audit log entry (one-liner).

        Args:
            session: Database session
            entity_type: Type of entity ("monthly_bill", "renter")
            entity_id: Primary key of the entity
            action: Action performed ("save", "create", "archive", ...)
            changes: Optional JSON snapshot of changed fields

        Returns:
            Created AuditLog object
        """
        audit = AuditLog(
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            changes=changes,
        )
        session.add(audit)
        return audit


__all__ = ["AuditService"]
