"""Audit trail service."""

from typing import TYPE_CHECKING, Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from washride.models.admin import AuditLog

if TYPE_CHECKING:
    from washride.api.deps import RequestContext


class AuditService:
    """Service for append-only audit logging."""

    async def log_action(
        self,
        db: AsyncSession,
        user_id: UUID | None,
        action: str,
        resource_type: str,
        resource_id: UUID | None,
        old_values: dict[str, Any] | None = None,
        new_values: dict[str, Any] | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuditLog:
        """Record an action.

        Args:
            db: Database session
            user_id: User performing the action
            action: Action name (e.g., "booking_status_change")
            resource_type: Resource type (e.g., "booking", "user")
            resource_id: Resource ID
            old_values: Previous state
            new_values: New state
            ip_address: Client IP
            user_agent: Client user agent

        Returns:
            Created audit log entry
        """
        audit = AuditLog(
            user_id=user_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            old_values=old_values,
            new_values=new_values,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        db.add(audit)
        return audit

    async def log_for(
        self,
        db: AsyncSession,
        ctx: "RequestContext",
        action: str,
        resource_type: str,
        resource_id: UUID | None,
        old_values: dict[str, Any] | None = None,
        new_values: dict[str, Any] | None = None,
    ) -> AuditLog:
        """Record an action performed by the caller of the current request."""
        return await self.log_action(
            db=db,
            user_id=ctx.user.id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            old_values=old_values,
            new_values=new_values,
            ip_address=ctx.ip_address,
            user_agent=ctx.user_agent,
        )

    async def log_status_change(
        self,
        db: AsyncSession,
        ctx: "RequestContext",
        action: str,
        resource_type: str,
        resource_id: UUID,
        old_status: str,
        new_status: str,
        **extra: Any,
    ) -> AuditLog:
        """Log a status change on any stateful resource."""
        new_values: dict[str, Any] = {"status": new_status}
        new_values.update({k: v for k, v in extra.items() if v is not None})
        return await self.log_for(
            db,
            ctx,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            old_values={"status": old_status},
            new_values=new_values,
        )


audit_service = AuditService()
