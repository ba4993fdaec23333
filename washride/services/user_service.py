"""Account creation and the approval workflow."""

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from washride.core.exceptions import AuthorizationError, ConflictError
from washride.core.permissions import (
    SELF_SERVICE_ROLES,
    STAFF_ROLES,
    AdminLevel,
    UserRole,
    can_change_role,
    creation_requires_approval,
    has_admin_level,
)
from washride.core.security import get_password_hash
from washride.database import utcnow
from washride.domain.approval_state import ApprovalStatus, assert_approval_transition
from washride.models.user import User
from washride.services.audit_service import audit_service
from washride.services.notification_service import notification_service

if TYPE_CHECKING:
    from washride.api.deps import RequestContext

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    "business_name",
    "is_business",
    "license_no",
    "license_type",
    "license_expiry",
    "address",
    "marital_status",
    "car_wash_name",
    "location",
    "washing_bays",
)


async def ensure_unique(db: AsyncSession, email: str, nrc: str) -> None:
    """Raise ConflictError if the email or NRC is taken."""
    result = await db.execute(
        select(User.email, User.nrc).where(or_(User.email == email, User.nrc == nrc))
    )
    for existing_email, existing_nrc in result.all():
        if existing_email == email:
            raise ConflictError(f"A user with email {email} already exists")
        if existing_nrc == nrc:
            raise ConflictError(f"A user with NRC {nrc} already exists")


def _build_user(data: Any, role: str) -> User:
    user = User(
        name=data.name,
        email=data.email,
        phone=data.phone,
        nrc=data.nrc,
        password_hash=get_password_hash(data.password),
        role=role,
    )
    for field in PROFILE_FIELDS:
        setattr(user, field, getattr(data, field))
    return user


class UserService:
    """User lifecycle operations shared by auth and admin routes."""

    async def register(self, db: AsyncSession, data: Any) -> User:
        """Self-service sign-up for clients, drivers and car washes."""
        if data.role not in SELF_SERVICE_ROLES:
            raise AuthorizationError("Staff accounts cannot be self-registered")
        await ensure_unique(db, data.email, data.nrc)
        user = _build_user(data, data.role)
        user.approval_status = ApprovalStatus.APPROVED.value
        user.is_active = True
        user.availability = True
        db.add(user)
        await db.flush()
        logger.info("Registered %s account %s", user.role, user.id)
        return user

    async def create_by_staff(self, db: AsyncSession, data: Any, ctx: "RequestContext") -> User:
        """Create an account on someone's behalf.

        Accounts created by an admin of level ``admin`` or above are approved
        and active immediately; anything a sub-admin or support admin creates
        waits for approval, inactive.
        """
        creator = ctx.user
        if data.role in STAFF_ROLES and not can_change_role(creator, data.role):
            raise AuthorizationError("Only super admins can create staff accounts")

        await ensure_unique(db, data.email, data.nrc)
        user = _build_user(data, data.role)
        user.admin_level = data.admin_level if data.role == UserRole.ADMIN.value else None
        user.created_by = creator.id
        user.approval_notes = data.notes

        if creation_requires_approval(creator):
            user.approval_status = ApprovalStatus.PENDING.value
            user.is_active = False
            user.approval_requested_at = utcnow()
        else:
            user.approval_status = ApprovalStatus.APPROVED.value
            user.is_active = True
            user.approved_by = creator.id
            user.approved_at = utcnow()

        db.add(user)
        await db.flush()

        await audit_service.log_for(
            db,
            ctx,
            action="user_create",
            resource_type="user",
            resource_id=user.id,
            new_values={"role": user.role, "approval_status": user.approval_status},
        )
        logger.info(
            "User %s (%s) created by %s with approval status %s",
            user.id,
            user.role,
            creator.id,
            user.approval_status,
        )
        return user

    async def approve(
        self,
        db: AsyncSession,
        user: User,
        ctx: "RequestContext",
        notes: str | None = None,
    ) -> User:
        if not has_admin_level(ctx.user, AdminLevel.ADMIN):
            raise AuthorizationError("Only admins can approve users")
        previous = user.approval_status
        assert_approval_transition(previous, ApprovalStatus.APPROVED.value)

        user.approval_status = ApprovalStatus.APPROVED.value
        user.is_active = True
        user.approved_by = ctx.user.id
        user.approved_at = utcnow()
        if notes:
            user.approval_notes = notes
        await db.flush()

        await notification_service.create_notification(
            db,
            user_id=user.id,
            title="Account Approved",
            message="Your account has been approved. You can now sign in.",
            notification_type=notification_service.SYSTEM,
        )
        await audit_service.log_status_change(
            db,
            ctx,
            action="user_approve",
            resource_type="user",
            resource_id=user.id,
            old_status=previous,
            new_status=user.approval_status,
            notes=notes,
        )
        logger.info("User %s approved by %s", user.id, ctx.user.id)
        return user

    async def reject(
        self,
        db: AsyncSession,
        user: User,
        ctx: "RequestContext",
        reason: str,
    ) -> User:
        if not has_admin_level(ctx.user, AdminLevel.ADMIN):
            raise AuthorizationError("Only admins can reject users")
        previous = user.approval_status
        assert_approval_transition(previous, ApprovalStatus.REJECTED.value)

        user.approval_status = ApprovalStatus.REJECTED.value
        user.is_active = False
        user.rejected_at = utcnow()
        user.rejection_reason = reason
        await db.flush()

        await audit_service.log_status_change(
            db,
            ctx,
            action="user_reject",
            resource_type="user",
            resource_id=user.id,
            old_status=previous,
            new_status=user.approval_status,
            reason=reason,
        )
        logger.info("User %s rejected by %s", user.id, ctx.user.id)
        return user


user_service = UserService()
