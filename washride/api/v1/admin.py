"""Admin panel endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, Query, status
from sqlalchemy import func, or_, select

from washride.api.deps import (
    AdminUser,
    Context,
    DbSession,
    StaffUser,
    get_booking_or_404,
    get_user_or_404,
)
from washride.api.v1.pagination import paginate
from washride.config import settings
from washride.core.exceptions import AuthorizationError, BadRequestError, ConflictError
from washride.core.permissions import UserRole, can_change_role, can_modify_user
from washride.database import utcnow
from washride.domain.approval_state import ApprovalStatus
from washride.domain.booking_state import BookingStatus
from washride.models.admin import AuditLog
from washride.models.booking import Booking
from washride.models.user import User
from washride.schemas.admin import (
    AdminUserCreate,
    AdminUserUpdate,
    ApprovalDecision,
    AssignDriverRequest,
    AuditLogListResponse,
    AuditLogResponse,
    DashboardResponse,
    RejectionRequest,
    SuspendRequest,
    UserListResponse,
)
from washride.schemas.booking import BookingListResponse, BookingResponse
from washride.schemas.user import UserResponse
from washride.services.audit_service import audit_service
from washride.services.booking_service import booking_service
from washride.services.user_service import user_service

router = APIRouter()
logger = logging.getLogger(__name__)


async def _get_modifiable_user(db: DbSession, user_id: UUID, admin: User) -> User:
    user = await get_user_or_404(db, user_id)
    if user.id == admin.id:
        raise BadRequestError("You cannot perform this action on your own account")
    if not can_modify_user(admin, user):
        raise AuthorizationError("You don't have permission to modify this user")
    return user


# ============ DASHBOARD ============


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(admin: StaffUser, db: DbSession) -> DashboardResponse:
    """Platform-wide counts."""
    users_by_role = dict(
        (await db.execute(select(User.role, func.count()).group_by(User.role))).all()
    )
    bookings_by_status = dict(
        (await db.execute(select(Booking.status, func.count()).group_by(Booking.status))).all()
    )
    pending_approvals = (
        await db.execute(
            select(func.count())
            .select_from(User)
            .where(User.approval_status == ApprovalStatus.PENDING.value)
        )
    ).scalar_one()
    active_drivers = (
        await db.execute(
            select(func.count())
            .select_from(User)
            .where(
                User.role == UserRole.DRIVER.value,
                User.is_active.is_(True),
                User.availability.is_(True),
            )
        )
    ).scalar_one()
    revenue = (
        await db.execute(
            select(func.coalesce(func.sum(Booking.total_amount), 0)).where(
                Booking.payment_status == "paid"
            )
        )
    ).scalar_one()

    return DashboardResponse(
        total_users=sum(users_by_role.values()),
        users_by_role=users_by_role,
        pending_approvals=pending_approvals,
        total_bookings=sum(bookings_by_status.values()),
        bookings_by_status=bookings_by_status,
        active_drivers=active_drivers,
        revenue=revenue,
        currency=settings.currency,
    )


# ============ USERS ============


@router.get("/users", response_model=UserListResponse)
async def get_users(
    admin: StaffUser,
    db: DbSession,
    role: UserRole | None = None,
    approval_status: ApprovalStatus | None = None,
    search: str | None = Query(default=None, max_length=100),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=50, ge=1, le=100),
) -> UserListResponse:
    """Get all users."""
    query = select(User)
    if role:
        query = query.where(User.role == role.value)
    if approval_status:
        query = query.where(User.approval_status == approval_status.value)
    if search:
        pattern = f"%{search.lower()}%"
        query = query.where(
            or_(func.lower(User.name).like(pattern), func.lower(User.email).like(pattern))
        )

    users, total = await paginate(db, query.order_by(User.created_at.desc()), page, page_size)
    return UserListResponse(
        users=[UserResponse.model_validate(u) for u in users],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(data: AdminUserCreate, admin: StaffUser, ctx: Context, db: DbSession) -> User:
    """Create an account; sub-admin and support creations await approval."""
    return await user_service.create_by_staff(db, data, ctx)


@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(user_id: UUID, admin: StaffUser, db: DbSession) -> User:
    return await get_user_or_404(db, user_id)


@router.put("/users/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    data: AdminUserUpdate,
    admin: AdminUser,
    ctx: Context,
    db: DbSession,
) -> User:
    """Edit a user within the admin hierarchy."""
    user = await _get_modifiable_user(db, user_id, admin)
    changes = data.model_dump(exclude_unset=True)

    new_role = changes.get("role")
    if new_role and new_role != user.role and not can_change_role(admin, new_role):
        raise AuthorizationError(f"You cannot assign the role '{new_role}'")
    if "admin_level" in changes and not can_change_role(admin, UserRole.ADMIN.value):
        raise AuthorizationError("Only super admins can change admin levels")

    old_values = {field: getattr(user, field) for field in changes}
    for field, value in changes.items():
        setattr(user, field, value)
    await db.flush()

    await audit_service.log_for(
        db,
        ctx,
        action="user_update",
        resource_type="user",
        resource_id=user.id,
        old_values=old_values,
        new_values=changes,
    )
    return user


@router.post("/users/{user_id}/suspend", response_model=UserResponse)
async def suspend_user(
    user_id: UUID,
    data: SuspendRequest,
    admin: AdminUser,
    ctx: Context,
    db: DbSession,
) -> User:
    """Suspend a user account."""
    user = await _get_modifiable_user(db, user_id, admin)
    if user.is_suspended:
        raise ConflictError("User is already suspended")

    user.is_suspended = True
    user.suspended_at = utcnow()
    user.suspended_by = admin.id
    user.suspension_reason = data.reason
    await db.flush()

    await audit_service.log_for(
        db,
        ctx,
        action="user_suspend",
        resource_type="user",
        resource_id=user.id,
        old_values={"is_suspended": False},
        new_values={"is_suspended": True, "reason": data.reason},
    )
    logger.info("User %s suspended by %s", user.id, admin.id)
    return user


@router.post("/users/{user_id}/reactivate", response_model=UserResponse)
async def reactivate_user(user_id: UUID, admin: AdminUser, ctx: Context, db: DbSession) -> User:
    """Lift a suspension or undo a soft delete."""
    user = await _get_modifiable_user(db, user_id, admin)
    if user.approval_status != ApprovalStatus.APPROVED.value:
        raise ConflictError("Only approved users can be reactivated")

    old_values = {"is_active": user.is_active, "is_suspended": user.is_suspended}
    user.is_active = True
    user.is_suspended = False
    user.suspended_at = None
    user.suspended_by = None
    user.suspension_reason = None
    await db.flush()

    await audit_service.log_for(
        db,
        ctx,
        action="user_reactivate",
        resource_type="user",
        resource_id=user.id,
        old_values=old_values,
        new_values={"is_active": True, "is_suspended": False},
    )
    logger.info("User %s reactivated by %s", user.id, admin.id)
    return user


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: UUID, admin: AdminUser, ctx: Context, db: DbSession) -> None:
    """Soft delete: the account is deactivated, never removed."""
    user = await _get_modifiable_user(db, user_id, admin)
    user.is_active = False
    await db.flush()

    await audit_service.log_for(
        db,
        ctx,
        action="user_delete",
        resource_type="user",
        resource_id=user.id,
        old_values={"is_active": True},
        new_values={"is_active": False},
    )
    logger.info("User %s deactivated by %s", user.id, admin.id)


# ============ APPROVALS ============


@router.get("/approvals/pending", response_model=list[UserResponse])
async def get_pending_approvals(admin: StaffUser, db: DbSession) -> list[User]:
    result = await db.execute(
        select(User)
        .where(User.approval_status == ApprovalStatus.PENDING.value)
        .order_by(User.approval_requested_at)
    )
    return list(result.scalars().all())


@router.post("/users/{user_id}/approve", response_model=UserResponse)
async def approve_user(
    user_id: UUID,
    admin: AdminUser,
    ctx: Context,
    db: DbSession,
    data: ApprovalDecision | None = None,
) -> User:
    user = await get_user_or_404(db, user_id)
    return await user_service.approve(db, user, ctx, data.notes if data else None)


@router.post("/users/{user_id}/reject", response_model=UserResponse)
async def reject_user(
    user_id: UUID,
    data: RejectionRequest,
    admin: AdminUser,
    ctx: Context,
    db: DbSession,
) -> User:
    user = await get_user_or_404(db, user_id)
    return await user_service.reject(db, user, ctx, data.reason)


@router.get("/users/{user_id}/approval-history", response_model=list[AuditLogResponse])
async def get_approval_history(user_id: UUID, admin: StaffUser, db: DbSession) -> list[AuditLog]:
    """Audit trail of creation and approval decisions for a user."""
    await get_user_or_404(db, user_id)
    result = await db.execute(
        select(AuditLog)
        .where(
            AuditLog.resource_type == "user",
            AuditLog.resource_id == user_id,
            AuditLog.action.in_(("user_create", "user_approve", "user_reject")),
        )
        .order_by(AuditLog.created_at)
    )
    return list(result.scalars().all())


# ============ BOOKINGS ============


@router.get("/bookings", response_model=BookingListResponse)
async def get_all_bookings(
    admin: StaffUser,
    db: DbSession,
    status_filter: BookingStatus | None = Query(default=None, alias="status"),
    unassigned: bool = Query(default=False),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=50, ge=1, le=100),
) -> BookingListResponse:
    query = select(Booking)
    if status_filter:
        query = query.where(Booking.status == status_filter.value)
    if unassigned:
        query = query.where(Booking.driver_id.is_(None))

    bookings, total = await paginate(db, query.order_by(Booking.created_at.desc()), page, page_size)
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in bookings],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.put("/bookings/{booking_id}/assign-driver", response_model=BookingResponse)
async def assign_driver(
    booking_id: UUID,
    data: AssignDriverRequest,
    admin: StaffUser,
    ctx: Context,
    db: DbSession,
) -> Booking:
    """Assign a driver; a pending booking becomes accepted."""
    booking = await get_booking_or_404(db, booking_id)
    driver = await get_user_or_404(db, data.driver_id)
    if driver.role != UserRole.DRIVER.value:
        raise BadRequestError("User is not a driver")
    if not driver.is_active or driver.is_suspended:
        raise BadRequestError("Driver is not active")
    return await booking_service.assign_driver(db, booking, driver, ctx)


# ============ AUDIT ============


@router.get("/audit-logs", response_model=AuditLogListResponse)
async def get_audit_logs(
    admin: StaffUser,
    db: DbSession,
    action: str | None = None,
    resource_type: str | None = None,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=50, ge=1, le=100),
) -> AuditLogListResponse:
    """Get audit logs."""
    query = select(AuditLog)
    if action:
        query = query.where(AuditLog.action == action)
    if resource_type:
        query = query.where(AuditLog.resource_type == resource_type)

    logs, total = await paginate(db, query.order_by(AuditLog.created_at.desc()), page, page_size)
    return AuditLogListResponse(
        logs=[AuditLogResponse.model_validate(log) for log in logs],
        total=total,
        page=page,
        page_size=page_size,
    )
