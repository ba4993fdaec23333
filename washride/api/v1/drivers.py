"""Driver endpoints: job board, accept/decline, availability, earnings."""

from uuid import UUID

from fastapi import APIRouter, Query
from sqlalchemy import and_, func, or_, select

from washride.api.deps import Context, CurrentUser, DbSession, DriverUser, get_booking_or_404
from washride.config import settings
from washride.core.exceptions import ConflictError
from washride.domain.booking_state import BookingStatus
from washride.models.booking import Booking
from washride.models.user import User
from washride.schemas.booking import BookingCancelRequest, BookingResponse
from washride.schemas.driver import AvailabilityUpdate, EarningsResponse
from washride.schemas.user import UserPublicResponse
from washride.services.booking_service import booking_service

router = APIRouter()


@router.get("/available", response_model=list[UserPublicResponse])
async def list_available_drivers(current_user: CurrentUser, db: DbSession) -> list[User]:
    """Active drivers currently taking jobs."""
    result = await db.execute(
        select(User)
        .where(
            User.role == "driver",
            User.is_active.is_(True),
            User.is_suspended.is_(False),
            User.availability.is_(True),
        )
        .order_by(User.name)
    )
    return list(result.scalars().all())


@router.get("/bookings", response_model=list[BookingResponse])
async def list_driver_bookings(
    current_user: DriverUser,
    db: DbSession,
    include_open: bool = Query(default=True),
) -> list[Booking]:
    """Jobs assigned to the driver, plus open pending jobs nobody has taken."""
    condition = Booking.driver_id == current_user.id
    if include_open:
        condition = or_(
            condition,
            and_(Booking.driver_id.is_(None), Booking.status == BookingStatus.PENDING.value),
        )
    result = await db.execute(select(Booking).where(condition).order_by(Booking.created_at.desc()))
    return list(result.scalars().all())


@router.put("/bookings/{booking_id}/accept", response_model=BookingResponse)
async def accept_booking(
    booking_id: UUID,
    current_user: DriverUser,
    ctx: Context,
    db: DbSession,
) -> Booking:
    """Accept an assigned job or claim an open one."""
    if not current_user.availability:
        raise ConflictError("Set yourself available before accepting jobs")
    booking = await get_booking_or_404(db, booking_id)
    return await booking_service.change_status(db, booking, BookingStatus.ACCEPTED, ctx)


@router.put("/bookings/{booking_id}/decline", response_model=BookingResponse)
async def decline_booking(
    booking_id: UUID,
    current_user: DriverUser,
    ctx: Context,
    db: DbSession,
    request: BookingCancelRequest | None = None,
) -> Booking:
    """Decline an assigned job."""
    booking = await get_booking_or_404(db, booking_id)
    reason = request.reason if request else None
    return await booking_service.change_status(db, booking, BookingStatus.DECLINED, ctx, reason)


@router.put("/availability", response_model=UserPublicResponse)
async def update_availability(
    update: AvailabilityUpdate,
    current_user: DriverUser,
    db: DbSession,
) -> User:
    current_user.availability = update.availability
    await db.flush()
    return current_user


@router.get("/earnings", response_model=EarningsResponse)
async def get_earnings(current_user: DriverUser, db: DbSession) -> EarningsResponse:
    """Driver share of completed bookings."""
    result = await db.execute(
        select(func.count(), func.coalesce(func.sum(Booking.total_amount), 0)).where(
            Booking.driver_id == current_user.id,
            Booking.status == BookingStatus.COMPLETED.value,
        )
    )
    count, gross = result.one()
    return EarningsResponse(
        completed_bookings=count,
        gross_amount=gross,
        commission_percent=settings.driver_commission_percent,
        earnings=round(gross * settings.driver_commission_percent / 100),
        currency=settings.currency,
    )
