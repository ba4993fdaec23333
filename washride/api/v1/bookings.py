"""Booking endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, Query, status
from sqlalchemy import select

from washride.api.deps import ClientUser, Context, CurrentUser, DbSession, get_booking_or_404
from washride.api.v1.pagination import paginate
from washride.config import settings
from washride.core.exceptions import AuthorizationError, BadRequestError, NotFoundError
from washride.core.permissions import UserRole
from washride.domain.booking_state import (
    BookingStatus,
    allowed_transitions,
    is_terminal,
    next_status,
)
from washride.models.booking import Booking
from washride.models.payment import Payment
from washride.models.service import Service
from washride.models.user import User
from washride.models.vehicle import Vehicle
from washride.schemas.booking import (
    BookingCancelRequest,
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    BookingStatusUpdate,
    BookingTransitionsResponse,
)
from washride.services.audit_service import audit_service
from washride.services.booking_service import booking_service, can_view
from washride.services.notification_service import notification_service

router = APIRouter()
logger = logging.getLogger(__name__)


async def _get_active_user(db: DbSession, user_id: UUID, role: UserRole) -> User | None:
    result = await db.execute(
        select(User).where(
            User.id == user_id,
            User.role == role.value,
            User.is_active.is_(True),
            User.is_suspended.is_(False),
        )
    )
    return result.scalar_one_or_none()


async def get_visible_booking(db: DbSession, booking_id: UUID, user: User) -> Booking:
    booking = await get_booking_or_404(db, booking_id)
    if not can_view(booking, user):
        raise AuthorizationError("You don't have permission to access this booking")
    return booking


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    data: BookingCreate,
    current_user: ClientUser,
    ctx: Context,
    db: DbSession,
) -> Booking:
    """Book a pickup-and-wash for one of the client's vehicles."""
    result = await db.execute(
        select(Vehicle).where(Vehicle.id == data.vehicle_id, Vehicle.client_id == current_user.id)
    )
    if not result.scalar_one_or_none():
        raise NotFoundError("Vehicle", str(data.vehicle_id))

    car_wash = await _get_active_user(db, data.car_wash_id, UserRole.CARWASH)
    if not car_wash or car_wash.approval_status != "approved":
        raise NotFoundError("Car wash", str(data.car_wash_id))

    result = await db.execute(select(Service).where(Service.id == data.service_id))
    service = result.scalar_one_or_none()
    if not service:
        raise NotFoundError("Service", str(data.service_id))
    if service.car_wash_id != car_wash.id:
        raise BadRequestError("Service is not offered by this car wash")
    if not service.is_active:
        raise BadRequestError("Service is not currently available")

    if data.driver_id and not await _get_active_user(db, data.driver_id, UserRole.DRIVER):
        raise BadRequestError("Selected driver is not available")

    booking = Booking(
        client_id=current_user.id,
        car_wash_id=car_wash.id,
        vehicle_id=data.vehicle_id,
        service_id=service.id,
        driver_id=data.driver_id,
        status=BookingStatus.PENDING.value,
        payment_status="pending",
        total_amount=service.price,
        pickup_location=data.pickup_location,
        pickup_lat=data.pickup_lat,
        pickup_lng=data.pickup_lng,
        scheduled_pickup_time=data.scheduled_pickup_time,
        notes=data.notes,
    )
    db.add(booking)
    await db.flush()

    db.add(
        Payment(
            booking_id=booking.id,
            amount=booking.total_amount,
            currency=settings.currency,
            status="pending",
        )
    )

    await notification_service.notify_new_booking(db, booking)
    await audit_service.log_for(
        db,
        ctx,
        action="booking_create",
        resource_type="booking",
        resource_id=booking.id,
        new_values={"status": booking.status, "total_amount": booking.total_amount},
    )
    await db.flush()
    logger.info("Booking %s created by client %s", booking.id, current_user.id)
    return booking


@router.get("/", response_model=BookingListResponse)
async def list_bookings(
    current_user: CurrentUser,
    db: DbSession,
    status_filter: BookingStatus | None = Query(default=None, alias="status"),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
) -> BookingListResponse:
    """List bookings visible to the current user."""
    query = select(Booking)
    match UserRole(current_user.role):
        case UserRole.CLIENT:
            query = query.where(Booking.client_id == current_user.id)
        case UserRole.DRIVER:
            query = query.where(Booking.driver_id == current_user.id)
        case UserRole.CARWASH:
            query = query.where(Booking.car_wash_id == current_user.id)
        case UserRole.ADMIN | UserRole.SUBADMIN:
            pass

    if status_filter:
        query = query.where(Booking.status == status_filter.value)

    bookings, total = await paginate(db, query.order_by(Booking.created_at.desc()), page, page_size)
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in bookings],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(booking_id: UUID, current_user: CurrentUser, db: DbSession) -> Booking:
    """Get a booking the current user is party to."""
    return await get_visible_booking(db, booking_id, current_user)


@router.get("/{booking_id}/transitions", response_model=BookingTransitionsResponse)
async def get_booking_transitions(
    booking_id: UUID,
    current_user: CurrentUser,
    db: DbSession,
) -> BookingTransitionsResponse:
    """Where the booking can move from its current status."""
    booking = await get_visible_booking(db, booking_id, current_user)
    return BookingTransitionsResponse(
        booking_id=booking.id,
        status=BookingStatus(booking.status),
        next_status=next_status(booking.status),
        allowed=sorted(allowed_transitions(booking.status), key=lambda s: s.value),
        is_terminal=is_terminal(booking.status),
    )


@router.put("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: UUID,
    update: BookingStatusUpdate,
    ctx: Context,
    db: DbSession,
) -> Booking:
    """Move a booking to its next status (or cancel/decline it)."""
    booking = await get_booking_or_404(db, booking_id)
    return await booking_service.change_status(db, booking, update.status, ctx, update.reason)


@router.put("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    booking_id: UUID,
    ctx: Context,
    db: DbSession,
    request: BookingCancelRequest | None = None,
) -> Booking:
    """Cancel a booking that has not reached a terminal status."""
    booking = await get_booking_or_404(db, booking_id)
    reason = request.reason if request else None
    return await booking_service.change_status(db, booking, BookingStatus.CANCELLED, ctx, reason)
