"""Booking lifecycle service.

Every status change goes through :func:`BookingService.change_status`, which
checks who may set the target status, consults the transition map, stamps the
lifecycle timestamp and flushes against the row version so that two requests
racing from the same state cannot both win.
"""

import logging
from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from washride.core.exceptions import AuthorizationError, ConcurrentUpdateError, ConflictError
from washride.core.permissions import UserRole
from washride.database import utcnow
from washride.domain.booking_state import BookingStatus, assert_booking_transition, is_terminal
from washride.models.booking import Booking
from washride.models.user import User
from washride.services.audit_service import audit_service
from washride.services.notification_service import notification_service

if TYPE_CHECKING:
    from washride.api.deps import RequestContext

logger = logging.getLogger(__name__)

CLIENT_STATUSES = frozenset({BookingStatus.CANCELLED})
DRIVER_STATUSES = frozenset(
    {
        BookingStatus.ACCEPTED,
        BookingStatus.DECLINED,
        BookingStatus.PICKED_UP,
        BookingStatus.DELIVERED,
    }
)
CARWASH_STATUSES = frozenset(
    {
        BookingStatus.AT_WASH,
        BookingStatus.WAITING_BAY,
        BookingStatus.WASHING_BAY,
        BookingStatus.DRYING_BAY,
        BookingStatus.WASH_COMPLETED,
    }
)

# Timestamp column stamped when a booking enters a status
STATUS_TIMESTAMPS: dict[BookingStatus, str] = {
    BookingStatus.PICKED_UP: "actual_pickup_time",
    BookingStatus.WASHING_BAY: "wash_start_time",
    BookingStatus.WASH_COMPLETED: "wash_complete_time",
    BookingStatus.DELIVERED: "delivery_time",
    BookingStatus.COMPLETED: "completed_at",
    BookingStatus.CANCELLED: "cancelled_at",
}


def is_party(booking: Booking, user: User) -> bool:
    """Whether ``user`` is the client, car wash or driver on the booking."""
    return user.id in (booking.client_id, booking.car_wash_id, booking.driver_id)


def can_view(booking: Booking, user: User) -> bool:
    return user.role in (UserRole.ADMIN.value, UserRole.SUBADMIN.value) or is_party(booking, user)


def authorize_status_change(booking: Booking, user: User, target: BookingStatus) -> None:
    """Raise unless ``user``'s role may move ``booking`` to ``target``.

    A driver may claim an unassigned booking by accepting it; every other
    driver action needs the driver to be the one assigned.
    """
    role = UserRole(user.role)
    match role:
        case UserRole.CLIENT:
            if booking.client_id != user.id:
                raise AuthorizationError("You can only update your own bookings")
            allowed = CLIENT_STATUSES
        case UserRole.DRIVER:
            claiming = booking.driver_id is None and target is BookingStatus.ACCEPTED
            if booking.driver_id != user.id and not claiming:
                raise AuthorizationError("You are not assigned to this booking")
            allowed = DRIVER_STATUSES
        case UserRole.CARWASH:
            if booking.car_wash_id != user.id:
                raise AuthorizationError("This booking belongs to another car wash")
            allowed = CARWASH_STATUSES
        case UserRole.ADMIN | UserRole.SUBADMIN:
            return
    if target not in allowed:
        raise AuthorizationError(f"A {role.value} cannot set a booking to '{target.value}'")


class BookingService:
    """Guarded booking status changes."""

    async def transition(
        self,
        db: AsyncSession,
        booking: Booking,
        target: BookingStatus | str,
        ctx: "RequestContext",
        reason: str | None = None,
    ) -> Booking:
        """Move ``booking`` to ``target`` if the transition map allows it.

        Raises:
            InvalidStatusTransition: target is not a legal successor
            ConcurrentUpdateError: another request changed the booking first
        """
        previous = booking.status
        status = assert_booking_transition(previous, target)

        booking.status = status.value
        stamp = STATUS_TIMESTAMPS.get(status)
        if stamp:
            setattr(booking, stamp, utcnow())
        if status is BookingStatus.CANCELLED:
            booking.cancelled_by = ctx.role.value
            booking.cancellation_reason = reason
        elif status is BookingStatus.DECLINED and reason:
            booking.cancellation_reason = reason

        # a lost race expires these instances, so read ids up front
        booking_id = booking.id
        actor_id = ctx.user.id
        try:
            await db.flush()
        except StaleDataError:
            logger.warning(
                "Concurrent update on booking %s (%s → %s) by %s",
                booking_id,
                previous,
                status.value,
                actor_id,
            )
            raise ConcurrentUpdateError("Booking")

        await notification_service.notify_status_change(db, booking, status.value, ctx.user.id)
        await audit_service.log_status_change(
            db,
            ctx,
            action="booking_status_change",
            resource_type="booking",
            resource_id=booking.id,
            old_status=previous,
            new_status=status.value,
            reason=reason,
        )
        logger.info("Booking %s: %s → %s by %s", booking.id, previous, status.value, ctx.role.value)
        return booking

    async def change_status(
        self,
        db: AsyncSession,
        booking: Booking,
        target: BookingStatus | str,
        ctx: "RequestContext",
        reason: str | None = None,
    ) -> Booking:
        """Role-checked status change; a driver accepting an open job claims it."""
        status = BookingStatus(target)
        authorize_status_change(booking, ctx.user, status)
        if ctx.role is UserRole.DRIVER and booking.driver_id is None:
            booking.driver_id = ctx.user.id
        return await self.transition(db, booking, status, ctx, reason)

    async def assign_driver(
        self,
        db: AsyncSession,
        booking: Booking,
        driver: User,
        ctx: "RequestContext",
    ) -> Booking:
        """Attach ``driver``; a pending booking becomes accepted."""
        if is_terminal(booking.status):
            raise ConflictError(f"Cannot assign a driver to a {booking.status} booking")
        previous_driver = booking.driver_id
        booking.driver_id = driver.id

        if booking.status == BookingStatus.PENDING.value:
            await self.transition(db, booking, BookingStatus.ACCEPTED, ctx)
        else:
            try:
                await db.flush()
            except StaleDataError:
                raise ConcurrentUpdateError("Booking")

        await notification_service.create_notification(
            db,
            user_id=driver.id,
            title="New Job Assigned",
            message=f"You have been assigned a pickup at {booking.pickup_location}",
            booking_id=booking.id,
            priority="high",
        )
        await audit_service.log_for(
            db,
            ctx,
            action="booking_assign_driver",
            resource_type="booking",
            resource_id=booking.id,
            old_values={"driver_id": str(previous_driver) if previous_driver else None},
            new_values={"driver_id": str(driver.id)},
        )
        logger.info("Driver %s assigned to booking %s by %s", driver.id, booking.id, ctx.user.id)
        return booking


booking_service = BookingService()
