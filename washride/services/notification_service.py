"""In-app notification service.

Notifications are rows in the ``notifications`` table, written in the same
transaction as the change they describe.
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from washride.models.booking import Booking
from washride.models.notification import Notification

logger = logging.getLogger(__name__)

STATUS_MESSAGES: dict[str, str] = {
    "accepted": "A driver has accepted your booking",
    "declined": "Your booking was declined",
    "picked_up": "Your vehicle has been picked up",
    "at_wash": "Your vehicle has arrived at the car wash",
    "waiting_bay": "Your vehicle is in the waiting bay",
    "washing_bay": "Your vehicle is being washed",
    "drying_bay": "Your vehicle is being dried",
    "wash_completed": "Your vehicle wash is complete",
    "delivered": "Your vehicle has been delivered",
    "completed": "Your booking is complete",
    "cancelled": "Your booking has been cancelled",
}


class NotificationService:
    """Service for creating in-app notifications."""

    # Notification types
    BOOKING_UPDATE = "booking_update"
    PAYMENT = "payment"
    SYSTEM = "system"

    async def create_notification(
        self,
        db: AsyncSession,
        user_id: UUID,
        title: str,
        message: str,
        notification_type: str = BOOKING_UPDATE,
        booking_id: UUID | None = None,
        priority: str = "medium",
    ) -> Notification:
        """Create an in-app notification.

        Args:
            db: Database session
            user_id: User to notify
            title: Notification title
            message: Notification body text
            notification_type: booking_update, payment or system
            booking_id: Related booking ID
            priority: low, medium, high or urgent

        Returns:
            Notification: Created notification
        """
        notification = Notification(
            user_id=user_id,
            title=title,
            message=message,
            notification_type=notification_type,
            booking_id=booking_id,
            priority=priority,
        )
        db.add(notification)
        return notification

    async def notify_new_booking(self, db: AsyncSession, booking: Booking) -> None:
        """Tell the car wash (and a pre-selected driver) about a new booking."""
        await self.create_notification(
            db,
            user_id=booking.car_wash_id,
            title="New Booking",
            message=f"New booking received for pickup at {booking.pickup_location}",
            booking_id=booking.id,
            priority="high",
        )
        if booking.driver_id:
            await self.create_notification(
                db,
                user_id=booking.driver_id,
                title="New Job Assigned",
                message=f"You have been selected for a pickup at {booking.pickup_location}",
                booking_id=booking.id,
                priority="high",
            )

    async def notify_status_change(
        self,
        db: AsyncSession,
        booking: Booking,
        new_status: str,
        actor_id: UUID,
    ) -> None:
        """Notify every party on the booking except the one who made the change."""
        message = STATUS_MESSAGES.get(new_status, f"Booking status changed to {new_status}")
        priority = "high" if new_status in ("cancelled", "declined", "delivered") else "medium"
        recipients = {booking.client_id, booking.car_wash_id}
        if booking.driver_id:
            recipients.add(booking.driver_id)
        recipients.discard(actor_id)

        for user_id in recipients:
            await self.create_notification(
                db,
                user_id=user_id,
                title="Booking Update",
                message=message,
                booking_id=booking.id,
                priority=priority,
            )
        logger.debug("Queued %d notifications for booking %s → %s", len(recipients), booking.id, new_status)

    async def notify_payment(self, db: AsyncSession, booking: Booking, status: str) -> None:
        """Tell the client and car wash about a payment outcome."""
        for user_id in (booking.client_id, booking.car_wash_id):
            await self.create_notification(
                db,
                user_id=user_id,
                title="Payment Update",
                message=f"Payment of {booking.total_amount} ngwee is {status}",
                notification_type=self.PAYMENT,
                booking_id=booking.id,
            )


notification_service = NotificationService()
