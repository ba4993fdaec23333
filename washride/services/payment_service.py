"""Payment settlement service."""

import logging
from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from washride.core.exceptions import ConcurrentUpdateError, ConflictError
from washride.database import utcnow
from washride.domain.booking_state import BookingStatus
from washride.domain.payment_state import PaymentMethod, PaymentStatus, assert_payment_transition
from washride.models.booking import Booking
from washride.models.payment import Payment
from washride.services.audit_service import audit_service
from washride.services.booking_service import booking_service
from washride.services.notification_service import notification_service

if TYPE_CHECKING:
    from washride.api.deps import RequestContext

logger = logging.getLogger(__name__)

PAYABLE_STATUSES = frozenset({BookingStatus.WASH_COMPLETED.value, BookingStatus.DELIVERED.value})


class PaymentService:
    """Moves payments through their lifecycle and keeps the booking in step."""

    async def _apply(
        self,
        db: AsyncSession,
        booking: Booking,
        payment: Payment,
        target: PaymentStatus,
        ctx: "RequestContext",
        action: str,
        **extra: str | None,
    ) -> Payment:
        previous = payment.status
        assert_payment_transition(previous, target.value)

        payment.status = target.value
        if target is PaymentStatus.PAID:
            payment.paid_at = utcnow()
        booking.payment_status = target.value

        if target is PaymentStatus.PAID and booking.status == BookingStatus.DELIVERED.value:
            await booking_service.transition(db, booking, BookingStatus.COMPLETED, ctx)
        else:
            try:
                await db.flush()
            except StaleDataError:
                raise ConcurrentUpdateError("Booking")

        await notification_service.notify_payment(db, booking, target.value)
        await audit_service.log_status_change(
            db,
            ctx,
            action=action,
            resource_type="payment",
            resource_id=payment.id,
            old_status=previous,
            new_status=target.value,
            amount=payment.amount,
            method=payment.method,
            **extra,
        )
        logger.info("Payment %s for booking %s: %s → %s", payment.id, booking.id, previous, target.value)
        return payment

    async def initiate(
        self,
        db: AsyncSession,
        booking: Booking,
        payment: Payment,
        method: PaymentMethod,
        ctx: "RequestContext",
        transaction_id: str | None = None,
    ) -> Payment:
        """Settle a booking whose wash is done; a delivered booking completes."""
        if booking.status not in PAYABLE_STATUSES:
            raise ConflictError(
                f"Booking must be wash_completed or delivered to pay (currently {booking.status})"
            )
        payment.method = method.value
        payment.transaction_id = transaction_id
        return await self._apply(db, booking, payment, PaymentStatus.PAID, ctx, "payment_initiate")

    async def verify(
        self,
        db: AsyncSession,
        booking: Booking,
        payment: Payment,
        status: str,
        ctx: "RequestContext",
        transaction_id: str | None = None,
    ) -> Payment:
        """Admin confirmation (or failure) of a payment."""
        if transaction_id:
            payment.transaction_id = transaction_id
        return await self._apply(db, booking, payment, PaymentStatus(status), ctx, "payment_verify")

    async def refund(
        self,
        db: AsyncSession,
        booking: Booking,
        payment: Payment,
        ctx: "RequestContext",
        reason: str | None = None,
    ) -> Payment:
        return await self._apply(
            db, booking, payment, PaymentStatus.REFUNDED, ctx, "payment_refund", reason=reason
        )


payment_service = PaymentService()
