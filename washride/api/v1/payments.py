"""Payment endpoints."""

from uuid import UUID

from fastapi import APIRouter
from sqlalchemy import select

from washride.api.deps import (
    AdminUser,
    Context,
    CurrentUser,
    DbSession,
    get_booking_or_404,
)
from washride.core.exceptions import AuthorizationError, NotFoundError
from washride.models.payment import Payment
from washride.schemas.payment import (
    PaymentInitiate,
    PaymentRefundRequest,
    PaymentResponse,
    PaymentStatusResponse,
    PaymentVerify,
)
from washride.services.booking_service import can_view
from washride.services.payment_service import payment_service

router = APIRouter()


async def _payment_for_booking(db: DbSession, booking_id: UUID) -> Payment:
    result = await db.execute(select(Payment).where(Payment.booking_id == booking_id))
    payment = result.scalar_one_or_none()
    if not payment:
        raise NotFoundError("Payment for booking", str(booking_id))
    return payment


async def _payment_by_id(db: DbSession, payment_id: UUID) -> Payment:
    result = await db.execute(select(Payment).where(Payment.id == payment_id))
    payment = result.scalar_one_or_none()
    if not payment:
        raise NotFoundError("Payment", str(payment_id))
    return payment


@router.post("/initiate", response_model=PaymentStatusResponse)
async def initiate_payment(data: PaymentInitiate, ctx: Context, db: DbSession) -> PaymentStatusResponse:
    """Pay for a washed booking."""
    booking = await get_booking_or_404(db, data.booking_id)
    if booking.client_id != ctx.user.id and not ctx.is_staff:
        raise AuthorizationError("Only the booking's client can pay for it")

    payment = await _payment_for_booking(db, booking.id)
    await payment_service.initiate(db, booking, payment, data.method, ctx, data.transaction_id)
    return PaymentStatusResponse(
        payment=PaymentResponse.model_validate(payment),
        booking_status=booking.status,
        booking_payment_status=booking.payment_status,
    )


@router.get("/booking/{booking_id}", response_model=PaymentResponse)
async def get_booking_payment(booking_id: UUID, current_user: CurrentUser, db: DbSession) -> Payment:
    booking = await get_booking_or_404(db, booking_id)
    if not can_view(booking, current_user):
        raise AuthorizationError("You don't have permission to access this booking")
    return await _payment_for_booking(db, booking.id)


@router.post("/verify", response_model=PaymentStatusResponse)
async def verify_payment(
    data: PaymentVerify,
    current_user: AdminUser,
    ctx: Context,
    db: DbSession,
) -> PaymentStatusResponse:
    """Confirm or fail a payment (admin)."""
    payment = await _payment_by_id(db, data.payment_id)
    booking = await get_booking_or_404(db, payment.booking_id)
    await payment_service.verify(db, booking, payment, data.status, ctx, data.transaction_id)
    return PaymentStatusResponse(
        payment=PaymentResponse.model_validate(payment),
        booking_status=booking.status,
        booking_payment_status=booking.payment_status,
    )


@router.post("/{payment_id}/refund", response_model=PaymentResponse)
async def refund_payment(
    payment_id: UUID,
    data: PaymentRefundRequest,
    current_user: AdminUser,
    ctx: Context,
    db: DbSession,
) -> Payment:
    """Refund a paid payment (admin)."""
    payment = await _payment_by_id(db, payment_id)
    booking = await get_booking_or_404(db, payment.booking_id)
    return await payment_service.refund(db, booking, payment, ctx, data.reason)
