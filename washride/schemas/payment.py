"""Payment-related Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from washride.domain.payment_state import PaymentMethod


class PaymentInitiate(BaseModel):
    """Schema for settling a booking."""

    booking_id: UUID
    method: PaymentMethod
    transaction_id: str | None = Field(None, max_length=100)


class PaymentVerify(BaseModel):
    """Schema for an admin confirming or failing a payment."""

    payment_id: UUID
    status: str = Field(..., pattern="^(paid|failed)$")
    transaction_id: str | None = Field(None, max_length=100)


class PaymentRefundRequest(BaseModel):
    """Schema for refunding a payment."""

    reason: str = Field(..., min_length=10, max_length=1000)


class PaymentResponse(BaseModel):
    """Schema for payment response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    booking_id: UUID
    amount: int
    currency: str
    method: str | None
    status: str
    transaction_id: str | None
    paid_at: datetime | None
    created_at: datetime


class PaymentStatusResponse(BaseModel):
    """Schema for payment status after settlement."""

    payment: PaymentResponse
    booking_status: str
    booking_payment_status: str
