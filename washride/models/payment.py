"""Payment model."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from washride.database import Base, utcnow

if TYPE_CHECKING:
    from washride.models.booking import Booking


class Payment(Base):
    """Payment for a booking (one per booking)."""

    __tablename__ = "payments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    booking_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("bookings.id"), unique=True, nullable=False
    )

    amount: Mapped[int] = mapped_column(Integer, nullable=False)  # in ngwee
    currency: Mapped[str] = mapped_column(String(3), default="ZMW")
    method: Mapped[str | None] = mapped_column(
        String(20)
    )  # cash, card, mobile_money, bank_transfer; null until initiated
    status: Mapped[str] = mapped_column(
        String(20), default="pending", index=True
    )  # pending, paid, failed, refunded
    transaction_id: Mapped[str | None] = mapped_column(String(100))
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    booking: Mapped["Booking"] = relationship("Booking", back_populates="payment")
