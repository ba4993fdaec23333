"""Booking model."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from washride.database import Base, utcnow

if TYPE_CHECKING:
    from washride.models.payment import Payment


class Booking(Base):
    """A pickup, wash and delivery order."""

    __tablename__ = "bookings"
    __table_args__ = (
        Index("ix_bookings_client_created", "client_id", "created_at"),
        Index("ix_bookings_driver_status", "driver_id", "status"),
        Index("ix_bookings_car_wash_status", "car_wash_id", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    client_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    car_wash_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    vehicle_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("vehicles.id"), nullable=False)
    service_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("services.id"), nullable=False)
    driver_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id"))

    # Status
    status: Mapped[str] = mapped_column(String(20), default="pending", index=True)
    payment_status: Mapped[str] = mapped_column(
        String(20), default="pending"
    )  # pending, paid, failed, refunded

    # Pricing (copied from the service at booking time)
    total_amount: Mapped[int] = mapped_column(Integer, nullable=False)  # in ngwee

    # Pickup
    pickup_location: Mapped[str] = mapped_column(String(200), nullable=False)
    pickup_lat: Mapped[float | None] = mapped_column(Float)
    pickup_lng: Mapped[float | None] = mapped_column(Float)
    notes: Mapped[str | None] = mapped_column(Text)

    # Lifecycle timestamps
    scheduled_pickup_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    actual_pickup_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    wash_start_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    wash_complete_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    delivery_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Cancellation
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    cancelled_by: Mapped[str | None] = mapped_column(String(20))  # client, driver, carwash, admin, subadmin
    cancellation_reason: Mapped[str | None] = mapped_column(Text)

    # Optimistic lock: UPDATEs match on the version they loaded
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    __mapper_args__ = {"version_id_col": version}

    payment: Mapped["Payment | None"] = relationship(
        "Payment", back_populates="booking", uselist=False
    )
