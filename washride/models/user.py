"""User account model."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from washride.database import Base, utcnow

if TYPE_CHECKING:
    from washride.models.service import Service
    from washride.models.vehicle import Vehicle


class User(Base):
    """User account model.

    One table for every role; role-specific attributes are nullable columns.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    nrc: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)  # national registration card
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, index=True
    )  # client, driver, carwash, admin, subadmin
    admin_level: Mapped[str | None] = mapped_column(String(20))  # super_admin, admin, support

    # Status
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    is_suspended: Mapped[bool] = mapped_column(Boolean, default=False)
    suspended_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    suspended_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id"))
    suspension_reason: Mapped[str | None] = mapped_column(Text)

    # Approval workflow
    approval_status: Mapped[str] = mapped_column(
        String(20), default="approved", index=True
    )  # pending, approved, rejected
    created_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id"))
    approval_requested_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    approved_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id"))
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    approval_notes: Mapped[str | None] = mapped_column(Text)
    rejected_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    rejection_reason: Mapped[str | None] = mapped_column(Text)

    # Client
    business_name: Mapped[str | None] = mapped_column(String(150))
    is_business: Mapped[bool] = mapped_column(Boolean, default=False)

    # Driver
    license_no: Mapped[str | None] = mapped_column(String(50))
    license_type: Mapped[str | None] = mapped_column(String(20))
    license_expiry: Mapped[date | None] = mapped_column(Date)
    address: Mapped[str | None] = mapped_column(Text)
    marital_status: Mapped[str | None] = mapped_column(String(20))
    availability: Mapped[bool] = mapped_column(Boolean, default=True)

    # Car wash
    car_wash_name: Mapped[str | None] = mapped_column(String(150))
    location: Mapped[str | None] = mapped_column(Text)
    washing_bays: Mapped[int | None] = mapped_column(Integer)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Relationships
    vehicles: Mapped[list["Vehicle"]] = relationship("Vehicle", back_populates="owner")
    services: Mapped[list["Service"]] = relationship("Service", back_populates="car_wash")

    @property
    def can_sign_in(self) -> bool:
        return self.is_active and not self.is_suspended and self.approval_status == "approved"
