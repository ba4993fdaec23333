"""Booking-related Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from washride.domain.booking_state import BookingStatus


class BookingCreate(BaseModel):
    """Schema for creating a booking."""

    vehicle_id: UUID
    car_wash_id: UUID
    service_id: UUID
    driver_id: UUID | None = None
    pickup_location: str = Field(..., min_length=5, max_length=200)
    pickup_lat: float | None = Field(None, ge=-90, le=90)
    pickup_lng: float | None = Field(None, ge=-180, le=180)
    scheduled_pickup_time: datetime | None = None
    notes: str | None = Field(None, max_length=1000)

    @model_validator(mode="after")
    def validate_coordinates(self) -> "BookingCreate":
        if (self.pickup_lat is None) != (self.pickup_lng is None):
            raise ValueError("pickup_lat and pickup_lng must be given together")
        return self


class BookingStatusUpdate(BaseModel):
    """Schema for moving a booking to a new status."""

    status: BookingStatus
    reason: str | None = Field(None, max_length=1000)


class BookingCancelRequest(BaseModel):
    """Schema for canceling a booking."""

    reason: str | None = Field(None, max_length=1000)


class BookingResponse(BaseModel):
    """Schema for booking response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    client_id: UUID
    car_wash_id: UUID
    vehicle_id: UUID
    service_id: UUID
    driver_id: UUID | None

    # Status
    status: BookingStatus
    payment_status: str
    version: int

    # Pricing
    total_amount: int

    # Pickup
    pickup_location: str
    pickup_lat: float | None
    pickup_lng: float | None
    notes: str | None

    # Lifecycle
    scheduled_pickup_time: datetime | None
    actual_pickup_time: datetime | None
    wash_start_time: datetime | None
    wash_complete_time: datetime | None
    delivery_time: datetime | None
    completed_at: datetime | None

    # Cancellation
    cancelled_at: datetime | None
    cancelled_by: str | None
    cancellation_reason: str | None

    created_at: datetime
    updated_at: datetime


class BookingListResponse(BaseModel):
    """Schema for paginated booking list."""

    bookings: list[BookingResponse]
    total: int
    page: int
    page_size: int


class BookingTransitionsResponse(BaseModel):
    """Where a booking can go from its current status."""

    booking_id: UUID
    status: BookingStatus
    next_status: BookingStatus | None
    allowed: list[BookingStatus]
    is_terminal: bool
