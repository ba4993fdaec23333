"""Car wash service and provider schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class ServiceCreate(BaseModel):
    """Schema for a car wash adding a service."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    price: int = Field(..., ge=0, description="Price in ngwee")
    is_active: bool = True


class ServiceUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    price: int | None = Field(None, ge=0)
    is_active: bool | None = None

    @field_validator("name", "price", "is_active", mode="before")
    @classmethod
    def reject_null(cls, v, info: ValidationInfo):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class ServiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    car_wash_id: UUID
    name: str
    description: str | None
    price: int
    is_active: bool
    created_at: datetime


class CarWashResponse(BaseModel):
    """Public car wash listing."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    phone: str
    car_wash_name: str | None
    location: str | None
    washing_bays: int | None
    services: list[ServiceResponse] = []


class CarWashDashboard(BaseModel):
    """Booking counts by phase plus paid revenue."""

    total_bookings: int
    pending: int
    in_progress: int
    completed: int
    cancelled: int
    revenue: int
    currency: str
