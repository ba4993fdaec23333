"""Driver schemas."""

from pydantic import BaseModel


class AvailabilityUpdate(BaseModel):
    availability: bool


class EarningsResponse(BaseModel):
    """Commission earned on completed bookings."""

    completed_bookings: int
    gross_amount: int
    commission_percent: float
    earnings: int
    currency: str
