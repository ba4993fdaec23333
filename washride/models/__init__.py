"""Database models."""

from washride.models.admin import AuditLog
from washride.models.booking import Booking
from washride.models.notification import Notification
from washride.models.payment import Payment
from washride.models.service import Service
from washride.models.user import User
from washride.models.vehicle import Vehicle

__all__ = [
    # User
    "User",
    "Vehicle",
    # Car wash
    "Service",
    # Booking
    "Booking",
    "Payment",
    # Notifications
    "Notification",
    # Admin
    "AuditLog",
]
