"""Pydantic schemas for API validation."""

from washride.schemas.admin import (
    AdminUserCreate,
    AdminUserUpdate,
    AssignDriverRequest,
    AuditLogResponse,
    DashboardResponse,
)
from washride.schemas.booking import (
    BookingCancelRequest,
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    BookingStatusUpdate,
    BookingTransitionsResponse,
)
from washride.schemas.driver import AvailabilityUpdate, EarningsResponse
from washride.schemas.notification import NotificationListResponse, NotificationResponse
from washride.schemas.payment import (
    PaymentInitiate,
    PaymentRefundRequest,
    PaymentResponse,
    PaymentVerify,
)
from washride.schemas.service import (
    CarWashDashboard,
    CarWashResponse,
    ServiceCreate,
    ServiceResponse,
    ServiceUpdate,
)
from washride.schemas.user import (
    TokenResponse,
    UserCreate,
    UserLogin,
    UserResponse,
    UserUpdate,
)
from washride.schemas.vehicle import VehicleCreate, VehicleResponse, VehicleUpdate

__all__ = [
    # User
    "UserCreate",
    "UserLogin",
    "UserUpdate",
    "UserResponse",
    "TokenResponse",
    # Vehicle
    "VehicleCreate",
    "VehicleUpdate",
    "VehicleResponse",
    # Car wash
    "ServiceCreate",
    "ServiceUpdate",
    "ServiceResponse",
    "CarWashResponse",
    "CarWashDashboard",
    # Booking
    "BookingCreate",
    "BookingStatusUpdate",
    "BookingCancelRequest",
    "BookingResponse",
    "BookingListResponse",
    "BookingTransitionsResponse",
    # Driver
    "AvailabilityUpdate",
    "EarningsResponse",
    # Payment
    "PaymentInitiate",
    "PaymentVerify",
    "PaymentRefundRequest",
    "PaymentResponse",
    # Notification
    "NotificationResponse",
    "NotificationListResponse",
    # Admin
    "AdminUserCreate",
    "AdminUserUpdate",
    "AssignDriverRequest",
    "AuditLogResponse",
    "DashboardResponse",
]
