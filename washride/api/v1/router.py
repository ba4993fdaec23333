"""Main API router that includes all endpoint routers."""

from fastapi import APIRouter

from washride.api.v1 import (
    admin,
    auth,
    bookings,
    carwashes,
    drivers,
    notifications,
    payments,
    vehicles,
)

api_router = APIRouter()

# Authentication
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])

# Vehicles
api_router.include_router(vehicles.router, prefix="/vehicles", tags=["Vehicles"])

# Car washes
api_router.include_router(carwashes.router, prefix="/carwashes", tags=["Car Washes"])

# Bookings
api_router.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])

# Drivers
api_router.include_router(drivers.router, prefix="/drivers", tags=["Drivers"])

# Payments
api_router.include_router(payments.router, prefix="/payments", tags=["Payments"])

# Notifications
api_router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])

# Admin
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])
