"""Admin schemas: user management, approvals, driver assignment, audit."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator

from washride.schemas.user import RoleFields, UserBase, UserResponse, _check_password


class AdminUserCreate(UserBase, RoleFields):
    """Schema for staff creating an account on someone's behalf."""

    password: str = Field(..., min_length=6, max_length=128)
    role: str = Field(..., pattern="^(client|driver|carwash|admin|subadmin)$")
    admin_level: str | None = Field(None, pattern="^(super_admin|admin|support)$")
    notes: str | None = Field(None, max_length=1000)

    @model_validator(mode="after")
    def validate_admin_fields(self) -> "AdminUserCreate":
        _check_password(self.password)
        if self.admin_level and self.role != "admin":
            raise ValueError("admin_level only applies to admin accounts")
        return self


class AdminUserUpdate(BaseModel):
    """Schema for staff editing a user."""

    name: str | None = Field(None, min_length=2, max_length=100)
    phone: str | None = None
    role: str | None = Field(None, pattern="^(client|driver|carwash|admin|subadmin)$")
    admin_level: str | None = Field(None, pattern="^(super_admin|admin|support)$")
    is_active: bool | None = None
    availability: bool | None = None
    car_wash_name: str | None = Field(None, max_length=150)
    location: str | None = Field(None, max_length=500)
    washing_bays: int | None = Field(None, ge=1, le=20)

    @field_validator("name", "phone", "role", "is_active", "availability", mode="before")
    @classmethod
    def reject_null(cls, v, info: ValidationInfo):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class SuspendRequest(BaseModel):
    reason: str = Field(..., min_length=3, max_length=1000)


class ApprovalDecision(BaseModel):
    notes: str | None = Field(None, max_length=1000)


class RejectionRequest(BaseModel):
    reason: str = Field(..., min_length=3, max_length=1000)


class AssignDriverRequest(BaseModel):
    driver_id: UUID


class UserListResponse(BaseModel):
    users: list[UserResponse]
    total: int
    page: int
    page_size: int


class DashboardResponse(BaseModel):
    """Platform-wide counts."""

    total_users: int
    users_by_role: dict[str, int]
    pending_approvals: int
    total_bookings: int
    bookings_by_status: dict[str, int]
    active_drivers: int
    revenue: int
    currency: str


class AuditLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID | None
    action: str
    resource_type: str
    resource_id: UUID | None
    old_values: dict | None
    new_values: dict | None
    ip_address: str | None
    created_at: datetime


class AuditLogListResponse(BaseModel):
    logs: list[AuditLogResponse]
    total: int
    page: int
    page_size: int
