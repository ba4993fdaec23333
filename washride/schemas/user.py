"""User-related Pydantic schemas."""

import re
from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationInfo, field_validator, model_validator

PHONE_PATTERN = r"^\+?[0-9]{9,15}$"


def _check_password(v: str) -> str:
    if not re.search(r"[A-Z]", v):
        raise ValueError("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", v):
        raise ValueError("Password must contain at least one lowercase letter")
    if not re.search(r"\d", v):
        raise ValueError("Password must contain at least one digit")
    return v


class UserBase(BaseModel):
    """Base user schema."""

    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    phone: str
    nrc: str = Field(..., min_length=5, max_length=20)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        v = v.replace(" ", "")
        if not re.match(PHONE_PATTERN, v):
            raise ValueError("Please provide a valid phone number")
        return v


class RoleFields(BaseModel):
    """Role-specific profile fields."""

    # Client
    business_name: str | None = Field(None, max_length=150)
    is_business: bool = False

    # Driver
    license_no: str | None = Field(None, max_length=50)
    license_type: str | None = Field(None, max_length=20)
    license_expiry: date | None = None
    address: str | None = Field(None, max_length=500)
    marital_status: str | None = Field(None, max_length=20)

    # Car wash
    car_wash_name: str | None = Field(None, max_length=150)
    location: str | None = Field(None, max_length=500)
    washing_bays: int | None = Field(None, ge=1, le=20)


class UserCreate(UserBase, RoleFields):
    """Schema for self-service registration."""

    password: str = Field(..., min_length=6, max_length=128)
    role: str = Field(..., pattern="^(client|driver|carwash)$")

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _check_password(v)

    @model_validator(mode="after")
    def validate_role_fields(self) -> "UserCreate":
        if self.role == "driver" and not (self.license_no and self.license_type and self.license_expiry):
            raise ValueError("Drivers must provide license_no, license_type and license_expiry")
        if self.role == "carwash" and not (self.car_wash_name and self.location and self.washing_bays):
            raise ValueError("Car washes must provide car_wash_name, location and washing_bays")
        return self


class UserLogin(BaseModel):
    """Schema for user login."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class UserUpdate(BaseModel):
    """Schema for updating one's own profile."""

    name: str | None = Field(None, min_length=2, max_length=100)
    phone: str | None = None
    business_name: str | None = Field(None, max_length=150)
    is_business: bool | None = None
    address: str | None = Field(None, max_length=500)
    marital_status: str | None = Field(None, max_length=20)
    license_no: str | None = Field(None, max_length=50)
    license_type: str | None = Field(None, max_length=20)
    license_expiry: date | None = None
    car_wash_name: str | None = Field(None, max_length=150)
    location: str | None = Field(None, max_length=500)
    washing_bays: int | None = Field(None, ge=1, le=20)

    @field_validator("name", "phone", "is_business", mode="before")
    @classmethod
    def reject_null(cls, v, info: ValidationInfo):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.replace(" ", "")
        if not re.match(PHONE_PATTERN, v):
            raise ValueError("Please provide a valid phone number")
        return v


class UserResponse(BaseModel):
    """Schema for user response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str
    phone: str
    nrc: str
    role: str
    admin_level: str | None

    is_active: bool
    is_suspended: bool
    approval_status: str

    business_name: str | None
    is_business: bool
    license_no: str | None
    license_type: str | None
    license_expiry: date | None
    address: str | None
    marital_status: str | None
    availability: bool
    car_wash_name: str | None
    location: str | None
    washing_bays: int | None

    created_at: datetime
    last_login_at: datetime | None


class UserPublicResponse(BaseModel):
    """Schema for a user as seen by other parties (drivers, car washes)."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    phone: str
    role: str
    car_wash_name: str | None
    location: str | None
    washing_bays: int | None
    availability: bool


class TokenResponse(BaseModel):
    """Schema for authentication token response."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserResponse | None = None


class RefreshTokenRequest(BaseModel):
    """Schema for token refresh request."""

    refresh_token: str
