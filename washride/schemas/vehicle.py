"""Vehicle schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class VehicleCreate(BaseModel):
    make: str = Field(..., min_length=1, max_length=50)
    model: str = Field(..., min_length=1, max_length=50)
    plate_no: str = Field(..., min_length=3, max_length=20)
    color: str = Field(..., min_length=1, max_length=30)

    @field_validator("plate_no")
    @classmethod
    def normalize_plate(cls, v: str) -> str:
        return v.strip().upper()


class VehicleUpdate(BaseModel):
    make: str | None = Field(None, min_length=1, max_length=50)
    model: str | None = Field(None, min_length=1, max_length=50)
    plate_no: str | None = Field(None, min_length=3, max_length=20)
    color: str | None = Field(None, min_length=1, max_length=30)

    @field_validator("make", "model", "plate_no", "color", mode="before")
    @classmethod
    def reject_null(cls, v, info: ValidationInfo):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @field_validator("plate_no")
    @classmethod
    def normalize_plate(cls, v: str | None) -> str | None:
        return v.strip().upper() if v else v


class VehicleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    client_id: UUID
    make: str
    model: str
    plate_no: str
    color: str
    created_at: datetime
