"""Client vehicle endpoints."""

from uuid import UUID

from fastapi import APIRouter, status
from sqlalchemy import func, select

from washride.api.deps import ClientUser, DbSession
from washride.core.exceptions import ConflictError, NotFoundError
from washride.models.booking import Booking
from washride.models.vehicle import Vehicle
from washride.schemas.vehicle import VehicleCreate, VehicleResponse, VehicleUpdate

router = APIRouter()


async def _get_own_vehicle(db: DbSession, vehicle_id: UUID, client_id: UUID) -> Vehicle:
    result = await db.execute(
        select(Vehicle).where(Vehicle.id == vehicle_id, Vehicle.client_id == client_id)
    )
    vehicle = result.scalar_one_or_none()
    if not vehicle:
        raise NotFoundError("Vehicle", str(vehicle_id))
    return vehicle


async def _ensure_unbooked(db: DbSession, vehicle: Vehicle) -> None:
    """Vehicles referenced by a booking are frozen."""
    result = await db.execute(
        select(func.count()).select_from(Booking).where(Booking.vehicle_id == vehicle.id)
    )
    if result.scalar_one():
        raise ConflictError("Vehicle has bookings and can no longer be changed")


@router.get("/", response_model=list[VehicleResponse])
async def list_vehicles(current_user: ClientUser, db: DbSession) -> list[Vehicle]:
    """List the current client's vehicles."""
    result = await db.execute(
        select(Vehicle)
        .where(Vehicle.client_id == current_user.id)
        .order_by(Vehicle.created_at.desc())
    )
    return list(result.scalars().all())


@router.post("/", response_model=VehicleResponse, status_code=status.HTTP_201_CREATED)
async def create_vehicle(data: VehicleCreate, current_user: ClientUser, db: DbSession) -> Vehicle:
    """Register a vehicle."""
    vehicle = Vehicle(client_id=current_user.id, **data.model_dump())
    db.add(vehicle)
    await db.flush()
    return vehicle


@router.put("/{vehicle_id}", response_model=VehicleResponse)
async def update_vehicle(
    vehicle_id: UUID,
    data: VehicleUpdate,
    current_user: ClientUser,
    db: DbSession,
) -> Vehicle:
    vehicle = await _get_own_vehicle(db, vehicle_id, current_user.id)
    await _ensure_unbooked(db, vehicle)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(vehicle, field, value)
    await db.flush()
    return vehicle


@router.delete("/{vehicle_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_vehicle(vehicle_id: UUID, current_user: ClientUser, db: DbSession) -> None:
    vehicle = await _get_own_vehicle(db, vehicle_id, current_user.id)
    await _ensure_unbooked(db, vehicle)
    await db.delete(vehicle)
