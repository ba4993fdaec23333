"""Shared fixtures: a throwaway SQLite database and an API client bound to it."""

from collections.abc import AsyncGenerator
from dataclasses import dataclass
from datetime import date
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import washride.models  # noqa: F401
from washride.core.middleware import login_limiter, register_limiter
from washride.core.security import create_access_token, get_password_hash
from washride.database import Base, get_db
from washride.main import app
from washride.models.service import Service
from washride.models.user import User
from washride.models.vehicle import Vehicle

PASSWORD = "Secret123"
_password_hash: str | None = None


def password_hash() -> str:
    global _password_hash
    if _password_hash is None:
        _password_hash = get_password_hash(PASSWORD)
    return _password_hash


def auth_headers(user: User) -> dict[str, str]:
    token = create_access_token({"sub": str(user.id), "email": user.email, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'washride.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def no_rate_limit() -> None:
        return None

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[login_limiter] = no_rate_limit
    app.dependency_overrides[register_limiter] = no_rate_limit
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_factory):
    """Insert a user straight into the database."""
    counter = 0

    async def _make(role: str = "client", **overrides: Any) -> User:
        nonlocal counter
        counter += 1
        fields: dict[str, Any] = {
            "name": f"{role.title()} {counter}",
            "email": f"{role}{counter}@example.com",
            "phone": f"+26097000{counter:04d}",
            "nrc": f"{counter:06d}/10/1",
            "password_hash": password_hash(),
            "role": role,
            "approval_status": "approved",
            "is_active": True,
        }
        if role == "driver":
            fields.update(license_no=f"DL{counter}", license_type="B", license_expiry=date(2030, 1, 1))
        if role == "carwash":
            fields.update(car_wash_name=f"Sparkle {counter}", location="Cairo Road, Lusaka", washing_bays=3)
        if role == "admin":
            fields["admin_level"] = "admin"
        fields.update(overrides)
        async with session_factory() as session:
            user = User(**fields)
            session.add(user)
            await session.commit()
        return user

    return _make


@dataclass
class Parties:
    """Everyone involved in a typical booking."""

    client: User
    driver: User
    carwash: User
    admin: User
    vehicle: Vehicle
    service: Service

    def booking_payload(self, **overrides: Any) -> dict[str, Any]:
        payload = {
            "vehicle_id": str(self.vehicle.id),
            "car_wash_id": str(self.carwash.id),
            "service_id": str(self.service.id),
            "pickup_location": "Plot 12, Kabulonga, Lusaka",
        }
        payload.update(overrides)
        return payload


@pytest.fixture
async def parties(make_user, session_factory) -> Parties:
    client_user = await make_user("client")
    driver = await make_user("driver")
    carwash = await make_user("carwash")
    admin = await make_user("admin")
    async with session_factory() as session:
        vehicle = Vehicle(client_id=client_user.id, make="Toyota", model="Corolla", plate_no="ABC 1234", color="Silver")
        service = Service(car_wash_id=carwash.id, name="Full Valet", price=15000)
        session.add_all([vehicle, service])
        await session.commit()
    return Parties(client_user, driver, carwash, admin, vehicle, service)


@pytest.fixture
def create_booking(client, parties):
    async def _create(**overrides: Any) -> dict[str, Any]:
        response = await client.post(
            "/api/v1/bookings/",
            json=parties.booking_payload(**overrides),
            headers=auth_headers(parties.client),
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
def set_status(client):
    async def _set(booking_id: str, status: str, user: User, **extra: Any):
        return await client.put(
            f"/api/v1/bookings/{booking_id}/status",
            json={"status": status, **extra},
            headers=auth_headers(user),
        )

    return _set
