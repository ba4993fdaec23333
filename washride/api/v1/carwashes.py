"""Car wash provider endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status
from sqlalchemy import func, select

from washride.api.deps import CarWashUser, DbSession
from washride.api.v1.pagination import paginate
from washride.config import settings
from washride.core.exceptions import ConflictError, NotFoundError
from washride.domain.booking_state import BookingStatus
from washride.models.booking import Booking
from washride.models.service import Service
from washride.models.user import User
from washride.schemas.booking import BookingListResponse, BookingResponse
from washride.schemas.service import (
    CarWashDashboard,
    CarWashResponse,
    ServiceCreate,
    ServiceResponse,
    ServiceUpdate,
)

router = APIRouter()

IN_PROGRESS_STATUSES = (
    BookingStatus.ACCEPTED.value,
    BookingStatus.PICKED_UP.value,
    BookingStatus.AT_WASH.value,
    BookingStatus.WAITING_BAY.value,
    BookingStatus.WASHING_BAY.value,
    BookingStatus.DRYING_BAY.value,
    BookingStatus.WASH_COMPLETED.value,
    BookingStatus.DELIVERED.value,
)


@router.get("/", response_model=list[CarWashResponse])
async def list_car_washes(
    db: DbSession,
    include_services: bool = Query(default=False),
) -> list[CarWashResponse]:
    """List active, approved car washes."""
    result = await db.execute(
        select(User)
        .where(
            User.role == "carwash",
            User.is_active.is_(True),
            User.is_suspended.is_(False),
            User.approval_status == "approved",
        )
        .order_by(User.car_wash_name)
    )
    car_washes = result.scalars().all()

    services_by_wash: dict[UUID, list[ServiceResponse]] = {}
    if include_services and car_washes:
        service_result = await db.execute(
            select(Service)
            .where(
                Service.car_wash_id.in_([cw.id for cw in car_washes]),
                Service.is_active.is_(True),
            )
            .order_by(Service.price)
        )
        for service in service_result.scalars():
            services_by_wash.setdefault(service.car_wash_id, []).append(
                ServiceResponse.model_validate(service)
            )

    return [
        CarWashResponse(
            id=cw.id,
            name=cw.name,
            phone=cw.phone,
            car_wash_name=cw.car_wash_name,
            location=cw.location,
            washing_bays=cw.washing_bays,
            services=services_by_wash.get(cw.id, []),
        )
        for cw in car_washes
    ]


@router.get("/services", response_model=list[ServiceResponse])
async def list_services(
    db: DbSession,
    car_wash_id: UUID | None = Query(default=None),
) -> list[Service]:
    """List active services, optionally for one car wash."""
    query = select(Service).where(Service.is_active.is_(True))
    if car_wash_id:
        query = query.where(Service.car_wash_id == car_wash_id)
    result = await db.execute(query.order_by(Service.price))
    return list(result.scalars().all())


@router.get("/bookings", response_model=BookingListResponse)
async def list_car_wash_bookings(
    current_user: CarWashUser,
    db: DbSession,
    status_filter: BookingStatus | None = Query(default=None, alias="status"),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
) -> BookingListResponse:
    """Bookings made at the current car wash."""
    query = select(Booking).where(Booking.car_wash_id == current_user.id)
    if status_filter:
        query = query.where(Booking.status == status_filter.value)

    bookings, total = await paginate(db, query.order_by(Booking.created_at.desc()), page, page_size)
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in bookings],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/dashboard", response_model=CarWashDashboard)
async def car_wash_dashboard(current_user: CarWashUser, db: DbSession) -> CarWashDashboard:
    """Booking counts by phase and paid revenue."""
    result = await db.execute(
        select(Booking.status, func.count())
        .where(Booking.car_wash_id == current_user.id)
        .group_by(Booking.status)
    )
    counts = dict(result.all())

    revenue_result = await db.execute(
        select(func.coalesce(func.sum(Booking.total_amount), 0)).where(
            Booking.car_wash_id == current_user.id,
            Booking.payment_status == "paid",
        )
    )

    return CarWashDashboard(
        total_bookings=sum(counts.values()),
        pending=counts.get(BookingStatus.PENDING.value, 0),
        in_progress=sum(counts.get(s, 0) for s in IN_PROGRESS_STATUSES),
        completed=counts.get(BookingStatus.COMPLETED.value, 0),
        cancelled=counts.get(BookingStatus.CANCELLED.value, 0)
        + counts.get(BookingStatus.DECLINED.value, 0),
        revenue=revenue_result.scalar_one(),
        currency=settings.currency,
    )


@router.post("/services", response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
async def create_service(data: ServiceCreate, current_user: CarWashUser, db: DbSession) -> Service:
    """Add a service to the current car wash's catalogue."""
    result = await db.execute(
        select(func.count()).select_from(Service).where(Service.car_wash_id == current_user.id)
    )
    if result.scalar_one() >= settings.max_services_per_car_wash:
        raise ConflictError(
            f"A car wash can offer at most {settings.max_services_per_car_wash} services"
        )

    service = Service(car_wash_id=current_user.id, **data.model_dump())
    db.add(service)
    await db.flush()
    return service


@router.put("/services/{service_id}", response_model=ServiceResponse)
async def update_service(
    service_id: UUID,
    data: ServiceUpdate,
    current_user: CarWashUser,
    db: DbSession,
) -> Service:
    result = await db.execute(
        select(Service).where(Service.id == service_id, Service.car_wash_id == current_user.id)
    )
    service = result.scalar_one_or_none()
    if not service:
        raise NotFoundError("Service", str(service_id))

    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(service, field, value)
    await db.flush()
    return service
