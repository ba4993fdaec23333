"""API dependencies for authentication and common operations."""

from dataclasses import dataclass
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from washride.core.exceptions import AuthenticationError, AuthorizationError, NotFoundError
from washride.core.permissions import STAFF_ROLES, AdminLevel, UserRole, has_admin_level
from washride.core.security import ACCESS, verify_token
from washride.database import get_db
from washride.models.booking import Booking
from washride.models.user import User

# Security scheme
security = HTTPBearer()

DbSession = Annotated[AsyncSession, Depends(get_db)]


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: DbSession,
) -> User:
    """Get the current authenticated user from JWT token."""
    payload = verify_token(credentials.credentials, token_type=ACCESS)
    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Invalid token payload")
    try:
        user_uuid = UUID(user_id)
    except ValueError:
        raise AuthenticationError("Invalid token payload")

    result = await db.execute(select(User).where(User.id == user_uuid))
    user = result.scalar_one_or_none()

    if not user:
        raise AuthenticationError("User not found")
    if not user.is_active:
        raise AuthenticationError("User account is deactivated")

    return user


async def get_current_active_user(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Get current user and verify they are active and not suspended."""
    if current_user.is_suspended:
        raise AuthorizationError("User account is suspended")
    return current_user


CurrentUser = Annotated[User, Depends(get_current_active_user)]


def require_roles(*roles: UserRole):
    """Dependency factory restricting a route to the given roles."""
    allowed = frozenset(role.value for role in roles)

    async def checker(current_user: CurrentUser) -> User:
        if current_user.role not in allowed:
            names = ", ".join(sorted(allowed))
            raise AuthorizationError(f"This action requires one of the roles: {names}")
        return current_user

    return checker


async def get_current_staff(current_user: CurrentUser) -> User:
    """Admins and sub-admins."""
    if current_user.role not in STAFF_ROLES:
        raise AuthorizationError("Admin access required")
    return current_user


async def get_current_admin(
    current_user: Annotated[User, Depends(get_current_staff)],
) -> User:
    """Admins of level ``admin`` or ``super_admin``."""
    if not has_admin_level(current_user, AdminLevel.ADMIN):
        raise AuthorizationError("Admin level access required")
    return current_user


ClientUser = Annotated[User, Depends(require_roles(UserRole.CLIENT))]
DriverUser = Annotated[User, Depends(require_roles(UserRole.DRIVER))]
CarWashUser = Annotated[User, Depends(require_roles(UserRole.CARWASH))]
StaffUser = Annotated[User, Depends(get_current_staff)]
AdminUser = Annotated[User, Depends(get_current_admin)]


@dataclass(frozen=True)
class RequestContext:
    """Who is calling and from where, passed explicitly into services."""

    user: User
    role: UserRole
    ip_address: str | None
    user_agent: str | None

    @property
    def is_staff(self) -> bool:
        return self.role.value in STAFF_ROLES


def _client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


async def get_request_context(request: Request, current_user: CurrentUser) -> RequestContext:
    return RequestContext(
        user=current_user,
        role=UserRole(current_user.role),
        ip_address=_client_ip(request),
        user_agent=request.headers.get("User-Agent"),
    )


Context = Annotated[RequestContext, Depends(get_request_context)]


async def get_booking_or_404(db: AsyncSession, booking_id: UUID) -> Booking:
    result = await db.execute(select(Booking).where(Booking.id == booking_id))
    booking = result.scalar_one_or_none()
    if not booking:
        raise NotFoundError("Booking", str(booking_id))
    return booking


async def get_user_or_404(db: AsyncSession, user_id: UUID) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise NotFoundError("User", str(user_id))
    return user
