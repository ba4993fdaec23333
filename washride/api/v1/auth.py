"""Authentication endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import select

from washride.api.deps import CurrentUser, DbSession, get_user_or_404
from washride.core.exceptions import AuthenticationError, NotFoundError
from washride.core.middleware import login_limiter, register_limiter
from washride.core.security import REFRESH, create_tokens, verify_password, verify_token
from washride.database import utcnow
from washride.domain.approval_state import ApprovalStatus
from washride.models.user import User
from washride.schemas.user import (
    RefreshTokenRequest,
    TokenResponse,
    UserCreate,
    UserLogin,
    UserResponse,
    UserUpdate,
)
from washride.services.user_service import user_service

router = APIRouter()
logger = logging.getLogger(__name__)


def _token_response(user: User) -> TokenResponse:
    tokens = create_tokens(str(user.id), user.email, user.role)
    return TokenResponse(**tokens, user=UserResponse.model_validate(user))


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(register_limiter)],
)
async def register(user_data: UserCreate, db: DbSession) -> TokenResponse:
    """Register a client, driver or car wash account."""
    user = await user_service.register(db, user_data)
    return _token_response(user)


@router.post("/login", response_model=TokenResponse, dependencies=[Depends(login_limiter)])
async def login(credentials: UserLogin, db: DbSession) -> TokenResponse:
    """Login with email and password."""
    result = await db.execute(select(User).where(User.email == credentials.email.lower()))
    user = result.scalar_one_or_none()

    if not user or not verify_password(credentials.password, user.password_hash):
        logger.info("Failed login for %s", credentials.email)
        raise AuthenticationError("Invalid email or password")

    if user.approval_status == ApprovalStatus.PENDING.value:
        raise AuthenticationError("Account is pending approval")
    if user.approval_status == ApprovalStatus.REJECTED.value:
        raise AuthenticationError("Account registration was rejected")
    if user.is_suspended:
        raise AuthenticationError("Account is suspended")
    if not user.is_active:
        raise AuthenticationError("Account is deactivated")

    user.last_login_at = utcnow()
    return _token_response(user)


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(request: RefreshTokenRequest, db: DbSession) -> TokenResponse:
    """Refresh access token using refresh token."""
    payload = verify_token(request.refresh_token, token_type=REFRESH)
    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Invalid token")

    try:
        user = await get_user_or_404(db, UUID(user_id))
    except (ValueError, NotFoundError):
        raise AuthenticationError("User not found or inactive")

    if not user.can_sign_in:
        raise AuthenticationError("User not found or inactive")

    return _token_response(user)


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: CurrentUser) -> User:
    """Get the current user's profile."""
    return current_user


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    update: UserUpdate,
    current_user: CurrentUser,
    db: DbSession,
) -> User:
    """Update the current user's own profile."""
    for field, value in update.model_dump(exclude_unset=True).items():
        setattr(current_user, field, value)
    await db.flush()
    return current_user
