"""Core utilities and security modules."""

from washride.core.exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    BadRequestError,
    ConcurrentUpdateError,
    ConflictError,
    InvalidStatusTransition,
    NotFoundError,
)
from washride.core.security import (
    create_access_token,
    create_refresh_token,
    get_password_hash,
    verify_password,
    verify_token,
)

__all__ = [
    "AppException",
    "AuthenticationError",
    "AuthorizationError",
    "BadRequestError",
    "ConcurrentUpdateError",
    "ConflictError",
    "InvalidStatusTransition",
    "NotFoundError",
    "create_access_token",
    "create_refresh_token",
    "get_password_hash",
    "verify_password",
    "verify_token",
]
