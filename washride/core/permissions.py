"""Role-based access control and permissions."""

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from washride.models.user import User


class UserRole(str, Enum):
    """User roles in the system."""

    CLIENT = "client"
    DRIVER = "driver"
    CARWASH = "carwash"
    ADMIN = "admin"
    SUBADMIN = "subadmin"


class AdminLevel(str, Enum):
    """Tiers among admin users.

    - super_admin: full access, can manage other admins
    - admin: can manage users, bookings, drivers and car washes, not other admins
    - support: read-only
    """

    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    SUPPORT = "support"


ADMIN_LEVEL_RANK: dict[AdminLevel, int] = {
    AdminLevel.SUPER_ADMIN: 3,
    AdminLevel.ADMIN: 2,
    AdminLevel.SUPPORT: 1,
}

STAFF_ROLES = frozenset({UserRole.ADMIN.value, UserRole.SUBADMIN.value})
SELF_SERVICE_ROLES = frozenset({UserRole.CLIENT.value, UserRole.DRIVER.value, UserRole.CARWASH.value})


def admin_level_of(user: "User") -> AdminLevel | None:
    """Effective admin level; admins without an explicit level count as ``admin``."""
    if user.role != UserRole.ADMIN.value:
        return None
    return AdminLevel(user.admin_level or AdminLevel.ADMIN.value)


def has_admin_level(user: "User", required: AdminLevel) -> bool:
    level = admin_level_of(user)
    if level is None:
        return False
    return ADMIN_LEVEL_RANK[level] >= ADMIN_LEVEL_RANK[required]


def can_modify_user(current: "User", target: "User") -> bool:
    """Whether ``current`` may edit, suspend or deactivate ``target``."""
    level = admin_level_of(current)
    if level is AdminLevel.SUPER_ADMIN:
        return True
    if level is AdminLevel.ADMIN:
        return target.role not in STAFF_ROLES
    return False


def can_change_role(current: "User", new_role: str) -> bool:
    """Only super admins may move users into or out of staff roles."""
    level = admin_level_of(current)
    if level is AdminLevel.SUPER_ADMIN:
        return True
    if level is AdminLevel.ADMIN:
        return new_role not in STAFF_ROLES
    return False


def creation_requires_approval(creator: "User") -> bool:
    """Accounts created by full admins are approved immediately."""
    return not has_admin_level(creator, AdminLevel.ADMIN)
