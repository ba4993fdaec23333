#!/usr/bin/env python3
"""Create (or reset) a super admin with a properly hashed password."""

import argparse
import asyncio

from sqlalchemy import select

from washride.core.permissions import AdminLevel, UserRole
from washride.core.security import get_password_hash
from washride.database import get_db_context
from washride.domain.approval_state import ApprovalStatus
from washride.models.user import User


async def create_admin(
    email: str,
    password: str,
    name: str,
    phone: str,
    nrc: str,
) -> None:
    """Create a super admin, or restore an existing account to one."""
    email = email.lower()
    async with get_db_context() as session:
        result = await session.execute(select(User).where(User.email == email))
        admin = result.scalar_one_or_none()

        if admin is None:
            admin = User(email=email, name=name, phone=phone, nrc=nrc, password_hash="")
            session.add(admin)
            action = "Created"
        else:
            action = "Updated existing"

        admin.password_hash = get_password_hash(password)
        admin.role = UserRole.ADMIN.value
        admin.admin_level = AdminLevel.SUPER_ADMIN.value
        admin.approval_status = ApprovalStatus.APPROVED.value
        admin.is_active = True
        admin.is_suspended = False

    print(f"{action} super admin: {email}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create a super admin user")
    parser.add_argument("--email", default="admin@washride.co.zm", help="Admin email")
    parser.add_argument("--password", required=True, help="Admin password")
    parser.add_argument("--name", default="WashRide Admin", help="Display name")
    parser.add_argument("--phone", default="+260970000000", help="Phone number")
    parser.add_argument("--nrc", default="000000/00/1", help="National registration card number")

    args = parser.parse_args()

    asyncio.run(
        create_admin(
            email=args.email,
            password=args.password,
            name=args.name,
            phone=args.phone,
            nrc=args.nrc,
        )
    )
