"""Notification endpoints."""

from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Query
from sqlalchemy import func, select, update

from washride.api.deps import CurrentUser, DbSession
from washride.api.v1.pagination import paginate
from washride.core.exceptions import NotFoundError
from washride.database import utcnow
from washride.models.notification import Notification
from washride.schemas.notification import NotificationListResponse, NotificationResponse

router = APIRouter()


@router.get("/", response_model=NotificationListResponse)
async def get_notifications(
    current_user: CurrentUser,
    db: DbSession,
    filter: Literal["all", "unread", "read"] = Query(default="all"),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
) -> NotificationListResponse:
    """Get user's notifications."""
    query = select(Notification).where(Notification.user_id == current_user.id)

    if filter == "unread":
        query = query.where(Notification.is_read.is_(False))
    elif filter == "read":
        query = query.where(Notification.is_read.is_(True))

    unread_result = await db.execute(
        select(func.count()).where(
            Notification.user_id == current_user.id,
            Notification.is_read.is_(False),
        )
    )
    unread_count = unread_result.scalar() or 0

    notifications, total = await paginate(
        db, query.order_by(Notification.created_at.desc()), page, page_size
    )

    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
        total=total,
        unread_count=unread_count,
        page=page,
        page_size=page_size,
    )


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: UUID,
    current_user: CurrentUser,
    db: DbSession,
) -> Notification:
    """Mark a notification as read."""
    result = await db.execute(
        select(Notification).where(
            Notification.id == notification_id,
            Notification.user_id == current_user.id,
        )
    )
    notification = result.scalar_one_or_none()
    if not notification:
        raise NotFoundError("Notification", str(notification_id))

    if not notification.is_read:
        notification.is_read = True
        notification.read_at = utcnow()
        await db.flush()
    return notification


@router.post("/read-all", status_code=204)
async def mark_all_read(current_user: CurrentUser, db: DbSession) -> None:
    """Mark all notifications as read."""
    await db.execute(
        update(Notification)
        .where(
            Notification.user_id == current_user.id,
            Notification.is_read.is_(False),
        )
        .values(is_read=True, read_at=utcnow())
    )
