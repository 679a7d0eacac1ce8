from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from listings_hub.core.errors import Internal, NotFound
from listings_hub.models.notification import Notification
from listings_hub.services.listing_status import ReviewDecision

log = logging.getLogger(__name__)


def review_message(*, decision: ReviewDecision, title: str | None, reason: str | None) -> str:
    label = f'"{title}"' if title else "(untitled)"
    if decision == ReviewDecision.APPROVED:
        return f"Your listing {label} has been approved and is now public."
    return f"Your listing {label} was rejected. Reason: {reason}"


def create_notification(
    db: AsyncSession,
    *,
    user_id: str,
    message: str,
    listing_id: str | None = None,
) -> Notification:
    """
    Queue one notification in the caller's transaction. The caller commits.
    """
    row = Notification(user_id=user_id, listing_id=listing_id, message=message, is_read=False)
    db.add(row)
    return row


async def list_for_user(db: AsyncSession, *, user_id: str, unread_only: bool = False) -> list[Notification]:
    stmt = (
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
    )
    if unread_only:
        stmt = stmt.where(Notification.is_read.is_(False))
    try:
        return list((await db.execute(stmt)).scalars().all())
    except SQLAlchemyError:
        log.exception("listing notifications failed")
        raise Internal("Failed to fetch notifications")


async def mark_read(db: AsyncSession, *, user_id: str, notification_id: str) -> Notification:
    stmt = select(Notification).where(
        Notification.id == notification_id,
        Notification.user_id == user_id,
    )
    try:
        row = (await db.execute(stmt)).scalar_one_or_none()
    except SQLAlchemyError:
        log.exception("notification lookup failed: %s", notification_id)
        raise Internal("Failed to mark notification as read")
    if not row:
        raise NotFound("Notification not found or does not belong to user")

    row.is_read = True
    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        log.exception("mark notification read failed")
        raise Internal("Failed to mark notification as read")
    return row
