from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from listings_hub.core.db import get_db
from listings_hub.schemas.notification import NotificationOut
from listings_hub.services import notifications
from listings_hub.services.auth import Actor, get_actor

router = APIRouter()


@router.get("/notifications", response_model=list[NotificationOut])
async def list_notifications(
    unread_only: bool = False,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> list[NotificationOut]:
    rows = await notifications.list_for_user(db, user_id=actor.user_id, unread_only=unread_only)
    return [NotificationOut.model_validate(r) for r in rows]


@router.post("/notifications/{notification_id}/read", response_model=NotificationOut)
async def mark_notification_read(
    notification_id: str,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> NotificationOut:
    row = await notifications.mark_read(db, user_id=actor.user_id, notification_id=notification_id)
    return NotificationOut.model_validate(row)
