import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from listings_hub.core.db import get_db
from listings_hub.core.errors import Internal, NotFound
from listings_hub.models.user import User
from listings_hub.schemas.me import MeOut
from listings_hub.services.auth import Actor, get_actor

log = logging.getLogger(__name__)
router = APIRouter()

@router.get("/me", response_model=MeOut)
async def me(actor: Actor = Depends(get_actor), db: AsyncSession = Depends(get_db)) -> MeOut:
    try:
        user = await db.get(User, actor.user_id)
    except SQLAlchemyError:
        log.exception("profile read failed: %s", actor.user_id)
        raise Internal("Failed to fetch profile")
    if not user:
        raise NotFound("User not found")
    return MeOut(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        phone=user.phone,
        user_type=user.user_type,
        permission_level=user.permission_level,
        is_moderator=actor.is_moderator,
    )
