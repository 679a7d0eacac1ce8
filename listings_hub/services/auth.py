import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from fastapi import Depends, Security
from fastapi.security.api_key import APIKeyHeader
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from listings_hub.core.db import get_db
from listings_hub.core.errors import Forbidden, Internal, Unauthorized
from listings_hub.core.security import hash_session_token
from listings_hub.models.user_session import UserSession
from listings_hub.services.listing_status import is_moderator

log = logging.getLogger(__name__)

session_token_header = APIKeyHeader(name="X-Session-Token", auto_error=False)


@dataclass(frozen=True)
class Actor:
    user_id: str
    permission_level: int

    @property
    def is_moderator(self) -> bool:
        return is_moderator(self.permission_level)


def _is_expired(expires_at: datetime | None) -> bool:
    if expires_at is None:
        return False
    if expires_at.tzinfo is None:
        # sqlite hands back naive values; they are stored as UTC
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at <= datetime.now(timezone.utc)


async def _resolve_actor(db: AsyncSession, token: str) -> Actor | None:
    stmt = select(UserSession).where(
        UserSession.token_hash == hash_session_token(token),
        UserSession.is_active.is_(True),
    )
    try:
        row = (await db.execute(stmt)).scalar_one_or_none()
    except SQLAlchemyError:
        log.exception("session lookup failed")
        raise Internal("Failed to resolve session")
    if not row or _is_expired(row.expires_at) or not row.user.is_active:
        return None
    return Actor(user_id=row.user_id, permission_level=row.user.permission_level)


async def get_actor(
    token: str | None = Security(session_token_header),
    db: AsyncSession = Depends(get_db),
) -> Actor:
    if not token:
        raise Unauthorized("Missing X-Session-Token")

    actor = await _resolve_actor(db, token)
    if actor is None:
        raise Unauthorized("Invalid or expired session")
    return actor


async def get_optional_actor(
    token: str | None = Security(session_token_header),
    db: AsyncSession = Depends(get_db),
) -> Actor | None:
    # Public routes: a bad token is treated like no token
    if not token:
        return None
    return await _resolve_actor(db, token)


def ensure_moderator(actor: Actor | None) -> Actor:
    if actor is None:
        raise Unauthorized()
    if not actor.is_moderator:
        raise Forbidden("Insufficient permissions")
    return actor


def require_moderator(actor: Actor = Depends(get_actor)) -> Actor:
    return ensure_moderator(actor)
