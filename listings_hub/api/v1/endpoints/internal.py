import logging
from datetime import timedelta

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from listings_hub.core.db import get_db
from listings_hub.core.errors import BadRequest, NotFound
from listings_hub.core.security import generate_session_token
from listings_hub.models.base import utcnow
from listings_hub.models.geo import Municipality, State
from listings_hub.models.user import User
from listings_hub.models.user_session import UserSession
from listings_hub.schemas.geo import GeoImport, GeoImportOut
from listings_hub.schemas.user import SessionCreate, SessionCreated, UserOut, UserUpsert
from listings_hub.services.internal_admin import require_internal_admin

log = logging.getLogger(__name__)
router = APIRouter(dependencies=[Depends(require_internal_admin)])


@router.post("/internal/users", response_model=UserOut)
async def upsert_user(payload: UserUpsert, db: AsyncSession = Depends(get_db)) -> UserOut:
    """
    Mirror a user from the identity provider. Existing rows are overwritten.
    """
    user = await db.get(User, payload.id) if payload.id else None
    fields = payload.model_dump(exclude={"id"})
    if user:
        for key, value in fields.items():
            setattr(user, key, value)
    else:
        user = User(**({"id": payload.id} if payload.id else {}), **fields)
        db.add(user)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        log.exception("user upsert failed: integrity error")
        raise BadRequest("Constraint violation")

    return UserOut(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        phone=user.phone,
        user_type=user.user_type,
        permission_level=user.permission_level,
        is_active=user.is_active,
    )


@router.post("/internal/users/{user_id}/sessions", response_model=SessionCreated)
async def issue_session(
    user_id: str,
    payload: SessionCreate | None = None,
    db: AsyncSession = Depends(get_db),
) -> SessionCreated:
    user = await db.get(User, user_id)
    if not user:
        raise NotFound("User not found")

    ttl = payload.ttl_minutes if payload else None
    token = generate_session_token()
    row = UserSession(
        user_id=user_id,
        token_prefix=token.prefix,
        token_hash=token.hashed,
        is_active=True,
        expires_at=utcnow() + timedelta(minutes=ttl) if ttl else None,
    )
    db.add(row)
    await db.commit()

    return SessionCreated(
        id=row.id,
        user_id=user_id,
        plain_token=token.plain,
        token_prefix=token.prefix,
        expires_at=row.expires_at,
    )


@router.post("/internal/geo", response_model=GeoImportOut)
async def import_geo(payload: GeoImport, db: AsyncSession = Depends(get_db)) -> GeoImportOut:
    state_ids = {s.id for s in payload.states}
    existing = set((await db.execute(select(State.id))).scalars().all())
    for m in payload.municipalities:
        if m.state_id not in state_ids and m.state_id not in existing:
            raise BadRequest(f"Unknown state_id {m.state_id} for municipality {m.id}")

    for s in payload.states:
        await db.merge(State(id=s.id, name=s.name))
    await db.flush()
    for m in payload.municipalities:
        await db.merge(Municipality(id=m.id, state_id=m.state_id, name=m.name))

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        log.exception("geo import failed")
        raise BadRequest("Constraint violation")

    return GeoImportOut(states=len(payload.states), municipalities=len(payload.municipalities))
