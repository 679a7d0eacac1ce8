import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from listings_hub.core.db import get_db
from listings_hub.core.errors import Internal
from listings_hub.models.geo import Municipality, State
from listings_hub.schemas.geo import MunicipalityOut, StateOut

log = logging.getLogger(__name__)
router = APIRouter()


@router.get("/states", response_model=list[StateOut])
async def list_states(db: AsyncSession = Depends(get_db)) -> list[StateOut]:
    try:
        rows = (await db.execute(select(State).order_by(State.id))).scalars().all()
    except SQLAlchemyError:
        log.exception("states query failed")
        raise Internal("Failed to fetch states")
    return [StateOut(id=r.id, name=r.name) for r in rows]


@router.get("/states/{state_id}/municipalities", response_model=list[MunicipalityOut])
async def list_municipalities(state_id: int, db: AsyncSession = Depends(get_db)) -> list[MunicipalityOut]:
    stmt = select(Municipality).where(Municipality.state_id == state_id).order_by(Municipality.id)
    try:
        rows = (await db.execute(stmt)).scalars().all()
    except SQLAlchemyError:
        log.exception("municipalities query failed: %s", state_id)
        raise Internal("Failed to fetch municipalities")
    return [MunicipalityOut(id=r.id, state_id=r.state_id, name=r.name) for r in rows]
