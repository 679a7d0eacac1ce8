from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncSession

from listings_hub.core.config import settings
from listings_hub.core.db import get_db
from listings_hub.core.errors import Forbidden
from listings_hub.models.listing import Listing
from listings_hub.schemas.common import IdResponse, PaginationOut
from listings_hub.schemas.geo import MunicipalityOut, StateOut
from listings_hub.schemas.listing import ListingCreate, ListingDeleted, ListingOut, ListingPage, ListingPatch
from listings_hub.services import lifecycle
from listings_hub.services.auth import Actor, get_actor, get_optional_actor
from listings_hub.services.lifecycle import SearchFilters
from listings_hub.services.listing_status import ListingStatus, parse_status
from listings_hub.services.pagination import page_meta, page_params
from listings_hub.services.storage import LocalObjectStore, get_object_store

router = APIRouter()


def listing_out(r: Listing) -> dict:
    unloaded = inspect(r).unloaded
    state = r.state if "state" not in unloaded else None
    municipality = r.municipality if "municipality" not in unloaded else None
    return dict(
        id=r.id,
        user_id=r.user_id,
        status=r.status,
        title=r.title,
        property_type=r.property_type,
        address=r.address,
        state_id=r.state_id,
        municipality_id=r.municipality_id,
        state=StateOut(id=state.id, name=state.name) if state else None,
        municipality=(
            MunicipalityOut(id=municipality.id, state_id=municipality.state_id, name=municipality.name)
            if municipality else None
        ),
        images=list(r.images or []),
        video=r.video,
        operation_type=r.operation_type,
        seller_price=r.seller_price,
        is_negotiable=r.is_negotiable,
        highest_bidding_price=r.highest_bidding_price,
        payment_type=r.payment_type,
        neighborhood_description=r.neighborhood_description,
        documents_type=r.documents_type,
        rooms=r.rooms,
        stories=r.stories,
        total_area=r.total_area,
        specifications=dict(r.specifications or {}),
        notes=r.notes,
        communication_preferences=dict(r.communication_preferences or {}),
        view_count=r.view_count,
        created_at=r.created_at,
        updated_at=r.updated_at,
    )


@router.post("/listings", response_model=IdResponse, status_code=201)
async def create_listing(
    payload: ListingCreate | None = Body(default=None),
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> IdResponse:
    owner_id = (payload.user_id if payload else None) or actor.user_id
    listing = await lifecycle.create_draft(db, owner_id=owner_id, caller_id=actor.user_id)
    return IdResponse(id=listing.id)


@router.get("/listings", response_model=ListingPage)
async def search_listings(
    page: int | None = Query(default=None),
    limit: int | None = Query(default=None),
    property_type: int | None = None,
    operation_type: int | None = None,
    state_id: int | None = None,
    municipality_id: int | None = None,
    min_price: float | None = None,
    max_price: float | None = None,
    min_rooms: int | None = None,
    min_stories: int | None = None,
    min_area: float | None = None,
    max_area: float | None = None,
    query: str | None = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
    db: AsyncSession = Depends(get_db),
) -> ListingPage:
    params = page_params(page, limit, default_limit=settings.search_page_limit)
    filters = SearchFilters(
        property_type=property_type,
        operation_type=operation_type,
        state_id=state_id,
        municipality_id=municipality_id,
        min_price=min_price,
        max_price=max_price,
        min_rooms=min_rooms,
        min_stories=min_stories,
        min_area=min_area,
        max_area=max_area,
        query=query,
    )
    sort = lifecycle.parse_sort(sort_by, sort_order)

    rows, total = await lifecycle.search(db, filters=filters, params=params, sort=sort)
    return ListingPage(
        data=[ListingOut(**listing_out(r)) for r in rows],
        pagination=PaginationOut(**page_meta(total, params)),
    )


@router.get("/listings/{listing_id}", response_model=ListingOut)
async def get_listing(listing_id: str, db: AsyncSession = Depends(get_db)) -> ListingOut:
    listing = await lifecycle.fetch_public(db, listing_id=listing_id)
    return ListingOut(**listing_out(listing))


@router.patch("/listings/{listing_id}", response_model=ListingOut)
async def update_listing(
    listing_id: str,
    payload: ListingPatch,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> ListingOut:
    listing = await lifecycle.update_draft(
        db,
        listing_id=listing_id,
        caller_id=actor.user_id,
        patch=payload.model_dump(exclude_unset=True),
    )
    return ListingOut(**listing_out(listing))


@router.post("/listings/{listing_id}/submit", response_model=ListingOut)
async def submit_listing(
    listing_id: str,
    payload: ListingPatch | None = Body(default=None),
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> ListingOut:
    listing = await lifecycle.submit_for_review(
        db,
        listing_id=listing_id,
        caller_id=actor.user_id,
        patch=payload.model_dump(exclude_unset=True) if payload else None,
    )
    return ListingOut(**listing_out(listing))


@router.delete("/listings/{listing_id}", response_model=ListingDeleted)
async def delete_listing(
    listing_id: str,
    actor: Actor = Depends(get_actor),
    store: LocalObjectStore = Depends(get_object_store),
    db: AsyncSession = Depends(get_db),
) -> ListingDeleted:
    failed = await lifecycle.delete_listing(db, store=store, listing_id=listing_id, caller_id=actor.user_id)
    return ListingDeleted(listing_id=listing_id, media_failed=failed)


@router.get("/users/{user_id}/listings", response_model=ListingPage)
async def list_user_listings(
    user_id: str,
    status: str | None = None,
    page: int | None = Query(default=None),
    limit: int | None = Query(default=None),
    actor: Actor | None = Depends(get_optional_actor),
    db: AsyncSession = Depends(get_db),
) -> ListingPage:
    params = page_params(page, limit)

    # Only the owner (or a moderator) sees drafts, pending and rejected listings
    privileged = actor is not None and (actor.user_id == user_id or actor.is_moderator)
    if not privileged:
        if status is not None and parse_status(status) != ListingStatus.APPROVED:
            raise Forbidden("Only approved listings of other users are visible")
        status = int(ListingStatus.APPROVED)

    rows, total = await lifecycle.list_by_owner(db, owner_id=user_id, params=params, status=status)
    return ListingPage(
        data=[ListingOut(**listing_out(r)) for r in rows],
        pagination=PaginationOut(**page_meta(total, params)),
    )
