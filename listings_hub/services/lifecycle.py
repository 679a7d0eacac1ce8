from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from listings_hub.core.errors import BadRequest, Forbidden, Internal, NotFound
from listings_hub.models.base import utcnow
from listings_hub.models.listing import Listing
from listings_hub.models.listing_review import ListingReview
from listings_hub.models.notification import Notification
from listings_hub.services.audit import audit
from listings_hub.services.listing_status import ListingStatus, can_transition, parse_status
from listings_hub.services.pagination import PageParams
from listings_hub.services.storage import LocalObjectStore, purge_media

log = logging.getLogger(__name__)

DRAFT_ONLY_MSG = "Only listings in draft status can be updated"
NOT_OWNER_MSG = "You do not have permission to modify this listing"

# Content columns an owner may patch while the listing is a draft
EDITABLE_FIELDS = frozenset({
    "title",
    "property_type",
    "address",
    "state_id",
    "municipality_id",
    "images",
    "video",
    "operation_type",
    "seller_price",
    "is_negotiable",
    "highest_bidding_price",
    "payment_type",
    "neighborhood_description",
    "documents_type",
    "rooms",
    "stories",
    "total_area",
    "specifications",
    "notes",
    "communication_preferences",
})

# Silently dropped from patches: identity is never caller-controlled
_STRIPPED_FIELDS = frozenset({"id", "user_id"})

SORT_FIELDS = {
    "created_at": Listing.created_at,
    "updated_at": Listing.updated_at,
    "seller_price": Listing.seller_price,
    "total_area": Listing.total_area,
    "rooms": Listing.rooms,
    "view_count": Listing.view_count,
    "title": Listing.title,
}


@dataclass(frozen=True)
class SearchFilters:
    property_type: int | None = None
    operation_type: int | None = None
    state_id: int | None = None
    municipality_id: int | None = None
    min_price: float | None = None
    max_price: float | None = None
    min_rooms: int | None = None
    min_stories: int | None = None
    min_area: float | None = None
    max_area: float | None = None
    query: str | None = None


@dataclass(frozen=True)
class SortSpec:
    field: str = "created_at"
    descending: bool = True


SORT_ORDERS = {"asc": False, "desc": True}


def parse_sort(field: str, order: str) -> SortSpec:
    key = (order or "").strip().lower()
    if key not in SORT_ORDERS:
        raise BadRequest(f"Unsupported sort order: {order}")
    return SortSpec(field=field, descending=SORT_ORDERS[key])


async def _load_listing(db: AsyncSession, listing_id: str, *, with_location: bool = False) -> Listing | None:
    stmt = select(Listing).where(Listing.id == listing_id).execution_options(populate_existing=True)
    if with_location:
        stmt = stmt.options(selectinload(Listing.state), selectinload(Listing.municipality))
    return (await db.execute(stmt)).scalar_one_or_none()


async def get_listing_or_404(db: AsyncSession, listing_id: str, *, with_location: bool = False) -> Listing:
    try:
        listing = await _load_listing(db, listing_id, with_location=with_location)
    except SQLAlchemyError:
        log.exception("listing read failed: %s", listing_id)
        raise Internal("Failed to fetch listing")
    if not listing:
        raise NotFound("Listing not found")
    return listing


def _ensure_draft(listing: Listing) -> None:
    if listing.status != ListingStatus.DRAFT:
        raise Forbidden(DRAFT_ONLY_MSG)


def _ensure_owner(listing: Listing, caller_id: str) -> None:
    if listing.user_id != caller_id:
        raise Forbidden(NOT_OWNER_MSG)


def _clean_patch(patch: dict[str, Any]) -> tuple[dict[str, Any], ListingStatus]:
    values = {k: v for k, v in patch.items() if k not in _STRIPPED_FIELDS}

    target = ListingStatus.DRAFT
    if "status" in values:
        raw = values.pop("status")
        if raw is not None:
            target = parse_status(raw)

    unknown = sorted(set(values) - EDITABLE_FIELDS)
    if unknown:
        raise BadRequest(f"Fields not editable: {', '.join(unknown)}")

    if not can_transition(ListingStatus.DRAFT, target):
        raise BadRequest("A draft can only stay a draft or be submitted for review")
    return values, target


async def create_draft(db: AsyncSession, *, owner_id: str, caller_id: str | None = None) -> Listing:
    """
    Insert an empty draft. owner_id may differ from the caller; it is trusted as-is.
    """
    listing = Listing(user_id=owner_id, status=int(ListingStatus.DRAFT))
    try:
        db.add(listing)
        await db.flush()
        await audit(
            db,
            actor_user_id=caller_id or owner_id,
            action="listing.created",
            target_type="listing",
            target_id=listing.id,
        )
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        log.exception("create draft failed")
        raise Internal("Failed to create listing")

    log.info("listing %s created as draft for %s", listing.id, owner_id)
    return listing


async def _write_from_draft(
    db: AsyncSession,
    *,
    listing: Listing,
    caller_id: str,
    values: dict[str, Any],
    target: ListingStatus,
) -> Listing:
    listing_id = listing.id
    # Conditional write: the store re-checks draft status and ownership atomically.
    stmt = (
        update(Listing)
        .where(
            Listing.id == listing_id,
            Listing.user_id == caller_id,
            Listing.status == int(ListingStatus.DRAFT),
        )
        .values(**values, user_id=caller_id, status=int(target), updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    action = "listing.submitted" if target == ListingStatus.PENDING_REVIEW else "listing.updated"

    try:
        result = await db.execute(stmt)
        if result.rowcount == 0:
            await db.rollback()
            raise Forbidden(DRAFT_ONLY_MSG)

        await audit(
            db,
            actor_user_id=caller_id,
            action=action,
            target_type="listing",
            target_id=listing_id,
            detail={"fields": sorted(values), "status": int(target)},
        )
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        log.exception("listing write failed: %s", listing_id)
        raise Internal("Failed to update listing")

    if target == ListingStatus.PENDING_REVIEW:
        log.info("listing %s submitted for review", listing_id)
    return await get_listing_or_404(db, listing_id, with_location=True)


async def update_draft(
    db: AsyncSession,
    *,
    listing_id: str,
    caller_id: str,
    patch: dict[str, Any],
) -> Listing:
    """
    Merge patch over a draft owned by caller.

    Guards run in a fixed order: existence, draft status, ownership.
    A patch carrying status=pending_review is a submission.
    """
    listing = await get_listing_or_404(db, listing_id)
    _ensure_draft(listing)
    _ensure_owner(listing, caller_id)

    values, target = _clean_patch(patch)
    return await _write_from_draft(db, listing=listing, caller_id=caller_id, values=values, target=target)


async def submit_for_review(
    db: AsyncSession,
    *,
    listing_id: str,
    caller_id: str,
    patch: dict[str, Any] | None = None,
) -> Listing:
    listing = await get_listing_or_404(db, listing_id)
    _ensure_draft(listing)
    _ensure_owner(listing, caller_id)

    values, _ = _clean_patch(patch or {})
    return await _write_from_draft(
        db,
        listing=listing,
        caller_id=caller_id,
        values=values,
        target=ListingStatus.PENDING_REVIEW,
    )


async def delete_listing(
    db: AsyncSession,
    *,
    store: LocalObjectStore,
    listing_id: str,
    caller_id: str,
) -> list[str]:
    """
    Owner-only hard delete, any status. Media cleanup runs afterwards and never fails
    the operation; returns the media refs that could not be removed.
    """
    listing = await get_listing_or_404(db, listing_id)
    _ensure_owner(listing, caller_id)

    media = [*(listing.images or []), listing.video]
    snapshot = {"status": listing.status, "title": listing.title}

    try:
        # review history goes with the listing; the audit row keeps its ids
        review_ids = (
            await db.execute(
                select(ListingReview.id)
                .where(ListingReview.listing_id == listing_id)
                .order_by(ListingReview.reviewed_at, ListingReview.id)
            )
        ).scalars().all()
        snapshot["review_ids"] = list(review_ids)

        # dependent rows first (sqlite does not enforce ON DELETE)
        await db.execute(delete(ListingReview).where(ListingReview.listing_id == listing_id))
        await db.execute(
            update(Notification).where(Notification.listing_id == listing_id).values(listing_id=None)
        )
        await db.execute(delete(Listing).where(Listing.id == listing_id))
        await audit(
            db,
            actor_user_id=caller_id,
            action="listing.deleted",
            target_type="listing",
            target_id=listing_id,
            detail=snapshot,
        )
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        log.exception("delete listing failed: %s", listing_id)
        raise Internal("Failed to delete listing")

    failed = purge_media(store, media)
    if failed:
        log.warning("listing %s deleted; %d media item(s) left behind", listing_id, len(failed))
    return failed


async def fetch_public(db: AsyncSession, *, listing_id: str) -> Listing:
    """
    Read one listing and count the view. Increments are not serialized against
    concurrent reads; the store applies view_count + 1 in place.
    """
    stmt = (
        update(Listing)
        .where(Listing.id == listing_id)
        .values(view_count=Listing.view_count + 1, updated_at=Listing.updated_at)
        .execution_options(synchronize_session=False)
    )
    try:
        result = await db.execute(stmt)
        if result.rowcount == 0:
            await db.rollback()
            raise NotFound("Listing not found")
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        log.exception("view count increment failed: %s", listing_id)
        raise Internal("Failed to fetch listing")

    return await get_listing_or_404(db, listing_id, with_location=True)


def _search_conditions(filters: SearchFilters) -> list:
    conds = [Listing.status == int(ListingStatus.APPROVED)]

    if filters.property_type is not None:
        conds.append(Listing.property_type == filters.property_type)
    if filters.operation_type is not None:
        conds.append(Listing.operation_type == filters.operation_type)
    if filters.state_id is not None:
        conds.append(Listing.state_id == filters.state_id)
    if filters.municipality_id is not None:
        conds.append(Listing.municipality_id == filters.municipality_id)

    if filters.min_price is not None:
        conds.append(Listing.seller_price >= filters.min_price)
    if filters.max_price is not None:
        conds.append(Listing.seller_price <= filters.max_price)
    if filters.min_rooms is not None:
        conds.append(Listing.rooms >= filters.min_rooms)
    if filters.min_stories is not None:
        conds.append(Listing.stories >= filters.min_stories)
    if filters.min_area is not None:
        conds.append(Listing.total_area >= filters.min_area)
    if filters.max_area is not None:
        conds.append(Listing.total_area <= filters.max_area)

    query = (filters.query or "").strip()
    if query:
        escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        conds.append(Listing.title.ilike(f"%{escaped}%", escape="\\"))

    return conds


def _order_by(sort: SortSpec) -> list:
    column = SORT_FIELDS.get(sort.field)
    if column is None:
        raise BadRequest(f"Unsupported sort field: {sort.field}")
    primary = column.desc() if sort.descending else column.asc()
    tiebreak = Listing.id.desc() if sort.descending else Listing.id.asc()
    return [primary, tiebreak]


async def search(
    db: AsyncSession,
    *,
    filters: SearchFilters,
    params: PageParams,
    sort: SortSpec = SortSpec(),
) -> tuple[list[Listing], int]:
    """Approved listings only, whatever the filters say."""
    conds = _search_conditions(filters)
    order = _order_by(sort)

    stmt = (
        select(Listing)
        .where(*conds)
        .options(selectinload(Listing.state), selectinload(Listing.municipality))
        .order_by(*order)
        .offset(params.offset)
        .limit(params.limit)
    )
    count_stmt = select(func.count()).select_from(Listing).where(*conds)

    try:
        rows = (await db.execute(stmt)).scalars().all()
        total = (await db.execute(count_stmt)).scalar_one()
    except SQLAlchemyError:
        log.exception("listing search failed")
        raise Internal("Failed to fetch listings")
    return list(rows), int(total)


async def list_by_owner(
    db: AsyncSession,
    *,
    owner_id: str,
    params: PageParams,
    status: Any = None,
) -> tuple[list[Listing], int]:
    conds = [Listing.user_id == owner_id]
    if status is not None:
        conds.append(Listing.status == int(parse_status(status)))

    stmt = (
        select(Listing)
        .where(*conds)
        .options(selectinload(Listing.state), selectinload(Listing.municipality))
        .order_by(Listing.created_at.desc(), Listing.id.desc())
        .offset(params.offset)
        .limit(params.limit)
    )
    count_stmt = select(func.count(Listing.id)).where(*conds)

    try:
        rows = (await db.execute(stmt)).scalars().all()
        total = (await db.execute(count_stmt)).scalar_one()
    except SQLAlchemyError:
        log.exception("owner listings query failed: %s", owner_id)
        raise Internal("Failed to fetch listings")
    return list(rows), int(total)
