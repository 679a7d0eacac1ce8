from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload, selectinload

from listings_hub.core.errors import BadRequest, Conflict, Internal
from listings_hub.models.base import utcnow
from listings_hub.models.listing import Listing
from listings_hub.models.listing_review import ListingReview
from listings_hub.services.audit import audit
from listings_hub.services.auth import Actor, ensure_moderator
from listings_hub.services.lifecycle import get_listing_or_404
from listings_hub.services.listing_status import ListingStatus, ReviewDecision, parse_decision
from listings_hub.services.notifications import create_notification, review_message
from listings_hub.services.pagination import PageParams

log = logging.getLogger(__name__)

NOT_PENDING_MSG = "Listing is not in pending review status"


async def list_pending(
    db: AsyncSession,
    *,
    actor: Actor | None,
    params: PageParams,
) -> tuple[list[Listing], int]:
    """
    Moderator queue: pending listings, newest first, with owner contact and location loaded.
    """
    ensure_moderator(actor)

    cond = Listing.status == int(ListingStatus.PENDING_REVIEW)
    stmt = (
        select(Listing)
        .where(cond)
        .options(
            joinedload(Listing.owner),
            selectinload(Listing.state),
            selectinload(Listing.municipality),
        )
        .order_by(Listing.created_at.desc(), Listing.id.desc())
        .offset(params.offset)
        .limit(params.limit)
    )
    count_stmt = select(func.count(Listing.id)).where(cond)

    try:
        rows = (await db.execute(stmt)).scalars().all()
        total = (await db.execute(count_stmt)).scalar_one()
    except SQLAlchemyError:
        log.exception("pending listings query failed")
        raise Internal("Failed to fetch pending listings")
    return list(rows), int(total)


def _validate_review_input(listing_id: str | None, decision: Any, reason: str | None) -> tuple[ReviewDecision, str | None]:
    if not listing_id or not str(listing_id).strip():
        raise BadRequest("listing_id is required")

    parsed = parse_decision(decision)
    reason = (reason or "").strip() or None
    if parsed == ReviewDecision.REJECTED and not reason:
        raise BadRequest("A reason is required when rejecting a listing")
    return parsed, reason


async def record_review(
    db: AsyncSession,
    *,
    actor: Actor | None,
    listing_id: str | None,
    decision: Any,
    reason: str | None = None,
) -> ListingReview:
    """
    Record one moderation decision and apply it.

    Review row, status transition, owner notification and audit entry are
    written in one transaction. The transition is conditional on the listing
    still being pending, so of two racing moderators only one succeeds; the
    other gets Conflict.
    """
    actor = ensure_moderator(actor)
    parsed, reason = _validate_review_input(listing_id, decision, reason)

    listing = await get_listing_or_404(db, listing_id)
    if listing.status != ListingStatus.PENDING_REVIEW:
        raise Conflict(NOT_PENDING_MSG)

    owner_id = listing.user_id
    title = listing.title
    target = parsed.target_status

    stmt = (
        update(Listing)
        .where(
            Listing.id == listing_id,
            Listing.status == int(ListingStatus.PENDING_REVIEW),
        )
        .values(status=int(target), updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )

    review = ListingReview(
        listing_id=listing_id,
        moderator_id=actor.user_id,
        decision=int(parsed),
        reason=reason,
        reviewed_at=utcnow(),
    )

    try:
        result = await db.execute(stmt)
        if result.rowcount == 0:
            await db.rollback()
            raise Conflict(NOT_PENDING_MSG)

        db.add(review)
        create_notification(
            db,
            user_id=owner_id,
            listing_id=listing_id,
            message=review_message(decision=parsed, title=title, reason=reason),
        )
        await audit(
            db,
            actor_user_id=actor.user_id,
            action="listing.reviewed",
            target_type="listing",
            target_id=listing_id,
            detail={"decision": int(parsed), "reason": reason},
        )
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        log.exception("record review failed: %s", listing_id)
        raise Internal("Failed to create listing review")

    log.info("listing %s %s by %s", listing_id, target.name.lower(), actor.user_id)
    return review
