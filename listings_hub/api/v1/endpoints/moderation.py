from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from listings_hub.core.db import get_db
from listings_hub.schemas.common import PaginationOut
from listings_hub.schemas.listing import OwnerSummary, PendingListingOut, PendingListingPage
from listings_hub.schemas.review import ReviewCreate, ReviewOut
from listings_hub.services import moderation
from listings_hub.services.auth import Actor, get_actor
from listings_hub.services.pagination import page_meta, page_params
from listings_hub.api.v1.endpoints.listings import listing_out

router = APIRouter()


@router.get("/moderation/pending", response_model=PendingListingPage)
async def list_pending_listings(
    page: int | None = Query(default=None),
    limit: int | None = Query(default=None),
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> PendingListingPage:
    params = page_params(page, limit)
    rows, total = await moderation.list_pending(db, actor=actor, params=params)
    return PendingListingPage(
        data=[
            PendingListingOut(
                **listing_out(r),
                owner=OwnerSummary(
                    id=r.owner.id,
                    first_name=r.owner.first_name,
                    last_name=r.owner.last_name,
                    phone=r.owner.phone,
                ),
            )
            for r in rows
        ],
        pagination=PaginationOut(**page_meta(total, params)),
    )


@router.post("/moderation/reviews", response_model=ReviewOut, status_code=201)
async def create_review(
    payload: ReviewCreate,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> ReviewOut:
    review = await moderation.record_review(
        db,
        actor=actor,
        listing_id=payload.listing_id,
        decision=payload.decision,
        reason=payload.reason,
    )
    return ReviewOut(
        id=review.id,
        listing_id=review.listing_id,
        moderator_id=review.moderator_id,
        decision=review.decision,
        reason=review.reason,
        reviewed_at=review.reviewed_at,
    )
