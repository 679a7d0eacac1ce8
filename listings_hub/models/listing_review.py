from datetime import datetime

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import DateTime

from listings_hub.core.ids import gen_id
from listings_hub.models.base import Base, utcnow


class ListingReview(Base):
    """
    Append-only record of one moderation decision.

    Rows are removed only together with their listing; the listing.deleted
    audit entry keeps their ids.
    """

    __tablename__ = "listing_reviews"
    __table_args__ = (
        CheckConstraint("decision IN (2, 3)", name="ck_listing_reviews_decision"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: gen_id("rev"))
    listing_id: Mapped[str] = mapped_column(
        String, ForeignKey("listings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    moderator_id: Mapped[str] = mapped_column(String, ForeignKey("users.id"), nullable=False)

    # target listing status: 2=approved 3=rejected
    decision: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    reviewed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
