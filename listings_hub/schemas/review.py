from datetime import datetime

from pydantic import BaseModel


class ReviewCreate(BaseModel):
    listing_id: str | None = None
    # 2 / "approved" or 3 / "rejected"
    decision: int | str | None = None
    reason: str | None = None


class ReviewOut(BaseModel):
    id: str
    listing_id: str
    moderator_id: str
    decision: int
    reason: str | None
    reviewed_at: datetime
