from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from listings_hub.schemas.common import PaginationOut
from listings_hub.schemas.geo import MunicipalityOut, StateOut


class ListingCreate(BaseModel):
    # optional explicit owner; trusted as-is
    user_id: str | None = None


class ListingPatch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # accepted and dropped: identity fields are never caller-controlled
    id: str | None = None
    user_id: str | None = None
    # only "draft"/0 or "pending_review"/1 are meaningful here
    status: int | str | None = None

    title: str | None = Field(default=None, max_length=300)
    property_type: int | None = None
    address: str | None = None
    state_id: int | None = None
    municipality_id: int | None = None
    images: list[str] | None = None
    video: str | None = None
    operation_type: int | None = None
    seller_price: float | None = Field(default=None, ge=0)
    is_negotiable: bool | None = None
    highest_bidding_price: float | None = Field(default=None, ge=0)
    payment_type: int | None = None
    neighborhood_description: str | None = None
    documents_type: int | None = None
    rooms: int | None = Field(default=None, ge=0)
    stories: int | None = Field(default=None, ge=0)
    total_area: float | None = Field(default=None, ge=0)
    specifications: dict[str, bool] | None = None
    notes: str | None = None
    communication_preferences: dict[str, str] | None = None


class ListingOut(BaseModel):
    id: str
    user_id: str
    status: int
    title: str | None
    property_type: int | None
    address: str | None
    state_id: int | None
    municipality_id: int | None
    state: StateOut | None = None
    municipality: MunicipalityOut | None = None
    images: list[str]
    video: str | None
    operation_type: int | None
    seller_price: float | None
    is_negotiable: bool | None
    highest_bidding_price: float | None
    payment_type: int | None
    neighborhood_description: str | None
    documents_type: int | None
    rooms: int | None
    stories: int | None
    total_area: float | None
    specifications: dict
    notes: str | None
    communication_preferences: dict
    view_count: int
    created_at: datetime
    updated_at: datetime


class ListingPage(BaseModel):
    data: list[ListingOut]
    pagination: PaginationOut


class ListingDeleted(BaseModel):
    status: str = "deleted"
    listing_id: str
    media_failed: list[str] = Field(default_factory=list)


class OwnerSummary(BaseModel):
    id: str
    first_name: str | None
    last_name: str | None
    phone: str | None


class PendingListingOut(ListingOut):
    owner: OwnerSummary


class PendingListingPage(BaseModel):
    data: list[PendingListingOut]
    pagination: PaginationOut
