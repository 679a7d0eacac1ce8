from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from listings_hub.core.ids import gen_id
from listings_hub.models.base import AuditMixin, Base, JSONType


class Listing(AuditMixin, Base):
    __tablename__ = "listings"
    __table_args__ = (
        CheckConstraint("status IN (0, 1, 2, 3)", name="ck_listings_status"),
        CheckConstraint("view_count >= 0", name="ck_listings_view_count"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: gen_id("lst"))

    # Owner; never changes after creation
    user_id: Mapped[str] = mapped_column(String, ForeignKey("users.id"), nullable=False, index=True)

    # 0=draft 1=pending_review 2=approved 3=rejected (see services.listing_status)
    status: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)

    title: Mapped[str | None] = mapped_column(String(300), nullable=True)
    property_type: Mapped[int | None] = mapped_column(Integer, nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    state_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("states.id"), nullable=True)
    municipality_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("municipalities.id"), nullable=True)

    # Media refs into the blob store
    images: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    video: Mapped[str | None] = mapped_column(Text, nullable=True)

    # 0=sale 1=rent
    operation_type: Mapped[int | None] = mapped_column(Integer, nullable=True)
    seller_price: Mapped[float | None] = mapped_column(Numeric(14, 2, asdecimal=False), nullable=True)
    is_negotiable: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    highest_bidding_price: Mapped[float | None] = mapped_column(Numeric(14, 2, asdecimal=False), nullable=True)
    payment_type: Mapped[int | None] = mapped_column(Integer, nullable=True)
    neighborhood_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    documents_type: Mapped[int | None] = mapped_column(Integer, nullable=True)

    rooms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    stories: Mapped[int | None] = mapped_column(Integer, nullable=True)
    total_area: Mapped[float | None] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=True)

    specifications: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    communication_preferences: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)

    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    owner = relationship("User", lazy="raise")
    state = relationship("State", lazy="raise")
    municipality = relationship("Municipality", lazy="raise")
