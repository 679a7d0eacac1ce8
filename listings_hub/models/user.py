from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from listings_hub.core.ids import gen_id
from listings_hub.models.base import AuditMixin, Base, JSONType


class User(AuditMixin, Base):
    __tablename__ = "users"

    # Mirrors the identity provider's subject id when provisioned from it
    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: gen_id("usr"))

    email: Mapped[str | None] = mapped_column(String(320), nullable=True, unique=True)
    first_name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(40), nullable=True)

    # "individual" | "agency"
    user_type: Mapped[str] = mapped_column(String(20), nullable=False, default="individual")

    # Opaque capability level; settings.moderator_permission_level marks moderators
    permission_level: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    communication_preferences: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
