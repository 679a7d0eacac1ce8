from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0003_listings"
down_revision = "0002_geo_catalog"
branch_labels = None
depends_on = None


def _jsonb(default: str):
    return dict(
        type_=postgresql.JSONB(astext_type=sa.Text()),
        nullable=False,
        server_default=sa.text(f"'{default}'::jsonb"),
    )


def upgrade():
    op.create_table(
        "listings",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("status", sa.Integer(), nullable=False, server_default="0"),

        sa.Column("title", sa.String(length=300), nullable=True),
        sa.Column("property_type", sa.Integer(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("state_id", sa.Integer(), sa.ForeignKey("states.id"), nullable=True),
        sa.Column("municipality_id", sa.Integer(), sa.ForeignKey("municipalities.id"), nullable=True),

        sa.Column("images", **_jsonb("[]")),
        sa.Column("video", sa.Text(), nullable=True),

        sa.Column("operation_type", sa.Integer(), nullable=True),
        sa.Column("seller_price", sa.Numeric(14, 2), nullable=True),
        sa.Column("is_negotiable", sa.Boolean(), nullable=True),
        sa.Column("highest_bidding_price", sa.Numeric(14, 2), nullable=True),
        sa.Column("payment_type", sa.Integer(), nullable=True),
        sa.Column("neighborhood_description", sa.Text(), nullable=True),
        sa.Column("documents_type", sa.Integer(), nullable=True),

        sa.Column("rooms", sa.Integer(), nullable=True),
        sa.Column("stories", sa.Integer(), nullable=True),
        sa.Column("total_area", sa.Numeric(12, 2), nullable=True),

        sa.Column("specifications", **_jsonb("{}")),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("communication_preferences", **_jsonb("{}")),

        sa.Column("view_count", sa.Integer(), nullable=False, server_default="0"),

        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),

        sa.CheckConstraint("status IN (0, 1, 2, 3)", name="ck_listings_status"),
        sa.CheckConstraint("view_count >= 0", name="ck_listings_view_count"),
    )

    op.create_index("ix_listings_user_id", "listings", ["user_id"])
    op.create_index("ix_listings_status", "listings", ["status"])
    op.create_index("ix_listings_status_created_at", "listings", ["status", "created_at"])


def downgrade():
    op.drop_index("ix_listings_status_created_at", table_name="listings")
    op.drop_index("ix_listings_status", table_name="listings")
    op.drop_index("ix_listings_user_id", table_name="listings")
    op.drop_table("listings")
