from alembic import op
import sqlalchemy as sa

revision = "0002_geo_catalog"
down_revision = "0001_users_and_sessions"
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "states",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("name", sa.String(length=200), nullable=False),
    )
    op.create_table(
        "municipalities",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("state_id", sa.Integer(), sa.ForeignKey("states.id"), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
    )
    op.create_index("ix_municipalities_state_id", "municipalities", ["state_id"])


def downgrade():
    op.drop_index("ix_municipalities_state_id", table_name="municipalities")
    op.drop_table("municipalities")
    op.drop_table("states")
