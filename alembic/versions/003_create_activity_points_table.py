"""create activity_points table

Revision ID: 003
Revises: 002
Create Date: 2025-11-03 19:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "activity_points",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("activity_id", sa.Integer(), nullable=False),
        sa.Column("lat", sa.Float(), nullable=False),
        sa.Column("lon", sa.Float(), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["activity_id"], ["activities.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_activity_points_id", "activity_points", ["id"], unique=False)
    op.create_index(
        "ix_activity_points_activity_id_timestamp",
        "activity_points",
        ["activity_id", "timestamp"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_activity_points_activity_id_timestamp", table_name="activity_points")
    op.drop_index("ix_activity_points_id", table_name="activity_points")
    op.drop_table("activity_points")
