"""create users table

Revision ID: 001
Revises:
Create Date: 2025-11-03 18:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        # Legacy rows hold plaintext here; new and upgraded rows hold a bcrypt hash
        sa.Column("credential", sa.String(), nullable=False),
        sa.Column("role", sa.String(16), nullable=False, server_default="user"),
        sa.Column("reset_token_hash", sa.String(64), nullable=True),
        sa.Column("reset_token_expires", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("role IN ('user', 'admin')", name="ck_users_role"),
    )
    op.create_index("ix_users_id", "users", ["id"], unique=False)
    # Authoritative email uniqueness; the application check is only a fast path
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_reset_token_hash", "users", ["reset_token_hash"], unique=False)

    # Get settings from environment (will be loaded by Alembic env.py)
    from aktywni.core.config import settings
    from aktywni.core.security import get_password_hash

    if not (settings.first_admin_email and settings.first_admin_password):
        return

    op.execute(
        sa.text(
            """
            INSERT INTO users (email, credential, role)
            VALUES (:email, :credential, 'admin')
            """
        ).bindparams(
            email=settings.first_admin_email.strip().lower(),
            credential=get_password_hash(settings.first_admin_password),
        )
    )


def downgrade() -> None:
    op.drop_index("ix_users_reset_token_hash", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_index("ix_users_id", table_name="users")
    op.drop_table("users")
