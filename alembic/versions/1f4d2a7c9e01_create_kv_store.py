
"""Create kv_store table.

Revision ID: 1f4d2a7c9e01
Revises:
Create Date: 2026-10-17

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "1f4d2a7c9e01"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "kv_store",
        sa.Column("key", sa.String(length=255), primary_key=True),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_kv_store_key", "kv_store", ["key"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_kv_store_key", table_name="kv_store")
    op.drop_table("kv_store")
