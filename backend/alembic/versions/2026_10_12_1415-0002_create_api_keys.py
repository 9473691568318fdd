"""create api_keys table

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-12

  - api_keys: SHA-256 hashed keys bound to one contractor or worker id
  - Keys are revoked with is_active, never deleted
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0002"
down_revision: Union[str, None] = "0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "api_keys",
        sa.Column("id", sa.UUID(), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("subject_id", sa.String(64), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("key_hash", sa.Text(), nullable=False),
        sa.Column("prefix", sa.String(12), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default="true", nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("key_hash"),
        sa.CheckConstraint("role IN ('contractor', 'worker')", name="ck_api_keys_role"),
    )
    op.create_index("ix_api_keys_subject_id", "api_keys", ["subject_id"])


def downgrade() -> None:
    op.drop_index("ix_api_keys_subject_id", table_name="api_keys")
    op.drop_table("api_keys")
