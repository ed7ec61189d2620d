"""add celebrations table

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Ledger of celebrations already delivered to a family.
Unique constraint (owner_id, kind, subject_key, threshold) enforces
once-only delivery. Append-only; downgrade drops cleanly.
"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "celebrations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("owner_id", sa.String(36), nullable=False),
        sa.Column("kind", sa.String(32), nullable=False),
        sa.Column("subject_key", sa.String(36), nullable=False, server_default=""),
        sa.Column("threshold", sa.Integer(), nullable=False),
        sa.Column("celebration_metadata", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.UniqueConstraint(
            "owner_id", "kind", "subject_key", "threshold",
            name="uq_celebration_owner_kind_subject_threshold",
        ),
    )
    op.create_index("ix_celebrations_owner_id", "celebrations", ["owner_id"])
    op.create_index("ix_celebrations_kind", "celebrations", ["kind"])


def downgrade() -> None:
    op.drop_index("ix_celebrations_kind", table_name="celebrations")
    op.drop_index("ix_celebrations_owner_id", table_name="celebrations")
    op.drop_table("celebrations")
