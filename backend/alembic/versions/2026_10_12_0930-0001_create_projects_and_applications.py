"""create projects and applications tables

Revision ID: 0001
Revises:
Create Date: 2026-10-12

  - projects: one posting per row, timeline and hourly rate flattened,
    applicants_count maintained by the store, version for optimistic
    concurrency on contractor edits
  - applications: integer surrogate key (insertion order), cascading FK,
    UNIQUE(project_id, worker_id), JSONB applicant snapshot
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── 1. projects table ───────────────────────────────────
    op.create_table(
        "projects",
        sa.Column("id", sa.UUID(), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("contractor_id", sa.String(64), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("location", sa.String(255), nullable=False),
        sa.Column("project_type", sa.String(20), nullable=False),
        sa.Column("employment_type", sa.String(20), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("hourly_rate_min", sa.Numeric(10, 2), nullable=True),
        sa.Column("hourly_rate_max", sa.Numeric(10, 2), nullable=True),
        sa.Column("status", sa.String(20), server_default="active", nullable=False),
        sa.Column("progress", sa.Integer(), server_default="0", nullable=False),
        sa.Column("applicants_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("version", sa.Integer(), server_default="1", nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "project_type IN ('Residential', 'Commercial', 'Industrial')",
            name="ck_projects_project_type",
        ),
        sa.CheckConstraint(
            "employment_type IN ('Full-time', 'Part-time', 'Contract')",
            name="ck_projects_employment_type",
        ),
        sa.CheckConstraint(
            "status IN ('draft', 'active', 'completed', 'cancelled')",
            name="ck_projects_status",
        ),
        sa.CheckConstraint(
            "hourly_rate_min IS NULL OR hourly_rate_max IS NULL "
            "OR hourly_rate_min <= hourly_rate_max",
            name="ck_projects_hourly_rate_range",
        ),
        sa.CheckConstraint(
            "progress >= 0 AND progress <= 100", name="ck_projects_progress_range",
        ),
        sa.CheckConstraint(
            "applicants_count >= 0", name="ck_projects_applicants_non_neg",
        ),
    )
    op.create_index("ix_projects_contractor_id", "projects", ["contractor_id"])
    op.create_index("ix_projects_created_at", "projects", ["created_at"])

    # ── 2. applications table ───────────────────────────────
    op.create_table(
        "applications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("project_id", sa.UUID(), nullable=False),
        sa.Column("worker_id", sa.String(64), nullable=False),
        sa.Column("status", sa.String(20), server_default="pending", nullable=False),
        sa.Column("applied_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("reviewed_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("cover_letter", sa.Text(), nullable=True),
        sa.Column("expected_rate", sa.Numeric(10, 2), nullable=True),
        sa.Column("applicant_profile", postgresql.JSONB(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("project_id", "worker_id", name="uq_applications_project_worker"),
        sa.CheckConstraint(
            "status IN ('pending', 'accepted', 'rejected')",
            name="ck_applications_status",
        ),
        sa.CheckConstraint(
            "expected_rate IS NULL OR expected_rate >= 0",
            name="ck_applications_expected_rate_non_neg",
        ),
    )
    op.create_index("ix_applications_project_id", "applications", ["project_id"])
    op.create_index("ix_applications_worker_id", "applications", ["worker_id"])


def downgrade() -> None:
    op.drop_index("ix_applications_worker_id", table_name="applications")
    op.drop_index("ix_applications_project_id", table_name="applications")
    op.drop_table("applications")
    op.drop_index("ix_projects_created_at", table_name="projects")
    op.drop_index("ix_projects_contractor_id", table_name="projects")
    op.drop_table("projects")
