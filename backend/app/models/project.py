"""
Project model — one construction job posted by a contractor.

A project owns its applications (see app.models.application); deleting
a project removes every application with it.

Design notes:
  • Enumerated fields are stored as short strings guarded by CHECK
    constraints, so the wire values ("Full-time", "Commercial", …) are
    exactly what the database holds.
  • applicants_count is written only by the store (create = 0, apply = +1
    atomically). It is never accepted from a client.
  • version is the optimistic-concurrency counter for contractor edits;
    SQLAlchemy adds "WHERE version = :old" to every ORM UPDATE and raises
    StaleDataError when another writer got there first.
  • contractor_id is an opaque reference into the external contractor
    directory — no foreign key, the directory is not ours.
"""

from __future__ import annotations

import datetime
import enum
import uuid
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class ProjectType(str, enum.Enum):
    RESIDENTIAL = "Residential"
    COMMERCIAL = "Commercial"
    INDUSTRIAL = "Industrial"


class EmploymentType(str, enum.Enum):
    FULL_TIME = "Full-time"
    PART_TIME = "Part-time"
    CONTRACT = "Contract"


class ProjectStatus(str, enum.Enum):
    """Project lifecycle status. completed/cancelled are terminal."""

    DRAFT = "draft"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def _in_list(column: str, enum_cls: type[enum.Enum]) -> str:
    values = ", ".join(f"'{member.value}'" for member in enum_cls)
    return f"{column} IN ({values})"


class Project(Base):
    """A posted construction job with type, timeline and rate range."""

    __tablename__ = "projects"

    # ── Identity ────────────────────────────────────────────
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    contractor_id: Mapped[str] = mapped_column(
        String(64), nullable=False,
    )

    # ── Posting details ─────────────────────────────────────
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    project_type: Mapped[str] = mapped_column(String(20), nullable=False)
    employment_type: Mapped[str] = mapped_column(String(20), nullable=False)

    # ── Timeline (both ends optional) ───────────────────────
    start_date: Mapped[datetime.date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[datetime.date | None] = mapped_column(Date, nullable=True)

    # ── Hourly rate range ───────────────────────────────────
    hourly_rate_min: Mapped[Decimal | None] = mapped_column(
        Numeric(10, 2), nullable=True,
    )
    hourly_rate_max: Mapped[Decimal | None] = mapped_column(
        Numeric(10, 2), nullable=True,
    )

    # ── Lifecycle ───────────────────────────────────────────
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ProjectStatus.ACTIVE.value,
    )
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    applicants_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    # ── Applications (insertion order) ──────────────────────
    workers: Mapped[list["Application"]] = relationship(  # noqa: F821
        back_populates="project",
        order_by="Application.id",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        CheckConstraint(
            _in_list("project_type", ProjectType), name="ck_projects_project_type",
        ),
        CheckConstraint(
            _in_list("employment_type", EmploymentType),
            name="ck_projects_employment_type",
        ),
        CheckConstraint(
            _in_list("status", ProjectStatus), name="ck_projects_status",
        ),
        CheckConstraint(
            "hourly_rate_min IS NULL OR hourly_rate_max IS NULL "
            "OR hourly_rate_min <= hourly_rate_max",
            name="ck_projects_hourly_rate_range",
        ),
        CheckConstraint(
            "progress >= 0 AND progress <= 100", name="ck_projects_progress_range",
        ),
        CheckConstraint(
            "applicants_count >= 0", name="ck_projects_applicants_non_neg",
        ),
        Index("ix_projects_contractor_id", "contractor_id"),
        Index("ix_projects_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Project id={self.id!s:.8} title={self.title!r} "
            f"status={self.status}>"
        )
