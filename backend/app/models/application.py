"""
Application model — one worker's request to join a project.

Each row is a subrecord of its project: it is created by apply, mutated
only by the project's contractor (accept/reject), and removed only when
the project itself is deleted.

Design notes:
  • The integer surrogate key doubles as the insertion order, so
    "first applicant first" never depends on clock resolution.
  • UNIQUE(project_id, worker_id) makes a duplicate apply fail inside
    the same INSERT that would create it — no read-then-write race.
  • applicant_profile is a snapshot copied at apply time (business name,
    experience, license, …). It is intentionally NOT kept in sync with
    later profile edits; it records what the contractor was shown.
"""

from __future__ import annotations

import datetime
import enum
import uuid
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.models.project import utcnow


class ApplicationStatus(str, enum.Enum):
    """Review status. accepted/rejected are terminal."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class Application(Base):
    """A worker's application to a project, with its review status."""

    __tablename__ = "applications"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )
    worker_id: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ApplicationStatus.PENDING.value,
    )
    applied_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    reviewed_at: Mapped[datetime.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    # ── Display snapshot (store-by-value) ───────────────────
    cover_letter: Mapped[str | None] = mapped_column(Text, nullable=True)
    expected_rate: Mapped[Decimal | None] = mapped_column(
        Numeric(10, 2), nullable=True,
    )
    applicant_profile: Mapped[dict[str, Any] | None] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=True,
    )

    project: Mapped["Project"] = relationship(  # noqa: F821
        back_populates="workers",
    )

    __table_args__ = (
        UniqueConstraint(
            "project_id", "worker_id", name="uq_applications_project_worker",
        ),
        CheckConstraint(
            "status IN ('pending', 'accepted', 'rejected')",
            name="ck_applications_status",
        ),
        CheckConstraint(
            "expected_rate IS NULL OR expected_rate >= 0",
            name="ck_applications_expected_rate_non_neg",
        ),
        Index("ix_applications_project_id", "project_id"),
        Index("ix_applications_worker_id", "worker_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Application project={self.project_id!s:.8} "
            f"worker={self.worker_id!r} status={self.status}>"
        )
