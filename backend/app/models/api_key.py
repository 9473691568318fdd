"""
API key model — the credential that resolves a caller to an identity.

Each key belongs to exactly one subject (a contractor or a worker, by the
id the external directories use) and carries that subject's role.

Security notes:
  • Raw API keys are NEVER stored. Only a SHA-256 hash is persisted.
  • The `prefix` column stores the first 12 characters (e.g., "mk_live_1a2b")
    for identification in logs/UI without exposing the full key.
  • `is_active` allows key revocation without deletion (audit trail).
"""

import datetime
import enum
import uuid

from sqlalchemy import Boolean, CheckConstraint, DateTime, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.models.project import utcnow


class Role(str, enum.Enum):
    CONTRACTOR = "contractor"
    WORKER = "worker"


class APIKey(Base):
    """Hashed API key bound to one contractor or worker."""

    __tablename__ = "api_keys"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    subject_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        index=True,
    )
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    key_hash: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        unique=True,
    )
    prefix: Mapped[str] = mapped_column(
        String(12),
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    __table_args__ = (
        CheckConstraint(
            "role IN ('contractor', 'worker')", name="ck_api_keys_role",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<APIKey id={self.id!s:.8} prefix={self.prefix!r} "
            f"role={self.role} active={self.is_active}>"
        )
