"""
Resolved caller identity.

An Identity is the capability the HTTP layer hands to every matching
operation after authentication. The core never reads ambient session or
request state — whatever it is allowed to do, it learns from this value.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from app.models.api_key import Role


@dataclass(frozen=True, slots=True)
class Identity:
    """
    Attributes:
        subject_id: Contractor or worker id, as used by the directories.
        role:       What the subject is acting as.
        api_key_id: The credential that produced this identity (None for
                    identities minted in-process, e.g. by scripts/tests).
    """

    subject_id: str
    role: Role
    api_key_id: uuid.UUID | None = None

    @property
    def is_contractor(self) -> bool:
        return self.role is Role.CONTRACTOR

    @property
    def is_worker(self) -> bool:
        return self.role is Role.WORKER

    @classmethod
    def contractor(cls, subject_id: str) -> Identity:
        return cls(subject_id=subject_id, role=Role.CONTRACTOR)

    @classmethod
    def worker(cls, subject_id: str) -> Identity:
        return cls(subject_id=subject_id, role=Role.WORKER)
