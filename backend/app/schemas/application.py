"""
Pydantic v2 schemas for worker applications.

The applicant profile is a by-value snapshot of the worker's directory
profile at the moment of applying. Later profile edits do not reach it.
"""

from __future__ import annotations

import datetime
import uuid
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.models.application import Application, ApplicationStatus

_INPUT_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    extra="forbid",
)


class ApplicantProfile(BaseModel):
    """Display snapshot of the applying worker's business profile."""

    model_config = _INPUT_CONFIG

    business_name: str | None = Field(default=None, max_length=200)
    business_type: str | None = Field(default=None, max_length=100)
    years_of_experience: int | None = Field(default=None, ge=0, le=80)
    license_number: str | None = Field(default=None, max_length=100)
    insurance_info: str | None = Field(default=None, max_length=500)
    project_types: list[str] | None = None
    address: str | None = Field(default=None, max_length=500)
    phone_number: str | None = Field(default=None, max_length=50)
    email: str | None = Field(default=None, max_length=254)


class ApplicationCreate(BaseModel):
    """Body of POST /projects/{id}/applications."""

    model_config = _INPUT_CONFIG

    cover_letter: str | None = Field(
        default=None,
        max_length=5_000,
        description="Composed from the profile snapshot when omitted.",
    )
    expected_rate: Decimal | None = Field(
        default=None, ge=0, max_digits=10, decimal_places=2, examples=[35],
    )
    applicant_profile: ApplicantProfile | None = None


class ApplicationReview(BaseModel):
    """Body of PUT /projects/{id}/applications/{workerId}."""

    model_config = _INPUT_CONFIG

    status: Literal["accepted", "rejected"]


class ApplicationOut(BaseModel):
    """One entry of Project.workers."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    project_id: uuid.UUID
    worker: str
    status: ApplicationStatus
    applied_at: datetime.datetime
    reviewed_at: datetime.datetime | None = None
    cover_letter: str | None = None
    expected_rate: float | None = None
    applicant_profile: dict[str, Any] | None = None

    @classmethod
    def from_model(cls, application: Application) -> ApplicationOut:
        return cls(
            project_id=application.project_id,
            worker=application.worker_id,
            status=ApplicationStatus(application.status),
            applied_at=application.applied_at,
            reviewed_at=application.reviewed_at,
            cover_letter=application.cover_letter,
            expected_rate=application.expected_rate,
            applicant_profile=application.applicant_profile,
        )
