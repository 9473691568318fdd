"""
Pydantic v2 schemas for project postings.

Separation:
  • ProjectCreate  — store-level input: every posting field plus the
                     owning contractor reference.
  • ProjectPost    — what a contractor sends to POST /projects; the owner
                     comes from the caller's identity, not the body.
  • ProjectUpdate  — partial patch for PUT /projects/{id}; only fields
                     that are present are applied.
  • ProjectOut     — what the SERVER returns.

The wire format is camelCase (projectType, hourlyRate, applicantsCount…);
Python code uses snake_case through alias generation.

extra="forbid" on every input schema: id, workers, applicantsCount,
contractorDetails and timestamps are server-owned and are rejected,
never silently ignored.
"""

from __future__ import annotations

import datetime
import uuid
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from app.models.application import Application
from app.models.project import EmploymentType, Project, ProjectStatus, ProjectType
from app.schemas.application import ApplicationOut
from app.services.lifecycle import INITIAL_PROJECT_STATUSES


class CamelModel(BaseModel):
    """Input base: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


# ── Nested value objects ────────────────────────────────────
class Timeline(CamelModel):
    """Optional start/end dates; each end may be null on its own."""

    start_date: datetime.date | None = None
    end_date: datetime.date | None = None

    @model_validator(mode="after")
    def _ordered(self) -> Timeline:
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("timeline.startDate must not be after timeline.endDate")
        return self


class HourlyRate(CamelModel):
    """Hourly pay range. Both ends are required and min <= max."""

    min: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2, examples=[25])
    max: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2, examples=[40])

    @model_validator(mode="after")
    def _ordered(self) -> HourlyRate:
        if self.min > self.max:
            raise ValueError("hourlyRate.min must not exceed hourlyRate.max")
        return self


class HourlyRatePatch(CamelModel):
    """Either end of the range; checked against the stored other end."""

    min: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    max: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)


# ── Request schemas ─────────────────────────────────────────
class _PostingFields(CamelModel):
    title: str = Field(
        ..., min_length=1, max_length=200, examples=["Site Engineer"],
    )
    description: str | None = Field(default=None, max_length=10_000)
    location: str = Field(..., min_length=1, max_length=255, examples=["Pune"])
    project_type: ProjectType = Field(..., examples=["Commercial"])
    timeline: Timeline | None = None
    hourly_rate: HourlyRate | None = None
    status: ProjectStatus = Field(
        default=ProjectStatus.ACTIVE,
        description="Initial status: 'draft' or 'active'.",
    )
    progress: int = Field(default=0, ge=0, le=100)

    @field_validator("status")
    @classmethod
    def _initial_status(cls, value: ProjectStatus) -> ProjectStatus:
        if value not in INITIAL_PROJECT_STATUSES:
            raise ValueError("a new project must start as 'draft' or 'active'")
        return value


class ProjectCreate(_PostingFields):
    """Full posting as stored, including the owning contractor."""

    employment_type: EmploymentType = Field(..., examples=["Contract"])
    contractor: str = Field(
        ...,
        min_length=1,
        max_length=64,
        description="Id of the owning contractor in the contractor directory.",
    )


class ProjectPost(_PostingFields):
    """
    Body of POST /projects.

    The posting form always sends employmentType "Contract", so that is
    the default here. `contractor` may be echoed back by older clients;
    it must then match the caller.
    """

    employment_type: EmploymentType = EmploymentType.CONTRACT
    contractor: str | None = Field(default=None, max_length=64)


# Fields that may be patched but never set to null.
_NON_NULLABLE = ("title", "location", "project_type", "employment_type", "status", "progress")


class ProjectUpdate(CamelModel):
    """Partial update — absent fields are left untouched."""

    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=10_000)
    location: str | None = Field(default=None, min_length=1, max_length=255)
    project_type: ProjectType | None = None
    employment_type: EmploymentType | None = None
    timeline: Timeline | None = None
    hourly_rate: HourlyRatePatch | None = None
    status: ProjectStatus | None = None
    progress: int | None = Field(default=None, ge=0, le=100)

    @model_validator(mode="after")
    def _no_nulls_for_required(self) -> ProjectUpdate:
        nulled = [
            name for name in _NON_NULLABLE
            if name in self.model_fields_set and getattr(self, name) is None
        ]
        if nulled:
            raise ValueError(f"fields cannot be null: {', '.join(nulled)}")
        return self


class ProjectFilter(BaseModel):
    """Query filter for listing projects. Empty = all projects."""

    contractor: str | None = None
    builder: str | None = None


# ── Response schemas ────────────────────────────────────────
class TimelineOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    start_date: datetime.date | None = None
    end_date: datetime.date | None = None


class HourlyRateOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    min: float | None = None
    max: float | None = None


class ProjectOut(BaseModel):
    """
    Project as returned to callers.

    contractorDetails is a read-only view resolved from the contractor
    directory at response time; applicantsCount is always the length
    of workers in the same response.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: uuid.UUID
    title: str
    description: str | None
    location: str
    project_type: ProjectType
    employment_type: EmploymentType
    timeline: TimelineOut
    hourly_rate: HourlyRateOut | None
    status: ProjectStatus
    contractor: str
    contractor_details: dict[str, Any] | None = None
    workers: list[ApplicationOut]
    applicants_count: int
    progress: int
    created_at: datetime.datetime
    updated_at: datetime.datetime

    @classmethod
    def from_model(
        cls,
        project: Project,
        contractor_details: dict[str, Any] | None = None,
    ) -> ProjectOut:
        workers: list[Application] = list(project.workers)
        hourly_rate = None
        if project.hourly_rate_min is not None or project.hourly_rate_max is not None:
            hourly_rate = HourlyRateOut(
                min=project.hourly_rate_min, max=project.hourly_rate_max,
            )
        return cls(
            id=project.id,
            title=project.title,
            description=project.description,
            location=project.location,
            project_type=ProjectType(project.project_type),
            employment_type=EmploymentType(project.employment_type),
            timeline=TimelineOut(
                start_date=project.start_date, end_date=project.end_date,
            ),
            hourly_rate=hourly_rate,
            status=ProjectStatus(project.status),
            contractor=project.contractor_id,
            contractor_details=contractor_details,
            workers=[ApplicationOut.from_model(app) for app in workers],
            applicants_count=len(workers),
            progress=project.progress,
            created_at=project.created_at,
            updated_at=project.updated_at,
        )


class DeleteResult(BaseModel):
    message: str
