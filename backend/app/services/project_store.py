"""
Project store — durable storage and retrieval of project postings.

Operations:
  • list_projects / iter_projects — filter by contractor (alias: builder)
  • get_project                   — by id, NotFoundError if absent
  • create_project                — validate, assign id + timestamps
  • update_project                — partial merge with lifecycle checks
  • delete_project                — removes the project and its applications

applicants_count is never taken from a caller. It is 0 at creation,
incremented atomically by apply, and re-derived from the loaded workers
on every contractor edit (guarded by the version column, so an edit that
raced an apply fails with ConflictError instead of writing a stale count).
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import AsyncIterator, Mapping
from decimal import Decimal
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import and_, delete, false, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.application import Application
from app.models.project import Project, ProjectStatus
from app.schemas.project import ProjectCreate, ProjectFilter, ProjectUpdate
from app.services.errors import MarketplaceError, NotFoundError, ValidationError
from app.services.lifecycle import check_project_transition
from app.services.storage import (
    commit_or_raise,
    parse_project_id,
    rollback_as_storage_error,
)

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def parse_input(schema: type[SchemaT], data: SchemaT | Mapping[str, Any]) -> SchemaT:
    """Validate raw caller data against a schema, as a domain ValidationError."""
    if isinstance(data, schema):
        return data
    try:
        return schema.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(
            f"Invalid {schema.__name__} data.",
            errors=exc.errors(include_url=False, include_context=False, include_input=False),
        ) from exc


# ── Reads ───────────────────────────────────────────────────
def _filter_clause(filters: ProjectFilter | None):  # type: ignore[no-untyped-def]
    """
    `builder` is the marketplace's other name for the owning contractor.
    Both given and different → nothing can match.
    """
    if filters is None:
        return None
    owners = {value for value in (filters.contractor, filters.builder) if value}
    if not owners:
        return None
    if len(owners) > 1:
        return false()
    return Project.contractor_id == owners.pop()


async def iter_projects(
    session: AsyncSession,
    filters: ProjectFilter | None = None,
    batch_size: int | None = None,
) -> AsyncIterator[Project]:
    """
    Yield matching projects in posting order, one keyset page at a time.

    Memory stays bounded by batch_size no matter how many projects match.
    """
    size = batch_size or settings.LIST_BATCH_SIZE
    clause = _filter_clause(filters)
    last: Project | None = None

    while True:
        stmt = select(Project).order_by(Project.created_at, Project.id).limit(size)
        if clause is not None:
            stmt = stmt.where(clause)
        if last is not None:
            stmt = stmt.where(
                or_(
                    Project.created_at > last.created_at,
                    and_(
                        Project.created_at == last.created_at,
                        Project.id > last.id,
                    ),
                )
            )
        try:
            result = await session.execute(stmt)
        except SQLAlchemyError as exc:
            raise await rollback_as_storage_error(session, "list projects", exc) from exc

        page = list(result.scalars().all())
        for project in page:
            yield project
        if len(page) < size:
            return
        last = page[-1]


async def list_projects(
    session: AsyncSession,
    filters: ProjectFilter | None = None,
) -> list[Project]:
    """All projects matching the filter (empty filter = all), posting order."""
    return [project async for project in iter_projects(session, filters)]


async def get_project(
    session: AsyncSession,
    project_id: uuid.UUID | str,
) -> Project:
    """Load one project with its applications, or raise NotFoundError."""
    pid = parse_project_id(project_id)
    stmt = (
        select(Project)
        .where(Project.id == pid)
        .execution_options(populate_existing=True)
    )
    try:
        result = await session.execute(stmt)
    except SQLAlchemyError as exc:
        raise await rollback_as_storage_error(session, "load project", exc) from exc

    project = result.scalar_one_or_none()
    if project is None:
        raise NotFoundError(f"Project '{pid}' not found.", project_id=str(pid))
    return project


# ── Writes ──────────────────────────────────────────────────
async def create_project(
    session: AsyncSession,
    data: ProjectCreate | Mapping[str, Any],
) -> Project:
    """
    Validate and persist a new project.

    Raises ValidationError when a required field (title, location,
    projectType, employmentType, contractor) is missing or an enum
    value is unknown. Nothing is written in that case.
    """
    payload = parse_input(ProjectCreate, data)

    timeline = payload.timeline
    rate = payload.hourly_rate
    workers: list[Application] = []
    project = Project(
        contractor_id=payload.contractor,
        title=payload.title,
        description=payload.description,
        location=payload.location,
        project_type=payload.project_type.value,
        employment_type=payload.employment_type.value,
        start_date=timeline.start_date if timeline else None,
        end_date=timeline.end_date if timeline else None,
        hourly_rate_min=rate.min if rate else None,
        hourly_rate_max=rate.max if rate else None,
        status=payload.status.value,
        progress=payload.progress,
        workers=workers,
        applicants_count=len(workers),
    )
    session.add(project)
    await commit_or_raise(session, "create project")

    logger.info(
        "Project %s created by contractor %s", project.id, project.contractor_id,
    )
    return project


def _merge_timeline(project: Project, patch: dict[str, Any] | None) -> None:
    if patch is None:
        project.start_date = None
        project.end_date = None
        return
    if "start_date" in patch:
        project.start_date = patch["start_date"]
    if "end_date" in patch:
        project.end_date = patch["end_date"]
    if project.start_date and project.end_date and project.start_date > project.end_date:
        raise ValidationError("timeline.startDate must not be after timeline.endDate.")


def _merge_hourly_rate(project: Project, patch: dict[str, Any] | None) -> None:
    if patch is None:
        project.hourly_rate_min = None
        project.hourly_rate_max = None
        return
    low: Decimal | None = patch.get("min", project.hourly_rate_min)
    high: Decimal | None = patch.get("max", project.hourly_rate_max)
    if (low is None) != (high is None):
        raise ValidationError("hourlyRate needs both min and max.")
    if low is not None and high is not None and low > high:
        raise ValidationError("hourlyRate.min must not exceed hourlyRate.max.")
    project.hourly_rate_min = low
    project.hourly_rate_max = high


async def update_project(
    session: AsyncSession,
    project_id: uuid.UUID | str,
    patch: ProjectUpdate | Mapping[str, Any],
) -> Project:
    """
    Merge a partial patch into an existing project.

    Fields absent from the patch are untouched. A status change must
    follow the project lifecycle (InvalidTransitionError otherwise).
    The contractor reference and server-derived fields cannot be patched.
    """
    changes = parse_input(ProjectUpdate, patch).model_dump(exclude_unset=True)
    project = await get_project(session, project_id)

    try:
        for field, value in changes.items():
            if field == "timeline":
                _merge_timeline(project, value)
            elif field == "hourly_rate":
                _merge_hourly_rate(project, value)
            elif field == "status":
                if check_project_transition(ProjectStatus(project.status), value):
                    project.status = value.value
            elif field in ("project_type", "employment_type"):
                setattr(project, field, value.value)
            else:
                setattr(project, field, value)
    except MarketplaceError:
        # Discard half-applied attribute changes before surfacing the error.
        await session.rollback()
        raise

    project.applicants_count = len(project.workers)
    await commit_or_raise(session, "update project")

    logger.info("Project %s updated (%s)", project.id, ", ".join(sorted(changes)) or "no changes")
    return project


async def delete_project(
    session: AsyncSession,
    project_id: uuid.UUID | str,
) -> bool:
    """
    Remove a project and all of its applications in one transaction.

    Idempotent: deleting an absent (or malformed) id is not an error.
    Returns True when a project was actually removed.
    """
    try:
        pid = parse_project_id(project_id)
    except NotFoundError:
        return False

    try:
        await session.execute(
            delete(Application)
            .where(Application.project_id == pid)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(
            delete(Project)
            .where(Project.id == pid)
            .execution_options(synchronize_session=False)
        )
    except SQLAlchemyError as exc:
        raise await rollback_as_storage_error(session, "delete project", exc) from exc

    await commit_or_raise(session, "delete project")

    existed = result.rowcount > 0
    if existed:
        logger.info("Project %s deleted", pid)
    else:
        logger.debug("Delete of absent project %s ignored", pid)
    return existed
