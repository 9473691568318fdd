"""
Application manager — the worker applications embedded in each project.

Operations:
  • apply                  — append a pending application, bump the counter
  • set_application_status — pending → accepted | rejected, once
  • list_applications      — lazy, restartable listing in application order

Atomicity (no lost updates under concurrent applies):
  1. UPDATE projects SET applicants_count = applicants_count + 1,
     version = version + 1 WHERE id = :id AND status = 'active'
     — takes the row lock and increments in the database, never from a
     value read earlier.
  2. INSERT the application. UNIQUE(project_id, worker_id) rejects a
     duplicate in the same statement that would create it.
  3. COMMIT both, or roll both back. There is no partial commit in which
     the count moved without the row (or the reverse).

Status changes are a conditional UPDATE … WHERE status = 'pending', so of
two concurrent reviews exactly one wins; the loser sees a terminal status
and gets InvalidTransitionError.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import AsyncIterator, Mapping
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.application import Application, ApplicationStatus
from app.models.project import Project, ProjectStatus, utcnow
from app.schemas.application import ApplicationCreate
from app.services.errors import ConflictError, NotFoundError, ValidationError
from app.services.lifecycle import check_application_transition
from app.services.project_store import get_project, parse_input
from app.services.storage import (
    commit_or_raise,
    parse_project_id,
    rollback_as_storage_error,
)

logger = logging.getLogger(__name__)


def compose_cover_letter(project_title: str, profile: Mapping[str, Any] | None) -> str:
    """Default cover letter built from the applicant snapshot."""
    profile = profile or {}
    experience = profile.get("yearsOfExperience")
    business_type = profile.get("businessType")
    business_name = profile.get("businessName")
    license_number = profile.get("licenseNumber")

    parts = [f'I am interested in working on your project "{project_title}".']
    if experience is not None and business_type:
        parts.append(f"I have {experience} years of experience in {business_type}.")
    elif experience is not None:
        parts.append(f"I have {experience} years of experience.")
    if business_name:
        parts.append(f"My business name is {business_name}.")
    if license_number:
        parts.append(f"I am licensed (License #: {license_number}).")
    return " ".join(parts)


# ── Apply ───────────────────────────────────────────────────
async def apply(
    session: AsyncSession,
    project_id: uuid.UUID | str,
    worker_id: str,
    submission: ApplicationCreate | Mapping[str, Any] | None = None,
) -> Application:
    """
    Append a pending application for worker_id to the project.

    Raises:
        NotFoundError:  project id does not resolve.
        ConflictError:  the worker already applied, or the project is
                        not active (draft, completed, cancelled).
        StorageError:   the database failed; nothing was written.
    """
    if not worker_id:
        raise ValidationError("worker id is required.")
    pid = parse_project_id(project_id)
    payload = parse_input(ApplicationCreate, submission or {})
    profile = (
        payload.applicant_profile.model_dump(by_alias=True, exclude_none=True)
        if payload.applicant_profile
        else None
    )

    # ── 1. Atomic increment (locks the project row) ─────────
    now = utcnow()
    try:
        result = await session.execute(
            update(Project)
            .where(
                Project.id == pid,
                Project.status == ProjectStatus.ACTIVE.value,
            )
            .values(
                applicants_count=Project.applicants_count + 1,
                version=Project.version + 1,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        title = None
        if result.rowcount:
            title = await session.scalar(select(Project.title).where(Project.id == pid))
    except SQLAlchemyError as exc:
        raise await rollback_as_storage_error(session, "apply to project", exc) from exc

    if title is None:
        await session.rollback()
        project = await get_project(session, pid)  # raises NotFoundError
        raise ConflictError(
            f"Project '{pid}' is not accepting applications "
            f"(status: {project.status}).",
            project_id=str(pid),
            status=project.status,
        )

    # ── 2. Insert the application ───────────────────────────
    application = Application(
        project_id=pid,
        worker_id=worker_id,
        status=ApplicationStatus.PENDING.value,
        applied_at=now,
        cover_letter=payload.cover_letter or compose_cover_letter(title, profile),
        expected_rate=payload.expected_rate,
        applicant_profile=profile,
    )
    session.add(application)
    try:
        await session.flush()
    except IntegrityError as exc:
        await session.rollback()
        raise ConflictError(
            f"Worker '{worker_id}' has already applied to project '{pid}'.",
            project_id=str(pid),
            worker_id=worker_id,
        ) from exc
    except SQLAlchemyError as exc:
        raise await rollback_as_storage_error(session, "apply to project", exc) from exc

    # ── 3. Commit both together ─────────────────────────────
    await commit_or_raise(session, "apply to project")

    logger.info("Worker %s applied to project %s", worker_id, pid)
    return application


# ── Review ──────────────────────────────────────────────────
async def _find_application(
    session: AsyncSession,
    project_id: uuid.UUID,
    worker_id: str,
) -> Application | None:
    stmt = (
        select(Application)
        .where(
            Application.project_id == project_id,
            Application.worker_id == worker_id,
        )
        .execution_options(populate_existing=True)
    )
    try:
        result = await session.execute(stmt)
    except SQLAlchemyError as exc:
        raise await rollback_as_storage_error(session, "load application", exc) from exc
    return result.scalar_one_or_none()


async def set_application_status(
    session: AsyncSession,
    project_id: uuid.UUID | str,
    worker_id: str,
    new_status: ApplicationStatus | str,
) -> Application:
    """
    Move one application to new_status.

    Same status as now → returned unchanged (no write).
    Current status terminal → InvalidTransitionError, nothing changes.
    """
    try:
        target = ApplicationStatus(new_status)
    except ValueError as exc:
        raise ValidationError(
            f"Unknown application status '{new_status}'.",
            allowed=[s.value for s in ApplicationStatus],
        ) from exc
    pid = parse_project_id(project_id)

    if target is not ApplicationStatus.PENDING:
        try:
            result = await session.execute(
                update(Application)
                .where(
                    Application.project_id == pid,
                    Application.worker_id == worker_id,
                    Application.status == ApplicationStatus.PENDING.value,
                )
                .values(status=target.value, reviewed_at=utcnow())
                .execution_options(synchronize_session=False)
            )
            if result.rowcount:
                await session.execute(
                    update(Project)
                    .where(Project.id == pid)
                    .values(updated_at=utcnow())
                    .execution_options(synchronize_session=False)
                )
        except SQLAlchemyError as exc:
            raise await rollback_as_storage_error(
                session, "update application status", exc,
            ) from exc

        if result.rowcount:
            await commit_or_raise(session, "update application status")
            logger.info(
                "Application of worker %s to project %s %s",
                worker_id, pid, target.value,
            )
            application = await _find_application(session, pid, worker_id)
            if application is not None:
                return application
        else:
            await session.rollback()

    # Nothing was updated: explain why.
    application = await _find_application(session, pid, worker_id)
    if application is None:
        await get_project(session, pid)  # NotFoundError for the project itself
        raise NotFoundError(
            f"Worker '{worker_id}' has not applied to project '{pid}'.",
            project_id=str(pid),
            worker_id=worker_id,
        )
    check_application_transition(ApplicationStatus(application.status), target)
    return application


# ── Listing ─────────────────────────────────────────────────
class ApplicationListing:
    """
    Lazy, finite, restartable view of a project's applications.

    Each `async for` runs its own keyset-paged query from the first
    applicant onward, so iterating twice gives two fresh passes.
    """

    def __init__(
        self,
        session: AsyncSession,
        project_id: uuid.UUID,
        status: ApplicationStatus | None = None,
        batch_size: int | None = None,
    ) -> None:
        self._session = session
        self.project_id = project_id
        self.status = status
        self._batch_size = batch_size or settings.LIST_BATCH_SIZE

    def __aiter__(self) -> AsyncIterator[Application]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[Application]:
        last_id = 0
        while True:
            stmt = (
                select(Application)
                .where(
                    Application.project_id == self.project_id,
                    Application.id > last_id,
                )
                .order_by(Application.id)
                .limit(self._batch_size)
            )
            if self.status is not None:
                stmt = stmt.where(Application.status == self.status.value)
            try:
                result = await self._session.execute(stmt)
            except SQLAlchemyError as exc:
                raise await rollback_as_storage_error(
                    self._session, "list applications", exc,
                ) from exc

            page = list(result.scalars().all())
            for application in page:
                yield application
            if len(page) < self._batch_size:
                return
            last_id = page[-1].id

    async def count(self) -> int:
        stmt = select(func.count()).where(Application.project_id == self.project_id)
        if self.status is not None:
            stmt = stmt.where(Application.status == self.status.value)
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def to_list(self) -> list[Application]:
        return [application async for application in self]


async def list_applications(
    session: AsyncSession,
    project_id: uuid.UUID | str,
    status: ApplicationStatus | str | None = None,
) -> ApplicationListing:
    """
    Applications of one project, optionally filtered by status, in
    application order. NotFoundError if the project does not exist.
    """
    status_filter: ApplicationStatus | None = None
    if status is not None:
        try:
            status_filter = ApplicationStatus(status)
        except ValueError as exc:
            raise ValidationError(f"Unknown application status '{status}'.") from exc

    project = await get_project(session, project_id)
    return ApplicationListing(session, project.id, status_filter)
