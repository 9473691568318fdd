"""
Matching API — the operation surface external callers (HTTP, UI) use.

Each operation takes the caller's resolved Identity explicitly, checks
role and ownership against it, and delegates to the project store or
the application manager. No operation reads ambient request state.

  post_project               contractor   create a posting they own
  update_own_project         owner        partial edit of their posting
  delete_own_project         owner        remove posting + applications
  apply_to_project           worker       apply with a profile snapshot
  review_application         owner        accept / reject an application
  list_project_applications  owner        applications, optionally filtered
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.identity import Identity
from app.models.application import Application, ApplicationStatus
from app.models.project import Project
from app.schemas.application import ApplicationCreate
from app.schemas.project import ProjectCreate, ProjectPost, ProjectUpdate
from app.services import applications, project_store
from app.services.applications import ApplicationListing
from app.services.errors import ForbiddenError, NotFoundError, ValidationError
from app.services.project_store import parse_input

logger = logging.getLogger(__name__)

REVIEW_DECISIONS = frozenset({ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED})


def _require_contractor(identity: Identity) -> None:
    if not identity.is_contractor:
        raise ForbiddenError("This action requires a contractor account.")


def _require_worker(identity: Identity) -> None:
    if not identity.is_worker:
        raise ForbiddenError("This action requires a worker account.")


async def _owned_project(
    session: AsyncSession,
    identity: Identity,
    project_id: uuid.UUID | str,
) -> Project:
    """Load a project and make sure the caller is its contractor."""
    _require_contractor(identity)
    project = await project_store.get_project(session, project_id)
    if project.contractor_id != identity.subject_id:
        logger.info(
            "Contractor %s denied access to project %s owned by %s",
            identity.subject_id, project.id, project.contractor_id,
        )
        raise ForbiddenError("Only the project's contractor may do this.")
    return project


async def post_project(
    session: AsyncSession,
    identity: Identity,
    fields: ProjectPost | Mapping[str, Any],
) -> Project:
    """Create a project owned by the calling contractor (status active by default)."""
    _require_contractor(identity)
    posting = parse_input(ProjectPost, fields)
    if posting.contractor is not None and posting.contractor != identity.subject_id:
        raise ForbiddenError("Projects can only be posted for your own account.")

    data = posting.model_dump(exclude={"contractor"})
    data["contractor"] = identity.subject_id
    return await project_store.create_project(session, ProjectCreate.model_validate(data))


async def update_own_project(
    session: AsyncSession,
    identity: Identity,
    project_id: uuid.UUID | str,
    patch: ProjectUpdate | Mapping[str, Any],
) -> Project:
    payload = parse_input(ProjectUpdate, patch)
    project = await _owned_project(session, identity, project_id)
    return await project_store.update_project(session, project.id, payload)


async def delete_own_project(
    session: AsyncSession,
    identity: Identity,
    project_id: uuid.UUID | str,
) -> bool:
    """
    Delete the caller's project. An already-absent project is not an
    error (returns False); someone else's project is.
    """
    try:
        project = await _owned_project(session, identity, project_id)
    except NotFoundError:
        return False
    return await project_store.delete_project(session, project.id)


async def apply_to_project(
    session: AsyncSession,
    identity: Identity,
    project_id: uuid.UUID | str,
    submission: ApplicationCreate | Mapping[str, Any],
) -> Application:
    """
    Apply the calling worker to a project.

    The submission must carry the worker's profile snapshot; it is stored
    by value with the application and never refreshed afterwards.
    """
    _require_worker(identity)
    payload = parse_input(ApplicationCreate, submission)
    if payload.applicant_profile is None:
        raise ValidationError(
            "applicantProfile is required: business name, experience and "
            "license as they should be shown to the contractor.",
        )
    return await applications.apply(session, project_id, identity.subject_id, payload)


async def review_application(
    session: AsyncSession,
    identity: Identity,
    project_id: uuid.UUID | str,
    worker_id: str,
    decision: ApplicationStatus | str,
) -> Application:
    """Accept or reject one application. Owning contractor only."""
    try:
        target = ApplicationStatus(decision)
    except ValueError as exc:
        raise ValidationError(f"Unknown decision '{decision}'.") from exc
    if target not in REVIEW_DECISIONS:
        raise ValidationError("A review decision must be 'accepted' or 'rejected'.")

    project = await _owned_project(session, identity, project_id)
    return await applications.set_application_status(
        session, project.id, worker_id, target,
    )


async def list_project_applications(
    session: AsyncSession,
    identity: Identity,
    project_id: uuid.UUID | str,
    status: ApplicationStatus | str | None = None,
) -> ApplicationListing:
    project = await _owned_project(session, identity, project_id)
    return await applications.list_applications(session, project.id, status)
