"""
Applications router — workers applying, contractors reviewing.

POST /projects/{id}/applications             — worker applies (201)
GET  /projects/{id}/applications?status=     — owning contractor lists
PUT  /projects/{id}/applications/{worker_id} — owning contractor accepts/rejects
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import CurrentIdentity
from app.core.database import get_db_session
from app.models.application import ApplicationStatus
from app.schemas.application import ApplicationCreate, ApplicationOut, ApplicationReview
from app.services import matching

router = APIRouter(tags=["Applications"])

DbSession = Annotated[AsyncSession, Depends(get_db_session)]


@router.post(
    "/{project_id}/applications",
    response_model=ApplicationOut,
    status_code=status.HTTP_201_CREATED,
    summary="Apply to a project",
    description=(
        "The calling worker applies with a snapshot of their business "
        "profile. One application per worker per project."
    ),
)
async def apply_to_project(
    project_id: str,
    payload: ApplicationCreate,
    session: DbSession,
    caller: CurrentIdentity,
) -> ApplicationOut:
    application = await matching.apply_to_project(session, caller, project_id, payload)
    return ApplicationOut.from_model(application)


@router.get(
    "/{project_id}/applications",
    response_model=list[ApplicationOut],
    summary="List a project's applications",
    description="Application order. `status` narrows to pending/accepted/rejected.",
)
async def list_applications(
    project_id: str,
    session: DbSession,
    caller: CurrentIdentity,
    status_filter: Annotated[ApplicationStatus | None, Query(alias="status")] = None,
) -> list[ApplicationOut]:
    listing = await matching.list_project_applications(
        session, caller, project_id, status_filter,
    )
    return [ApplicationOut.from_model(app) async for app in listing]


@router.put(
    "/{project_id}/applications/{worker_id}",
    response_model=ApplicationOut,
    summary="Accept or reject an application",
)
async def review_application(
    project_id: str,
    worker_id: str,
    payload: ApplicationReview,
    session: DbSession,
    caller: CurrentIdentity,
) -> ApplicationOut:
    application = await matching.review_application(
        session, caller, project_id, worker_id, payload.status,
    )
    return ApplicationOut.from_model(application)
