"""
Projects router — browsing and contractor management of postings.

GET    /projects           — all postings, optionally by contractor/builder
GET    /projects/{id}      — one posting with workers + contractorDetails
POST   /projects           — contractor posts a new project (201)
PUT    /projects/{id}      — owning contractor edits a posting
DELETE /projects/{id}      — owning contractor removes a posting

Browsing is public; writes require an API key. Ownership and role are
checked by app.services.matching, not here.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import CurrentIdentity
from app.core.database import get_db_session
from app.schemas.project import (
    DeleteResult,
    ProjectFilter,
    ProjectOut,
    ProjectPost,
    ProjectUpdate,
)
from app.services import matching, project_store
from app.services.directory import ContractorDirectory, get_directory

router = APIRouter(tags=["Projects"])

DbSession = Annotated[AsyncSession, Depends(get_db_session)]
Directory = Annotated[ContractorDirectory, Depends(get_directory)]


@router.get(
    "",
    response_model=list[ProjectOut],
    summary="List project postings",
    description=(
        "All projects in posting order. `contractor` (or its alias "
        "`builder`) restricts the list to one contractor's postings."
    ),
)
async def list_projects(
    session: DbSession,
    directory: Directory,
    contractor: str | None = None,
    builder: str | None = None,
) -> list[ProjectOut]:
    projects = await project_store.list_projects(
        session, ProjectFilter(contractor=contractor, builder=builder),
    )
    details = await directory.get_contractors(p.contractor_id for p in projects)
    return [
        ProjectOut.from_model(project, details.get(project.contractor_id))
        for project in projects
    ]


@router.get(
    "/{project_id}",
    response_model=ProjectOut,
    summary="Get one project",
)
async def get_project(
    project_id: str,
    session: DbSession,
    directory: Directory,
) -> ProjectOut:
    project = await project_store.get_project(session, project_id)
    details = await directory.get_contractor(project.contractor_id)
    return ProjectOut.from_model(project, details)


@router.post(
    "",
    response_model=ProjectOut,
    status_code=status.HTTP_201_CREATED,
    summary="Post a new project",
    description=(
        "Creates a posting owned by the calling contractor. "
        "applicantsCount starts at 0 and is maintained by the server."
    ),
)
async def create_project(
    payload: ProjectPost,
    session: DbSession,
    caller: CurrentIdentity,
    directory: Directory,
) -> ProjectOut:
    project = await matching.post_project(session, caller, payload)
    details = await directory.get_contractor(project.contractor_id)
    return ProjectOut.from_model(project, details)


@router.put(
    "/{project_id}",
    response_model=ProjectOut,
    summary="Edit a project",
    description="Partial update. Fields absent from the body are unchanged.",
)
async def update_project(
    project_id: str,
    payload: ProjectUpdate,
    session: DbSession,
    caller: CurrentIdentity,
    directory: Directory,
) -> ProjectOut:
    project = await matching.update_own_project(session, caller, project_id, payload)
    details = await directory.get_contractor(project.contractor_id)
    return ProjectOut.from_model(project, details)


@router.delete(
    "/{project_id}",
    response_model=DeleteResult,
    summary="Delete a project",
    description="Removes the project and its applications. Deleting twice is fine.",
)
async def delete_project(
    project_id: str,
    session: DbSession,
    caller: CurrentIdentity,
) -> DeleteResult:
    await matching.delete_own_project(session, caller, project_id)
    return DeleteResult(message="Project deleted")
