"""
Status transition rules for projects and applications.

Both state machines are one-directional:

    project:      draft → active → completed | cancelled
    application:  pending → accepted | rejected

Re-asserting the current status is a no-op and always allowed; every
other move out of a terminal status is rejected.
"""

from __future__ import annotations

from app.models.application import ApplicationStatus
from app.models.project import ProjectStatus
from app.services.errors import InvalidTransitionError

PROJECT_TRANSITIONS: dict[ProjectStatus, frozenset[ProjectStatus]] = {
    ProjectStatus.DRAFT: frozenset({ProjectStatus.ACTIVE}),
    ProjectStatus.ACTIVE: frozenset(
        {ProjectStatus.COMPLETED, ProjectStatus.CANCELLED}
    ),
    ProjectStatus.COMPLETED: frozenset(),
    ProjectStatus.CANCELLED: frozenset(),
}

APPLICATION_TRANSITIONS: dict[ApplicationStatus, frozenset[ApplicationStatus]] = {
    ApplicationStatus.PENDING: frozenset(
        {ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED}
    ),
    ApplicationStatus.ACCEPTED: frozenset(),
    ApplicationStatus.REJECTED: frozenset(),
}

# Statuses a project may be created in.
INITIAL_PROJECT_STATUSES = frozenset({ProjectStatus.DRAFT, ProjectStatus.ACTIVE})


def is_terminal_project_status(status: ProjectStatus) -> bool:
    return not PROJECT_TRANSITIONS[status]


def is_terminal_application_status(status: ApplicationStatus) -> bool:
    return not APPLICATION_TRANSITIONS[status]


def check_project_transition(
    current: ProjectStatus,
    target: ProjectStatus,
) -> bool:
    """
    Validate a project status change.

    Returns False when target == current (nothing to do), True when the
    move is allowed. Raises InvalidTransitionError otherwise.
    """
    if current == target:
        return False
    if target not in PROJECT_TRANSITIONS[current]:
        raise InvalidTransitionError(
            f"Project status cannot change from '{current.value}' "
            f"to '{target.value}'.",
            current=current.value,
            requested=target.value,
        )
    return True


def check_application_transition(
    current: ApplicationStatus,
    target: ApplicationStatus,
) -> bool:
    """Same contract as check_project_transition, for applications."""
    if current == target:
        return False
    if target not in APPLICATION_TRANSITIONS[current]:
        raise InvalidTransitionError(
            f"Application status cannot change from '{current.value}' "
            f"to '{target.value}'.",
            current=current.value,
            requested=target.value,
        )
    return True
