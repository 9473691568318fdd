"""
Tests for the project and application status machines.
"""
import pytest

from app.models.application import ApplicationStatus
from app.models.project import ProjectStatus
from app.services.errors import InvalidTransitionError
from app.services.lifecycle import (
    check_application_transition,
    check_project_transition,
    is_terminal_application_status,
    is_terminal_project_status,
)


class TestProjectTransitions:

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (ProjectStatus.DRAFT, ProjectStatus.ACTIVE),
            (ProjectStatus.ACTIVE, ProjectStatus.COMPLETED),
            (ProjectStatus.ACTIVE, ProjectStatus.CANCELLED),
        ],
    )
    def test_allowed(self, current, target):
        assert check_project_transition(current, target) is True

    @pytest.mark.parametrize("status", list(ProjectStatus))
    def test_same_status_is_a_no_op(self, status):
        assert check_project_transition(status, status) is False

    @pytest.mark.parametrize("terminal", [ProjectStatus.COMPLETED, ProjectStatus.CANCELLED])
    def test_terminal_statuses_have_no_exit(self, terminal):
        assert is_terminal_project_status(terminal)
        for target in ProjectStatus:
            if target is terminal:
                continue
            with pytest.raises(InvalidTransitionError):
                check_project_transition(terminal, target)

    def test_active_cannot_go_back_to_draft(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            check_project_transition(ProjectStatus.ACTIVE, ProjectStatus.DRAFT)
        assert exc_info.value.details == {"current": "active", "requested": "draft"}


class TestApplicationTransitions:

    @pytest.mark.parametrize("target", [ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED])
    def test_pending_can_be_decided(self, target):
        assert check_application_transition(ApplicationStatus.PENDING, target) is True

    @pytest.mark.parametrize("terminal", [ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED])
    def test_decisions_are_final(self, terminal):
        assert is_terminal_application_status(terminal)
        assert not is_terminal_application_status(ApplicationStatus.PENDING)
        for target in ApplicationStatus:
            if target is terminal:
                continue
            with pytest.raises(InvalidTransitionError):
                check_application_transition(terminal, target)
