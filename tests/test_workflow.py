import pytest

from app.core.exceptions import ConflictError
from app.modules.applications.workflow import (
    ApplicationEvent, ApplicationStatus, TERMINAL_STATUSES, TRANSITIONS, initial_status, next_status,
)


def test_initial_status_follows_auto_approve():
    assert initial_status(True) == ApplicationStatus.APPROVED
    assert initial_status(False) == ApplicationStatus.PENDING


def test_pending_can_be_approved_or_rejected():
    assert next_status(ApplicationStatus.PENDING, ApplicationEvent.APPROVE) == ApplicationStatus.APPROVED
    assert next_status("pending", "reject") == ApplicationStatus.REJECTED


@pytest.mark.parametrize("current", [ApplicationStatus.APPROVED, ApplicationStatus.REJECTED])
@pytest.mark.parametrize("event", list(ApplicationEvent))
def test_reviewed_applications_are_terminal(current, event):
    with pytest.raises(ConflictError) as exc_info:
        next_status(current, event)
    assert exc_info.value.status_code == 409
    assert exc_info.value.detail == f"Application is already {current.value}"


def test_no_transition_leaves_a_terminal_status():
    assert all(current not in TERMINAL_STATUSES for current, _ in TRANSITIONS)
    assert set(TRANSITIONS.values()) == set(TERMINAL_STATUSES)
