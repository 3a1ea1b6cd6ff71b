"""
Application status workflow.

    pending --approve--> approved
    pending --reject---> rejected

approved and rejected are terminal. The initial status is decided once, from
the workshop's auto_approve flag at the moment the application is created;
changing the flag later does not touch existing applications.
"""
from enum import Enum

from app.core.exceptions import ConflictError


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ApplicationEvent(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


TRANSITIONS = {
    (ApplicationStatus.PENDING, ApplicationEvent.APPROVE): ApplicationStatus.APPROVED,
    (ApplicationStatus.PENDING, ApplicationEvent.REJECT): ApplicationStatus.REJECTED,
}

TERMINAL_STATUSES = (ApplicationStatus.APPROVED, ApplicationStatus.REJECTED)


def initial_status(auto_approve: bool) -> ApplicationStatus:
    return ApplicationStatus.APPROVED if auto_approve else ApplicationStatus.PENDING


def next_status(current: ApplicationStatus, event: ApplicationEvent) -> ApplicationStatus:
    """Status after event, or ConflictError when the application can no longer move that way"""
    current = ApplicationStatus(current)
    if current in TERMINAL_STATUSES:
        raise ConflictError(f"Application is already {current.value}")
    return TRANSITIONS[(current, ApplicationEvent(event))]
