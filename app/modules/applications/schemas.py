from pydantic import BaseModel
from typing import Optional, List, Dict, Any
from app.modules.applications.workflow import ApplicationStatus
from app.modules.forms.codec import parse_responses
from app.modules.forms.renderer import RenderedForm
from app.modules.users.schemas import UserResponse
from app.modules.workshops.schemas import WorkshopResponse


class ApplicationCreate(BaseModel):
    responses: Dict[str, Any] = {}
    # Sent by older clients; the server decides the status
    status: Optional[str] = None


class ApplicationResponse(BaseModel):
    id: str
    workshop_id: str
    student_id: str
    responses: Dict[str, Any] = {}
    status: ApplicationStatus = ApplicationStatus.PENDING
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "ApplicationResponse":
        status = record.get("status")
        created_at = record.get("created_at")
        updated_at = record.get("updated_at")
        return cls(
            id=str(record.get("id") or ""),
            workshop_id=str(record.get("workshop_id") or ""),
            student_id=str(record.get("student_id") or ""),
            responses=parse_responses(record.get("responses")),
            status=status if status in {s.value for s in ApplicationStatus} else ApplicationStatus.PENDING,
            created_at=created_at if isinstance(created_at, str) else None,
            updated_at=updated_at if isinstance(updated_at, str) else None,
        )


class ApplicationWithWorkshop(ApplicationResponse):
    # None when the workshop has since been deleted
    workshop: Optional[WorkshopResponse] = None


class StudentDashboardResponse(BaseModel):
    applications: List[ApplicationWithWorkshop]
    total_applications: int
    approved_applications: int
    pending_applications: int

    @classmethod
    def from_applications(cls, applications: List[ApplicationWithWorkshop]) -> "StudentDashboardResponse":
        return cls(
            applications=applications,
            total_applications=len(applications),
            approved_applications=sum(1 for a in applications if a.status == ApplicationStatus.APPROVED),
            pending_applications=sum(1 for a in applications if a.status == ApplicationStatus.PENDING),
        )


class ApplicationReviewResponse(BaseModel):
    """What a master sees when reviewing: the form as asked, filled with the stored answers."""
    application: ApplicationResponse
    workshop: WorkshopResponse
    student: Optional[UserResponse] = None
    form: RenderedForm
