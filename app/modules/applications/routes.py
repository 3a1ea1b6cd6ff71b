from fastapi import APIRouter, Depends
from app.core.dependencies import (
    get_document_store, get_user_service, get_current_user, require_permission,
    check_workshop_owner
)
from app.core.exceptions import ForbiddenError, FormValidationError, NotFoundError, StoreError
from app.core.inflight import single_flight
from app.database.document_store import DocumentStore
from app.modules.applications.schemas import (
    ApplicationCreate, ApplicationResponse, ApplicationReviewResponse, StudentDashboardResponse
)
from app.modules.applications.service import ApplicationService
from app.modules.applications.workflow import ApplicationEvent
from app.modules.forms.renderer import SubmissionForm, render_preview
from app.modules.users.schemas import UserResponse
from app.modules.users.service import UserService
from app.modules.workshops.routes import get_workshop_service
from app.modules.workshops.schemas import WorkshopStatus
from app.modules.workshops.service import WorkshopService
from typing import List
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["applications"])


def get_application_service(
    store: DocumentStore = Depends(get_document_store),
    workshop_service: WorkshopService = Depends(get_workshop_service)
) -> ApplicationService:
    return ApplicationService(store, workshop_service)


# Guarded handlers are plain def so they run in the threadpool and concurrent duplicates overlap
@router.post("/workshops/{workshop_id}/applications", response_model=ApplicationResponse, status_code=201)
def submit_application(
    workshop_id: str,
    application_data: ApplicationCreate,
    user: UserResponse = Depends(require_permission("applications:create")),
    workshop_service: WorkshopService = Depends(get_workshop_service),
    service: ApplicationService = Depends(get_application_service)
):
    """
    Apply to a published workshop.

    Answers are checked against the workshop's application form first; nothing
    is stored while any field has an error.
    """
    with single_flight(user.id, "apply", workshop_id):
        workshop = workshop_service.get_workshop_by_id(workshop_id)
        if workshop.status != WorkshopStatus.PUBLISHED:
            raise NotFoundError("This workshop is not available for viewing.", redirect_to="/workshops")

        form = SubmissionForm(
            workshop.application_form,
            on_submit=lambda responses: service.create_application(workshop, user.id, responses),
            form_color=workshop.form_color,
        )
        form.fill(application_data.responses)
        application = form.submit()
        if form.errors:
            raise FormValidationError(form.errors)
        if form.submit_error:
            raise StoreError(form.submit_error)
        return application


@router.get("/workshops/{workshop_id}/applications", response_model=List[ApplicationResponse])
async def list_workshop_applications(
    workshop_id: str,
    user: UserResponse = Depends(require_permission("applications:review")),
    workshop_service: WorkshopService = Depends(get_workshop_service),
    service: ApplicationService = Depends(get_application_service)
):
    """Applications to a workshop (owner only)"""
    check_workshop_owner(workshop_service.get_workshop_by_id(workshop_id), user)
    return service.list_by_workshop(workshop_id)


@router.get("/applications/mine", response_model=StudentDashboardResponse)
async def list_my_applications(
    user: UserResponse = Depends(require_permission("applications:read_own")),
    service: ApplicationService = Depends(get_application_service)
):
    """Student dashboard: own applications with their workshops and counts"""
    return service.list_by_student(user.id)


@router.get("/applications/{application_id}", response_model=ApplicationResponse)
async def get_application(
    application_id: str,
    user: UserResponse = Depends(get_current_user),
    workshop_service: WorkshopService = Depends(get_workshop_service),
    service: ApplicationService = Depends(get_application_service)
):
    """Get application by ID (the applicant or the workshop's master)"""
    application = service.get_application_by_id(application_id)
    if application.student_id == user.id:
        return application
    workshop = workshop_service.get_workshop_by_id(application.workshop_id)
    if workshop.master_id != user.id:
        raise ForbiddenError("Application not accessible")
    return application


@router.get("/applications/{application_id}/review", response_model=ApplicationReviewResponse)
async def review_application(
    application_id: str,
    user: UserResponse = Depends(require_permission("applications:review")),
    workshop_service: WorkshopService = Depends(get_workshop_service),
    user_service: UserService = Depends(get_user_service),
    service: ApplicationService = Depends(get_application_service)
):
    """The submitted answers laid out in the workshop's form, read-only (owner only)"""
    application = service.get_application_by_id(application_id)
    workshop = workshop_service.get_workshop_by_id(application.workshop_id)
    check_workshop_owner(workshop, user)
    try:
        student = user_service.get_user_by_id(application.student_id)
    except NotFoundError:
        student = None
    return ApplicationReviewResponse(
        application=application,
        workshop=workshop,
        student=student,
        form=render_preview(workshop.application_form, form_color=workshop.form_color,
                            responses=application.responses),
    )


def _review(
    application_id: str,
    event: ApplicationEvent,
    user: UserResponse,
    workshop_service: WorkshopService,
    service: ApplicationService
) -> ApplicationResponse:
    with single_flight(user.id, "review", application_id):
        application = service.get_application_by_id(application_id)
        check_workshop_owner(workshop_service.get_workshop_by_id(application.workshop_id), user)
        return service.review_application(application, event)


@router.post("/applications/{application_id}/approve", response_model=ApplicationResponse)
def approve_application(
    application_id: str,
    user: UserResponse = Depends(require_permission("applications:review")),
    workshop_service: WorkshopService = Depends(get_workshop_service),
    service: ApplicationService = Depends(get_application_service)
):
    return _review(application_id, ApplicationEvent.APPROVE, user, workshop_service, service)


@router.post("/applications/{application_id}/reject", response_model=ApplicationResponse)
def reject_application(
    application_id: str,
    user: UserResponse = Depends(require_permission("applications:review")),
    workshop_service: WorkshopService = Depends(get_workshop_service),
    service: ApplicationService = Depends(get_application_service)
):
    return _review(application_id, ApplicationEvent.REJECT, user, workshop_service, service)
