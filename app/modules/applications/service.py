from app.core.exceptions import ConflictError, NotFoundError, StoreError
from app.database.document_store import DocumentStore, APPLICATIONS, Equal, OrderDesc, StaleRecordError
from app.modules.applications.schemas import (
    ApplicationResponse, ApplicationWithWorkshop, StudentDashboardResponse
)
from app.modules.applications.workflow import (
    ApplicationEvent, ApplicationStatus, initial_status, next_status
)
from app.modules.forms.codec import dump_responses
from app.modules.workshops.schemas import WorkshopResponse
from app.modules.workshops.service import WorkshopService
from typing import Any, Dict, List, Optional
from fastapi import HTTPException
from datetime import datetime
import logging

logger = logging.getLogger(__name__)


class ApplicationService:
    def __init__(self, store: DocumentStore, workshop_service: WorkshopService):
        self.store = store
        self.workshop_service = workshop_service

    def create_application(
        self,
        workshop: WorkshopResponse,
        student_id: str,
        responses: Dict[str, Any]
    ) -> ApplicationResponse:
        """Store a submitted application. Its status comes from the workshop's auto_approve flag as read now."""
        status = initial_status(workshop.auto_approve)
        try:
            record = self.store.create(APPLICATIONS, {
                "workshop_id": workshop.id,
                "student_id": student_id,
                "responses": dump_responses(responses),
                "status": status.value,
            })
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating application to {workshop.id} by {student_id}: {str(e)}")
            raise StoreError("Failed to create application") from e
        logger.info(f"Application {record.get('id')} to workshop {workshop.id} created as {status.value}")
        return ApplicationResponse.from_record(record)

    def get_application_by_id(self, application_id: str) -> ApplicationResponse:
        try:
            return ApplicationResponse.from_record(self.store.get(APPLICATIONS, application_id))
        except NotFoundError:
            raise NotFoundError("Application not found")
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error fetching application {application_id}: {str(e)}")
            raise StoreError("Failed to fetch application") from e

    def list_by_workshop(self, workshop_id: str) -> List[ApplicationResponse]:
        """Applications to one workshop, newest first"""
        try:
            result = self.store.list(APPLICATIONS, [Equal("workshop_id", workshop_id), OrderDesc("created_at")])
        except Exception as e:
            logger.error(f"Error listing applications of workshop {workshop_id}: {str(e)}")
            raise StoreError("Failed to fetch workshop applications") from e
        return [ApplicationResponse.from_record(r) for r in result.records]

    def list_by_student(self, student_id: str) -> StudentDashboardResponse:
        """A student's applications, newest first, each with the workshop it was made to"""
        try:
            result = self.store.list(APPLICATIONS, [Equal("student_id", student_id), OrderDesc("created_at")])
        except Exception as e:
            logger.error(f"Error listing applications of student {student_id}: {str(e)}")
            raise StoreError("Failed to fetch student applications") from e

        workshops: Dict[str, Optional[WorkshopResponse]] = {}
        applications = []
        for record in result.records:
            application = ApplicationResponse.from_record(record)
            if application.workshop_id not in workshops:
                workshops[application.workshop_id] = self._find_workshop(application.workshop_id)
            applications.append(ApplicationWithWorkshop(
                **application.model_dump(),
                workshop=workshops[application.workshop_id],
            ))
        return StudentDashboardResponse.from_applications(applications)

    def _find_workshop(self, workshop_id: str) -> Optional[WorkshopResponse]:
        try:
            return self.workshop_service.get_workshop_by_id(workshop_id)
        except NotFoundError:
            return None

    def review_application(self, application: ApplicationResponse, event: ApplicationEvent) -> ApplicationResponse:
        """
        Approve or reject a pending application.

        The write is conditional on the stored status still being pending, so
        of two concurrent reviews only one lands; the other gets 409.
        """
        target = next_status(application.status, event)
        try:
            record = self.store.update(
                APPLICATIONS,
                application.id,
                {"status": target.value, "updated_at": datetime.utcnow().isoformat()},
                expected={"status": ApplicationStatus.PENDING.value},
            )
        except StaleRecordError:
            raise ConflictError("Application has already been reviewed")
        except NotFoundError:
            raise NotFoundError("Application not found")
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating application {application.id}: {str(e)}")
            raise StoreError("Failed to update application") from e
        logger.info(f"Application {application.id} {target.value}")
        return ApplicationResponse.from_record(record)
