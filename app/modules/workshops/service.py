from app.config import settings
from app.core.exceptions import FormValidationError, NotFoundError, StoreError
from app.database.blob_store import BlobStore
from app.database.document_store import (
    DocumentStore, WORKSHOPS, Equal, Limit, Offset, OrderDesc, Search
)
from app.modules.forms.codec import dump_form_schema
from app.modules.forms.schemas import check_publishable
from app.modules.workshops.schemas import (
    WorkshopCreate, WorkshopUpdate, WorkshopResponse, WorkshopListResponse, WorkshopStatus
)
from typing import List, Optional
from fastapi import HTTPException
from datetime import datetime
import logging

logger = logging.getLogger(__name__)

# Columns that may be cleared by sending null; the rest ignore nulls on update
_NULLABLE_COLUMNS = {"price", "capacity", "schedule_type", "start_date", "end_date", "form_color"}


class WorkshopService:
    def __init__(self, store: DocumentStore, blobs: Optional[BlobStore] = None):
        self.store = store
        self.blobs = blobs

    def create_workshop(self, workshop_data: WorkshopCreate, master_id: str) -> WorkshopResponse:
        """Create a new workshop. It starts as a draft, visible only to its master."""
        insert_data = workshop_data.model_dump(mode="json", exclude_none=True)
        insert_data["application_form"] = dump_form_schema(workshop_data.application_form)
        insert_data["master_id"] = master_id
        insert_data["status"] = WorkshopStatus.DRAFT.value
        try:
            record = self.store.create(WORKSHOPS, insert_data)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating workshop for {master_id}: {str(e)}")
            raise StoreError("Failed to create workshop") from e
        logger.info(f"Workshop {record.get('id')} created by {master_id}")
        return WorkshopResponse.from_record(record)

    def get_workshop_by_id(self, workshop_id: str) -> WorkshopResponse:
        """Get workshop by ID"""
        try:
            return WorkshopResponse.from_record(self.store.get(WORKSHOPS, workshop_id))
        except NotFoundError:
            raise NotFoundError("Workshop not found", redirect_to="/workshops")
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error fetching workshop {workshop_id}: {str(e)}")
            raise StoreError("Failed to fetch workshop") from e

    def list_published(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0
    ) -> WorkshopListResponse:
        """Published workshops, newest first. Drafts and cancelled workshops never appear here."""
        filters = [Equal("status", WorkshopStatus.PUBLISHED.value)]
        if search:
            filters.append(Search("title", search))
        if category:
            filters.append(Equal("category", category))
        filters += [
            OrderDesc("created_at"),
            Limit(limit or settings.workshops_page_size),
            Offset(offset),
        ]
        try:
            result = self.store.list(WORKSHOPS, filters)
        except Exception as e:
            logger.error(f"Error listing workshops: {str(e)}")
            raise StoreError("Failed to fetch workshops") from e
        return WorkshopListResponse(
            workshops=[WorkshopResponse.from_record(r) for r in result.records],
            total=result.total
        )

    def list_by_master(self, master_id: str) -> List[WorkshopResponse]:
        """All workshops of one master, any status, newest first"""
        try:
            result = self.store.list(WORKSHOPS, [Equal("master_id", master_id), OrderDesc("created_at")])
        except Exception as e:
            logger.error(f"Error listing workshops of {master_id}: {str(e)}")
            raise StoreError("Failed to fetch master workshops") from e
        return [WorkshopResponse.from_record(r) for r in result.records]

    def _update(self, workshop_id: str, update_data: dict, failure: str) -> WorkshopResponse:
        update_data["updated_at"] = datetime.utcnow().isoformat()
        try:
            return WorkshopResponse.from_record(self.store.update(WORKSHOPS, workshop_id, update_data))
        except NotFoundError:
            raise NotFoundError("Workshop not found", redirect_to="/workshops")
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating workshop {workshop_id}: {str(e)}")
            raise StoreError(failure) from e

    def update_workshop(self, workshop_id: str, workshop_data: WorkshopUpdate) -> WorkshopResponse:
        """Update the fields that were sent. The status is changed through publish/unpublish only."""
        update_data = {
            key: value
            for key, value in workshop_data.model_dump(mode="json", exclude_unset=True).items()
            if value is not None or key in _NULLABLE_COLUMNS
        }
        if workshop_data.application_form is not None:
            update_data["application_form"] = dump_form_schema(workshop_data.application_form)
        return self._update(workshop_id, update_data, "Failed to update workshop")

    def publish_workshop(self, workshop: WorkshopResponse) -> WorkshopResponse:
        """Make a workshop visible to students. Its application form must pass the publish checks."""
        problems = check_publishable(workshop.application_form)
        if problems:
            raise FormValidationError(problems, "Fix the application form before publishing")
        updated = self._update(workshop.id, {"status": WorkshopStatus.PUBLISHED.value}, "Failed to publish workshop")
        logger.info(f"Workshop {workshop.id} published")
        return updated

    def unpublish_workshop(self, workshop: WorkshopResponse) -> WorkshopResponse:
        updated = self._update(workshop.id, {"status": WorkshopStatus.DRAFT.value}, "Failed to unpublish workshop")
        logger.info(f"Workshop {workshop.id} moved back to draft")
        return updated

    def delete_workshop(self, workshop_id: str) -> None:
        """Delete workshop. Cannot be undone."""
        try:
            self.store.delete(WORKSHOPS, workshop_id)
        except Exception as e:
            logger.error(f"Error deleting workshop {workshop_id}: {str(e)}")
            raise StoreError("Failed to delete workshop") from e
        logger.info(f"Workshop {workshop_id} deleted")

    def set_image(self, workshop_id: str, content: bytes, content_type: Optional[str]) -> WorkshopResponse:
        """
        Upload a cover image and link it to the workshop.

        Upload and link are separate store calls. When linking fails the
        uploaded file is deleted again so no unreferenced blob is left behind.
        """
        if not content_type or not content_type.startswith("image/"):
            raise HTTPException(status_code=400, detail="Only image files can be used as a cover image")
        if len(content) > settings.max_image_size_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"Image must be smaller than {settings.max_image_size_mb} MB"
            )
        bucket = settings.workshop_images_bucket
        try:
            uploaded = self.blobs.upload(bucket, content, content_type=content_type)
        except Exception as e:
            logger.error(f"Error uploading image for workshop {workshop_id}: {str(e)}")
            raise StoreError("Failed to upload image") from e
        try:
            url = self.blobs.public_url(bucket, uploaded.id)
            return self._update(workshop_id, {"image_url": url}, "Failed to update workshop")
        except HTTPException:
            self._discard_upload(bucket, uploaded.id, workshop_id)
            raise
        except Exception as e:
            logger.error(f"Error linking image for workshop {workshop_id}: {str(e)}")
            self._discard_upload(bucket, uploaded.id, workshop_id)
            raise StoreError("Failed to update workshop") from e

    def _discard_upload(self, bucket: str, file_id: str, workshop_id: str) -> None:
        logger.warning(f"Linking image {file_id} to workshop {workshop_id} failed, removing upload")
        self.blobs.delete(bucket, file_id)
