from fastapi import APIRouter, Depends, File, Query, UploadFile
from app.database.blob_store import BlobStore
from app.database.document_store import DocumentStore
from app.modules.forms.renderer import RenderedForm, render_preview, render_submission
from app.modules.users.schemas import UserResponse
from app.modules.workshops.schemas import (
    WorkshopCreate, WorkshopUpdate, WorkshopResponse, WorkshopListResponse, MasterDashboardResponse
)
from app.modules.workshops.service import WorkshopService
from app.core.dependencies import (
    get_blob_store, get_document_store, get_optional_user, require_permission, require_role,
    check_workshop_owner, check_workshop_visible
)
from app.config.permissions_config import MASTER
from typing import Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workshops", tags=["workshops"])


def get_workshop_service(
    store: DocumentStore = Depends(get_document_store),
    blobs: BlobStore = Depends(get_blob_store)
) -> WorkshopService:
    return WorkshopService(store, blobs)


@router.get("", response_model=WorkshopListResponse)
async def list_workshops(
    search: Optional[str] = None,
    category: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1, le=100),
    offset: int = Query(0, ge=0),
    service: WorkshopService = Depends(get_workshop_service)
):
    """Browse published workshops. Public."""
    return service.list_published(search=search, category=category, limit=limit, offset=offset)


@router.get("/mine", response_model=MasterDashboardResponse)
async def list_my_workshops(
    user: UserResponse = Depends(require_role(MASTER)),
    service: WorkshopService = Depends(get_workshop_service)
):
    """Master dashboard: own workshops in every status, with counts"""
    return MasterDashboardResponse.from_workshops(service.list_by_master(user.id))


@router.post("", response_model=WorkshopResponse, status_code=201)
async def create_workshop(
    workshop_data: WorkshopCreate,
    user: UserResponse = Depends(require_permission("workshops:create")),
    service: WorkshopService = Depends(get_workshop_service)
):
    """Create a new workshop as a draft"""
    return service.create_workshop(workshop_data, user.id)


@router.get("/{workshop_id}", response_model=WorkshopResponse)
async def get_workshop(
    workshop_id: str,
    user: Optional[UserResponse] = Depends(get_optional_user),
    service: WorkshopService = Depends(get_workshop_service)
):
    """Get workshop by ID. Drafts are only visible to their master."""
    workshop = service.get_workshop_by_id(workshop_id)
    check_workshop_visible(workshop, user)
    return workshop


@router.put("/{workshop_id}", response_model=WorkshopResponse)
async def update_workshop(
    workshop_id: str,
    workshop_data: WorkshopUpdate,
    user: UserResponse = Depends(require_permission("workshops:update")),
    service: WorkshopService = Depends(get_workshop_service)
):
    """Update workshop (owner only)"""
    check_workshop_owner(service.get_workshop_by_id(workshop_id), user)
    return service.update_workshop(workshop_id, workshop_data)


@router.delete("/{workshop_id}", status_code=204)
async def delete_workshop(
    workshop_id: str,
    user: UserResponse = Depends(require_permission("workshops:delete")),
    service: WorkshopService = Depends(get_workshop_service)
):
    """Delete workshop (owner only)"""
    check_workshop_owner(service.get_workshop_by_id(workshop_id), user)
    service.delete_workshop(workshop_id)
    return None


@router.post("/{workshop_id}/publish", response_model=WorkshopResponse)
async def publish_workshop(
    workshop_id: str,
    user: UserResponse = Depends(require_permission("workshops:publish")),
    service: WorkshopService = Depends(get_workshop_service)
):
    workshop = service.get_workshop_by_id(workshop_id)
    check_workshop_owner(workshop, user)
    return service.publish_workshop(workshop)


@router.post("/{workshop_id}/unpublish", response_model=WorkshopResponse)
async def unpublish_workshop(
    workshop_id: str,
    user: UserResponse = Depends(require_permission("workshops:publish")),
    service: WorkshopService = Depends(get_workshop_service)
):
    workshop = service.get_workshop_by_id(workshop_id)
    check_workshop_owner(workshop, user)
    return service.unpublish_workshop(workshop)


@router.put("/{workshop_id}/image", response_model=WorkshopResponse)
async def upload_workshop_image(
    workshop_id: str,
    image: UploadFile = File(...),
    user: UserResponse = Depends(require_permission("workshops:update")),
    service: WorkshopService = Depends(get_workshop_service)
):
    """Upload a cover image and link it to the workshop (owner only)"""
    check_workshop_owner(service.get_workshop_by_id(workshop_id), user)
    content = await image.read()
    return service.set_image(workshop_id, content, image.content_type)


@router.get("/{workshop_id}/form", response_model=RenderedForm)
async def get_application_form(
    workshop_id: str,
    user: Optional[UserResponse] = Depends(get_optional_user),
    service: WorkshopService = Depends(get_workshop_service)
):
    """The application form as a student fills it in"""
    workshop = service.get_workshop_by_id(workshop_id)
    check_workshop_visible(workshop, user)
    return render_submission(workshop.application_form, form_color=workshop.form_color)


@router.get("/{workshop_id}/form/preview", response_model=RenderedForm)
async def preview_application_form(
    workshop_id: str,
    user: Optional[UserResponse] = Depends(get_optional_user),
    service: WorkshopService = Depends(get_workshop_service)
):
    """Read-only preview of the application form"""
    workshop = service.get_workshop_by_id(workshop_id)
    check_workshop_visible(workshop, user)
    return render_preview(workshop.application_form, form_color=workshop.form_color)
