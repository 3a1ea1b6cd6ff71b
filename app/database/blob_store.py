"""File uploads (workshop cover images) on Supabase Storage."""
import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from supabase import Client

from app.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadResult:
    id: str


def build_file_view_url(endpoint: str, bucket: str, file_id: str, project_id: str) -> str:
    """Public view URL in the legacy storage scheme. Existing records hold URLs in this exact form."""
    return f"{endpoint}/storage/buckets/{bucket}/files/{file_id}/view?project={project_id}"


class BlobStore:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def upload(
        self,
        bucket: str,
        content: bytes,
        file_id: Optional[str] = None,
        content_type: str = "application/octet-stream"
    ) -> UploadResult:
        """Upload bytes under file_id (generated when omitted). Buckets are public-read."""
        file_id = file_id or uuid.uuid4().hex
        self.supabase.storage.from_(bucket).upload(
            file_id,
            content,
            {"content-type": content_type, "upsert": "false"}
        )
        logger.info(f"Uploaded {len(content)} bytes to {bucket}/{file_id}")
        return UploadResult(id=file_id)

    def delete(self, bucket: str, file_id: str) -> bool:
        """Delete a stored file. Returns False instead of raising; used for cleanup."""
        try:
            self.supabase.storage.from_(bucket).remove([file_id])
            return True
        except Exception as e:
            logger.warning("Failed to delete %s/%s: %s", bucket, file_id, e)
            return False

    def public_url(self, bucket: str, file_id: str) -> str:
        if settings.storage_project_id:
            endpoint = settings.storage_endpoint or settings.supabase_url
            return build_file_view_url(endpoint, bucket, file_id, settings.storage_project_id)
        return self.supabase.storage.from_(bucket).get_public_url(file_id)
