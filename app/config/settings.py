from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Required for admin operations on auth users

    # Storage
    workshop_images_bucket: str = "workshop-images"
    max_image_size_mb: int = 10
    # Legacy file view URLs ({endpoint}/storage/buckets/{bucket}/files/{id}/view?project={id}).
    # When storage_project_id is unset, Supabase public URLs are used instead.
    storage_endpoint: Optional[str] = None
    storage_project_id: Optional[str] = None

    # Workshops
    default_form_color: str = "#3B82F6"
    workshops_page_size: int = 25

    # App
    app_name: str = "workshop-marketplace"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def max_image_size_bytes(self) -> int:
        return self.max_image_size_mb * 1024 * 1024

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
