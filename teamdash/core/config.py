import os
import logging
from pydantic import BaseModel, Field
from typing import List
from dotenv import load_dotenv

_logger = logging.getLogger(__name__)


class SupabaseSettings(BaseModel):
    url: str = ""
    key: str = ""  # public (anon) key
    service_role_key: str = ""  # storage only

    @property
    def rest_url(self) -> str:
        return f"{self.url.rstrip('/')}/rest/v1"

    @property
    def auth_url(self) -> str:
        return f"{self.url.rstrip('/')}/auth/v1"

    @property
    def storage_url(self) -> str:
        return f"{self.url.rstrip('/')}/storage/v1"


class Config(BaseModel):
    app_name: str = "Manager Performance Dashboard API"
    environment: str = "development"
    api_prefix: str = "/api"
    version: str = "1.0.0"

    supabase: SupabaseSettings = SupabaseSettings()

    # Storage
    documents_bucket: str = "documents"
    max_upload_bytes: int = 10 * 1024 * 1024

    cors_origins: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]
    )


def _split_origins(raw: str) -> List[str]:
    return [o.strip() for o in raw.split(",") if o.strip()]


def load_settings() -> Config:
    """
    Build the process configuration from the environment (and .env).

    Called once at startup; the result is handed to the app and its gateways.
    """
    load_dotenv()

    overrides = {
        "environment": os.getenv("APP_ENV", "development"),
        "api_prefix": os.getenv("API_PREFIX", "/api"),
        "documents_bucket": os.getenv("DOCUMENTS_BUCKET", "documents"),
        "max_upload_bytes": int(os.getenv("MAX_UPLOAD_MB", "10")) * 1024 * 1024,
        "supabase": SupabaseSettings(
            url=os.getenv("SUPABASE_URL", ""),
            key=os.getenv("SUPABASE_KEY", ""),
            service_role_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY", ""),
        ),
    }
    if os.getenv("CORS_ORIGINS"):
        overrides["cors_origins"] = _split_origins(os.getenv("CORS_ORIGINS"))

    settings = Config(**overrides)

    # --- Startup Validation for Production ---
    missing = [
        name
        for name, value in (
            ("SUPABASE_URL", settings.supabase.url),
            ("SUPABASE_KEY", settings.supabase.key),
            ("SUPABASE_SERVICE_ROLE_KEY", settings.supabase.service_role_key),
        )
        if not value
    ]
    if missing and settings.environment == "production":
        raise RuntimeError(
            f"FATAL: The following settings must be set in production: "
            f"{', '.join(missing)}. Set them as environment variables."
        )
    if missing:
        _logger.warning(f"Supabase settings not configured: {', '.join(missing)}")

    return settings
