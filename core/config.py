from typing import List, Optional
from urllib.parse import urlparse

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "MenuX API"
    ENV: str = "development"

    # -------------------------------------------------
    # Frontend Domains
    # -------------------------------------------------
    # Single frontend URL, or a comma-separated list in CORS_ORIGINS
    FRONTEND_URL: Optional[str] = None
    CORS_ORIGINS: Optional[str] = None
    DEFAULT_CORS_ORIGINS: List[str] = ["http://localhost:5173"]

    # -------------------------------------------------
    # CORS (auto-built below)
    # -------------------------------------------------
    BACKEND_CORS_ORIGINS: List[str] = []

    # -------------------------------------------------
    # Supabase (DB, Auth & Storage)
    # -------------------------------------------------
    SUPABASE_URL: Optional[str] = None
    SUPABASE_ANON_KEY: Optional[str] = None
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None

    # -------------------------------------------------
    # Storage buckets holding per-user media
    # -------------------------------------------------
    # Objects live under "<auth_user_id>/<file>" in each bucket
    MEDIA_BUCKETS: List[str] = ["logos", "menu-images"]

    # -------------------------------------------------
    # Business creation throttle (per profile)
    # -------------------------------------------------
    BUSINESS_CREATE_MAX_REQUESTS: int = Field(5, description="Creates allowed per window (default: 5)")
    BUSINESS_CREATE_WINDOW_SECONDS: int = Field(600, description="Window length in seconds (default: 10 minutes)")

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    class Config:
        case_sensitive = True
        # Real environment variables only, no env_file


def normalize_origin(value: str) -> Optional[str]:
    """Reduce a URL to scheme://host[:port], or None if it isn't one."""
    parsed = urlparse(value.strip())
    if not parsed.scheme or not parsed.netloc:
        return None
    return f"{parsed.scheme}://{parsed.netloc}"


def build_cors_origins(config: Settings) -> List[str]:
    raw = []
    for value in (config.FRONTEND_URL, config.CORS_ORIGINS):
        if value:
            raw.extend(part.strip() for part in value.split(","))

    candidates = [v for v in raw if v] or config.DEFAULT_CORS_ORIGINS

    origins = [normalize_origin(v) for v in candidates]

    # remove invalid + duplicates
    return sorted({o for o in origins if o})


# Instantiate settings
settings = Settings()

# -------------------------------------------------
# Build CORS list dynamically after loading settings
# -------------------------------------------------
settings.BACKEND_CORS_ORIGINS = build_cors_origins(settings)
