# core/config_validator.py

from typing import List, Optional
from core.config import Settings, settings
from core.logging_config import logger


def validate_required_config(config: Optional[Settings] = None) -> List[str]:
    """
    Validate that all required environment variables are set.
    Returns list of missing required variables.
    """
    config = config or settings
    missing = []

    # Required for auth, tables and storage
    if not config.SUPABASE_URL:
        missing.append("SUPABASE_URL")
    if not config.SUPABASE_SERVICE_ROLE_KEY:
        missing.append("SUPABASE_SERVICE_ROLE_KEY")

    return missing


def validate_optional_config(config: Optional[Settings] = None) -> List[str]:
    """
    Validate optional but recommended configuration.
    Returns list of missing optional variables (warnings only).
    """
    config = config or settings
    warnings = []

    if not config.SUPABASE_ANON_KEY:
        warnings.append("SUPABASE_ANON_KEY (optional but recommended)")

    if not (config.FRONTEND_URL or config.CORS_ORIGINS):
        warnings.append("FRONTEND_URL / CORS_ORIGINS (falling back to localhost)")

    if not config.MEDIA_BUCKETS:
        warnings.append("MEDIA_BUCKETS (user media will not be cleaned up on delete)")

    return warnings


def validate_config_on_startup(config: Optional[Settings] = None):
    """
    Validate configuration on application startup.
    Raises RuntimeError if critical config is missing.
    Logs warnings for optional config.
    """
    missing_required = validate_required_config(config)
    missing_optional = validate_optional_config(config)

    if missing_required:
        error_msg = f"Missing required environment variables: {', '.join(missing_required)}"
        logger.error(error_msg)
        raise RuntimeError(error_msg)

    for warning in missing_optional:
        logger.warning(f"Optional configuration missing: {warning}")

    logger.info("Configuration validation passed")
