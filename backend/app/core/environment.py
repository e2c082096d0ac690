"""
Environment variable validation.
Reports missing settings on startup and names them again when a request needs them.
"""
import logging
from typing import List, Optional, Tuple

from app.core.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


def missing_ticket_settings(settings: Optional[Settings] = None) -> List[str]:
    """
    Names of the settings the ticket extraction endpoint needs but does not have.

    Order matches the order they are checked in, so the first entry is the one
    reported to the caller.
    """
    settings = settings or default_settings
    required = [
        ("AUTH_URL", settings.AUTH_URL),
        ("AUTH_ANON_KEY", settings.AUTH_ANON_KEY),
        ("DATABASE_URL", settings.DATABASE_URL),
        (settings.llm_api_key_name, getattr(settings, settings.llm_api_key_name, "")),
    ]
    if settings.LLM_PROVIDER.lower() in ("openai", "anthropic"):
        required.append(("MODEL_NAME", settings.MODEL_NAME))
    return [name for name, value in required if not value]


def validate_required_env_vars(settings: Optional[Settings] = None) -> Tuple[bool, List[str]]:
    """
    Validate that all required environment variables are set.

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    settings = settings or default_settings
    errors = [f"Required environment variable {name} is not set" for name in missing_ticket_settings(settings)]

    if settings.LLM_PROVIDER.lower() not in ("gemini", "openai", "anthropic"):
        errors.append(f"Unsupported LLM_PROVIDER: {settings.LLM_PROVIDER}")

    database_url = settings.DATABASE_URL
    if database_url and not database_url.startswith(("postgresql://", "postgresql+psycopg2://", "sqlite")):
        errors.append("DATABASE_URL must be a valid PostgreSQL connection string")

    if settings.ENVIRONMENT.lower() == "production":
        if not settings.CORS_ORIGINS:
            errors.append("CORS_ORIGINS must be set in production environment")
        if "postgres:postgres@" in database_url:
            errors.append("Default database password detected. Change POSTGRES_PASSWORD in production")

    return len(errors) == 0, errors


def mask_url(url: str) -> str:
    """Hide the password part of a connection URL."""
    if not url:
        return "not set"
    if "@" not in url:
        return url
    credentials, host = url.rsplit("@", 1)
    if ":" in credentials.split("//", 1)[-1]:
        scheme_user = credentials.rsplit(":", 1)[0]
        return f"{scheme_user}:****@{host}"
    return url


def print_env_summary(settings: Optional[Settings] = None):
    """Print a summary of environment configuration (safe for logs)."""
    settings = settings or default_settings

    logger.info("=" * 60)
    logger.info("Environment Configuration Summary")
    logger.info("=" * 60)
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"LLM Provider: {settings.LLM_PROVIDER}")
    logger.info(f"Database URL: {mask_url(settings.DATABASE_URL)}")
    logger.info(f"Auth URL: {settings.AUTH_URL or 'not set'}")
    logger.info(f"{settings.llm_api_key_name}: {'set' if getattr(settings, settings.llm_api_key_name, '') else 'not set'}")
    logger.info("=" * 60)


def check_on_startup(settings: Optional[Settings] = None) -> bool:
    """
    Log configuration problems on startup without refusing to start.

    Endpoints that need a missing setting report it per request.
    """
    is_valid, errors = validate_required_env_vars(settings)
    if not is_valid:
        logger.warning("Environment validation found problems:\n" + "\n".join(f"  - {error}" for error in errors))
    else:
        logger.info("Environment validation passed")
    print_env_summary(settings)
    return is_valid
