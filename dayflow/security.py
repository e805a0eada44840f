"""
DAYFLOW Planner API - Startup Configuration Checks

Warns about insecure or inconsistent settings without stopping the app,
so tests and local development still start.
"""

import warnings

from dayflow.config import settings

DEFAULT_JWT_SECRET = "dev-secret-key-change-in-production"


def validate_security_config() -> None:
    """Emit a UserWarning for each risky setting found."""
    if settings.JWT_SECRET_KEY == DEFAULT_JWT_SECRET and settings.is_production:
        warnings.warn(
            "SECURITY WARNING: Using default JWT_SECRET_KEY in production. "
            "Set JWT_SECRET_KEY to the identity service's signing secret.",
            UserWarning,
        )

    if len(settings.JWT_SECRET_KEY) < 32 and settings.is_production:
        warnings.warn(
            "SECURITY WARNING: JWT_SECRET_KEY is shorter than 32 characters.",
            UserWarning,
        )

    if "*" in settings.CORS_ORIGINS:
        warnings.warn(
            "SECURITY WARNING: CORS wildcard (*) configured. "
            "List the allowed client origins in CORS_ORIGINS instead.",
            UserWarning,
        )

    if settings.USE_LLM and not settings.OPENAI_API_KEY:
        warnings.warn(
            "USE_LLM is enabled but OPENAI_API_KEY is not set; "
            "schedules will use the fallback planner and task generation will fail.",
            UserWarning,
        )
