"""
Environment variable validation for production deployments.
Validates critical environment variables on application startup.
"""
import os
import logging
from typing import List, Tuple

logger = logging.getLogger(__name__)


def validate_required_env_vars() -> Tuple[bool, List[str]]:
    """
    Validate that all required environment variables are set.

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    errors = []

    # Required environment variables
    required_vars = {
        "DATABASE_URL": os.getenv("DATABASE_URL"),
        "LLM_PROVIDER": os.getenv("LLM_PROVIDER", "openai"),
    }

    for var_name, var_value in required_vars.items():
        if not var_value:
            errors.append(f"Required environment variable {var_name} is not set")

    # Validate LLM configuration based on provider
    llm_provider = os.getenv("LLM_PROVIDER", "openai").lower()

    if llm_provider == "openai":
        if not os.getenv("OPENAI_API_KEY"):
            errors.append("OPENAI_API_KEY must be set when LLM_PROVIDER=openai")
    elif llm_provider == "anthropic":
        if not os.getenv("ANTHROPIC_API_KEY"):
            errors.append("ANTHROPIC_API_KEY must be set when LLM_PROVIDER=anthropic")
    elif llm_provider != "ollama":
        errors.append(f"Unsupported LLM_PROVIDER: {llm_provider}")

    # Validate DATABASE_URL format
    database_url = os.getenv("DATABASE_URL", "")
    if database_url and not database_url.startswith(("postgresql://", "postgresql+psycopg2://")):
        errors.append("DATABASE_URL must be a valid PostgreSQL connection string")

    errors.extend(_validate_thresholds())

    environment = os.getenv("ENVIRONMENT", "development").lower()
    if environment == "production":
        if not os.getenv("CORS_ORIGINS", ""):
            errors.append("CORS_ORIGINS must be set in production environment")
        if "postgres:postgres@" in database_url:
            errors.append("Default database password detected. Change POSTGRES_PASSWORD in production")

    return len(errors) == 0, errors


def _validate_thresholds() -> List[str]:
    errors = []
    try:
        approval_threshold = int(os.getenv("APPROVAL_THRESHOLD", "5"))
        if approval_threshold < 1:
            errors.append("APPROVAL_THRESHOLD must be at least 1")
    except ValueError:
        errors.append("APPROVAL_THRESHOLD must be an integer")

    try:
        similarity_threshold = float(os.getenv("SIMILARITY_THRESHOLD", "0.5"))
        if not 0 < similarity_threshold <= 1:
            errors.append("SIMILARITY_THRESHOLD must be in (0, 1]")
    except ValueError:
        errors.append("SIMILARITY_THRESHOLD must be a number")

    try:
        top_k = int(os.getenv("RETRIEVAL_TOP_K", "3"))
        if top_k < 1:
            errors.append("RETRIEVAL_TOP_K must be at least 1")
    except ValueError:
        errors.append("RETRIEVAL_TOP_K must be an integer")

    return errors


def mask_database_url(database_url: str) -> str:
    """Hide the password part of a database URL."""
    if not database_url:
        return "not set"
    if "@" not in database_url:
        return database_url
    credentials, host = database_url.rsplit("@", 1)
    scheme, _, user_pass = credentials.rpartition("//")
    user = user_pass.split(":", 1)[0]
    prefix = f"{scheme}//" if scheme else ""
    return f"{prefix}{user}:****@{host}"


def print_env_summary():
    """Print a summary of environment configuration (safe for logs)."""
    logger.info("=" * 60)
    logger.info("Environment Configuration Summary")
    logger.info("=" * 60)
    logger.info(f"Environment: {os.getenv('ENVIRONMENT', 'development')}")
    logger.info(f"LLM Provider: {os.getenv('LLM_PROVIDER', 'openai')}")
    logger.info(f"Model Name: {os.getenv('MODEL_NAME', 'not set')}")
    logger.info(f"Database URL: {mask_database_url(os.getenv('DATABASE_URL', ''))}")
    logger.info(f"Qdrant URL: {os.getenv('QDRANT_URL', 'http://localhost:6333')}")
    logger.info(f"Approval threshold: {os.getenv('APPROVAL_THRESHOLD', '5')}")
    logger.info(f"Similarity threshold: {os.getenv('SIMILARITY_THRESHOLD', '0.5')}")
    logger.info("=" * 60)


def validate_on_startup():
    """
    Validate environment variables on application startup.
    Raises ValueError if validation fails.
    """
    is_valid, errors = validate_required_env_vars()

    if not is_valid:
        error_message = "Environment validation failed:\n" + "\n".join(f"  - {error}" for error in errors)
        logger.error(error_message)
        raise ValueError(error_message)

    logger.info("Environment validation passed")
    print_env_summary()
