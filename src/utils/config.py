"""
Runtime configuration for the API Lambda.

Values come from environment variables. Data Service credentials may also
live in a Secrets Manager JSON secret referenced by APP_SECRET_ARN, which
keeps keys out of the Lambda console.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Dict, Optional

import boto3

from utils.logging_config import get_logger

logger = get_logger(__name__)


def _as_bool(value: Optional[str], default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_secret(secret_arn: str) -> Dict[str, str]:
    """Read a JSON secret; returns an empty dict when it cannot be loaded."""
    try:
        sm = boto3.client("secretsmanager")
        secret_value = sm.get_secret_value(SecretId=secret_arn)["SecretString"]
        return json.loads(secret_value)
    except Exception as exc:
        logger.warning("Failed to load app secret", extra={"error": str(exc)})
        return {}


def _secret_to_db_url(secret: Dict[str, str]) -> Optional[str]:
    """Build a SQLAlchemy URL from the secret's connection parts."""
    if secret.get("database_url"):
        return secret["database_url"]
    host = secret.get("host")
    port = secret.get("port", 5432)
    username = secret.get("username")
    password = secret.get("password")
    dbname = secret.get("dbname", "postgres")
    if not (host and username and password):
        return None
    return f"postgresql+psycopg2://{username}:{password}@{host}:{port}/{dbname}"


@dataclass
class AppConfig:
    """Application settings with development defaults."""

    environment: str = "dev"

    # Data Service
    database_url: Optional[str] = None
    supabase_url: Optional[str] = None
    supabase_service_role_key: Optional[str] = None
    supabase_anon_key: Optional[str] = None

    # Reports
    report_cache_ttl_seconds: int = 300
    report_cache_max_size: int = 100

    # Provisioning: delete the auth identity when the profile insert fails
    compensate_failed_provisioning: bool = True

    password_reset_redirect_url: Optional[str] = None
    default_language: str = "pt-br"

    @classmethod
    def from_environment(cls) -> "AppConfig":
        """Load settings from environment variables (and the app secret, if set)."""
        secret: Dict[str, str] = {}
        secret_arn = os.environ.get("APP_SECRET_ARN")
        if secret_arn:
            secret = load_secret(secret_arn)

        database_url = os.environ.get("DATABASE_URL") or _secret_to_db_url(secret)
        if not database_url:
            logger.warning("DATABASE_URL not set; database calls will fail")

        return cls(
            environment=os.environ.get("ENVIRONMENT", "dev"),
            database_url=database_url,
            supabase_url=os.environ.get("SUPABASE_URL") or secret.get("supabase_url"),
            supabase_service_role_key=os.environ.get("SUPABASE_SERVICE_ROLE_KEY")
            or secret.get("supabase_service_role_key"),
            supabase_anon_key=os.environ.get("SUPABASE_ANON_KEY")
            or secret.get("supabase_anon_key"),
            report_cache_ttl_seconds=int(os.environ.get("REPORT_CACHE_TTL_SECONDS", 300)),
            report_cache_max_size=int(os.environ.get("REPORT_CACHE_MAX_SIZE", 100)),
            compensate_failed_provisioning=_as_bool(
                os.environ.get("COMPENSATE_FAILED_PROVISIONING"), True
            ),
            password_reset_redirect_url=os.environ.get("PASSWORD_RESET_REDIRECT_URL"),
            default_language=os.environ.get("DEFAULT_LANGUAGE", "pt-br"),
        )


_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Return the process-wide config, loading it on first use."""
    global _config
    if _config is None:
        _config = AppConfig.from_environment()
    return _config
