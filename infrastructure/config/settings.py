"""
Environment-specific deployment settings.

Cost-optimized defaults for development/testing.
"""

from dataclasses import dataclass
import os


@dataclass
class Settings:
    """Deployment settings with cost-optimized defaults."""

    # Environment
    environment: str = "dev"
    aws_region: str = "eu-west-2"  # Default AWS region

    # Data Service (hosted Postgres + auth); keys live in the app secret
    supabase_url: str = ""

    # Lambda Configuration
    lambda_memory_mb: int = 512
    lambda_timeout_seconds: int = 30

    # Report cache
    report_cache_ttl_seconds: int = 300
    report_cache_max_size: int = 100

    # Delete the auth identity again when the profile insert fails
    compensate_failed_provisioning: bool = True

    password_reset_redirect_url: str = ""
    default_language: str = "pt-br"
    cors_allow_origins: tuple = ("*",)

    @classmethod
    def from_environment(cls) -> "Settings":
        """Load settings from environment variables."""
        env = os.environ.get("ENVIRONMENT", "dev")
        common = dict(
            supabase_url=os.environ.get("SUPABASE_URL", ""),
            password_reset_redirect_url=os.environ.get("PASSWORD_RESET_REDIRECT_URL", ""),
            compensate_failed_provisioning=os.environ.get(
                "COMPENSATE_FAILED_PROVISIONING", "true"
            ).lower() == "true",
        )

        # Production overrides
        if env == "prod":
            origins = os.environ.get("CORS_ALLOW_ORIGINS", "")
            return cls(
                environment="prod",
                lambda_memory_mb=1024,
                lambda_timeout_seconds=60,
                report_cache_ttl_seconds=600,
                cors_allow_origins=tuple(o.strip() for o in origins.split(",") if o.strip()) or ("*",),
                **common,
            )

        return cls(environment=env, **common)

    def lambda_environment(self) -> dict:
        """Runtime variables the API Lambda reads through utils.config."""
        return {
            "SUPABASE_URL": self.supabase_url,
            "REPORT_CACHE_TTL_SECONDS": str(self.report_cache_ttl_seconds),
            "REPORT_CACHE_MAX_SIZE": str(self.report_cache_max_size),
            "COMPENSATE_FAILED_PROVISIONING": str(self.compensate_failed_provisioning).lower(),
            "PASSWORD_RESET_REDIRECT_URL": self.password_reset_redirect_url,
            "DEFAULT_LANGUAGE": self.default_language,
        }
