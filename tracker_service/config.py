"""
Tracker Service Configuration Module

Centralized configuration management with Pydantic validation.
All environment variables are validated at startup to catch misconfigurations early.
"""

import logging
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings

from .models import check_password_length

logger = logging.getLogger(__name__)

DEFAULT_JWT_SECRET = "dev-jwt-secret"


class TrackerSettings(BaseSettings):
    """
    Tracker service configuration with validation.

    All settings can be overridden via environment variables.
    Validation happens at startup to fail fast on misconfiguration.
    """

    # === Server ===
    port: int = Field(
        default=3000,
        ge=1,
        le=65535,
        description="Listen port for `python -m tracker_service`"
    )
    environment: str = Field(
        default="development",
        description="Environment: development, staging, production"
    )
    cors_origins: str = Field(
        default="",
        description="Comma-separated list of allowed CORS origins"
    )

    # === MongoDB ===
    mongodb_uri: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("MONGODB_URI", "MONGO_URI"),
        description="MongoDB connection URI (unset = in-memory stand-in store)"
    )
    mongo_db_name: str = Field(
        default="jobs",
        description="MongoDB database name"
    )

    # === Security ===
    jwt_secret: str = Field(
        default=DEFAULT_JWT_SECRET,
        min_length=8,
        description="Token signing secret"
    )
    jwt_expiry_seconds: int = Field(
        default=60 * 60 * 24,
        ge=60,
        description="Token lifetime in seconds (default: 1 day)"
    )

    # === Operator-provisioned account ===
    auth_user: Optional[str] = Field(
        default=None,
        description="Username auto-created at startup if absent"
    )
    auth_pass: Optional[str] = Field(
        default=None,
        description="Password for the auto-created account"
    )

    # === Logging ===
    log_level: str = Field(default="INFO", description="DEBUG, INFO, WARNING, ERROR")
    log_format: str = Field(default="simple", description="simple or json")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is a known value."""
        allowed = {"development", "staging", "production"}
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"environment must be one of: {', '.join(sorted(allowed))}")
        return v_lower

    @field_validator("mongodb_uri")
    @classmethod
    def validate_mongodb_uri(cls, v: Optional[str]) -> Optional[str]:
        """Treat an empty URI as unset and check the scheme otherwise."""
        if not v:
            return None
        if not v.startswith(("mongodb://", "mongodb+srv://")):
            raise ValueError(f"Invalid MongoDB URI format: {v[:20]}...")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v not in ("simple", "json"):
            raise ValueError("log_format must be 'simple' or 'json'")
        return v

    @field_validator("auth_pass")
    @classmethod
    def validate_auth_pass(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return check_password_length(v)

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins into a list."""
        if not self.cors_origins:
            return []
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    @property
    def uses_memory_store(self) -> bool:
        """True when no MongoDB URI is configured."""
        return self.mongodb_uri is None

    @property
    def default_user_configured(self) -> bool:
        return bool(self.auth_user and self.auth_pass)

    def validate_production_config(self) -> List[str]:
        """
        Validate configuration is suitable for production.

        Returns list of warning/error messages.
        """
        issues = []

        if self.is_production:
            if self.jwt_secret == DEFAULT_JWT_SECRET:
                issues.append("CRITICAL: JWT_SECRET must be set in production")
            if self.uses_memory_store:
                issues.append("WARNING: MONGODB_URI not set, data will not survive restarts")
            if not self.cors_origins:
                issues.append("WARNING: CORS_ORIGINS not configured")

        return issues

    class Config:
        env_prefix = ""  # No prefix, use exact env var names
        case_sensitive = False  # JWT_SECRET = jwt_secret
        populate_by_name = True


@lru_cache()
def get_settings() -> TrackerSettings:
    """
    Get cached settings instance.

    Loads .env once, then reads the environment. Use this function to
    access configuration throughout the app.
    """
    load_dotenv()
    return TrackerSettings()


def validate_config_on_startup(settings: TrackerSettings) -> None:
    """
    Validate configuration at application startup.

    Raises ValueError for critical issues, logs warnings for the rest.
    """
    for issue in settings.validate_production_config():
        if issue.startswith("CRITICAL"):
            raise ValueError(issue)
        logger.warning(issue)

    # Log loaded configuration (redact secrets)
    logger.info(f"Configuration loaded: environment={settings.environment}")
    logger.info(f"  storage={'memory' if settings.uses_memory_store else 'mongodb'}")
    logger.info(f"  mongo_db_name={settings.mongo_db_name}")
    logger.info(f"  jwt_expiry={settings.jwt_expiry_seconds}s")
    logger.info(f"  default_user={'configured' if settings.default_user_configured else 'none'}")
