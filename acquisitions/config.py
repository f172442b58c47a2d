"""
Configuration management for the Acquisitions API
"""
from functools import lru_cache
from typing import List
import logging
import secrets

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Service configuration loaded from environment variables"""

    # Server Configuration
    APP_NAME: str = "Acquisitions API"
    ENVIRONMENT: str = "development"
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = ""

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./app.db"
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10

    # Token Configuration
    JWT_SECRET: str = ""
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_IN: int = 3600

    # Session Cookie
    COOKIE_NAME: str = "token"
    COOKIE_MAX_AGE: int = 24 * 60 * 60

    # CORS Configuration
    CORS_ORIGINS: List[str] = ["*"]

    # Security gate
    SECURITY_GATE_ENABLED: bool = True
    BLOCKED_USER_AGENTS: List[str] = ["sqlmap", "nikto", "masscan", "nmap", "zgrab"]
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT: str = "10 per 2 seconds"

    # Authorization policy
    ADMIN_ROLE_REQUIRES_ADMIN: bool = True
    USERS_REQUIRE_AUTH: bool = True
    # non-admin sessions may only update or delete their own record
    USERS_OWNER_OR_ADMIN: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @model_validator(mode="after")
    def validate_jwt_secret(self) -> "Settings":
        """
        Refuse to start in production without JWT_SECRET.

        Outside production a random secret is generated, so sessions do not
        survive a restart.
        """
        if not self.JWT_SECRET:
            if self.is_production:
                raise ValueError(
                    "JWT_SECRET is required when ENVIRONMENT=production. "
                    "Set JWT_SECRET in your environment or .env file."
                )
            self.JWT_SECRET = secrets.token_hex(32)
            logger.warning("JWT_SECRET not set, using a generated secret. Sessions will not persist across restarts.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide Settings, built on first call."""
    return Settings()
