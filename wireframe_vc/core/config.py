"""Application configuration with validation."""

from enum import Enum
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import List


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class ConfigurationError(Exception):
    """Raised when application configuration is invalid for the environment."""
    pass


_INSECURE_JWT_SECRET = "dev-insecure-key-change-me"


class Settings(BaseSettings):
    """
    Application settings with validation.

    Values come from environment variables or a ``.env`` file. Names are
    case-insensitive, so ``DATABASE_URL`` sets ``database_url``.
    """

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/production)"
    )

    # CORS Configuration (the editor UI origin)
    cors_allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Allowed CORS origins (comma-separated)"
    )

    # Database Configuration
    database_url: str = Field(
        default="sqlite:///./wireframe_vc.db",
        description="Database connection URL"
    )
    # Connection pool tuning (PostgreSQL only; ignored for SQLite).
    db_pool_size: int = Field(
        default=5,
        description="Number of persistent database connections"
    )
    db_max_overflow: int = Field(
        default=10,
        description="Extra connections allowed during traffic bursts"
    )
    db_pool_timeout: int = Field(
        default=30,
        description="Seconds to wait for a connection from the pool before raising"
    )
    db_pool_recycle: int = Field(
        default=1800,
        description="Seconds before a connection is recycled"
    )

    # Authentication
    # AUTH_ENABLED=false runs every request as an anonymous admin (dev mode).
    jwt_secret_key: str = Field(
        default=_INSECURE_JWT_SECRET,
        description="JWT signing secret (override in production)"
    )
    jwt_algorithm: str = Field(default="HS256")
    auth_enabled: bool = Field(
        default=False,
        description="Enable JWT authentication (False for development)"
    )
    public_read: bool = Field(
        default=False,
        description="Allow unauthenticated reads of version history when auth is enabled"
    )

    # Audit Log Retention
    audit_retention_days: int = Field(
        default=365,
        description="Days to keep audit log entries (0 = keep forever)"
    )

    # Rate Limiting
    rate_limit_per_minute: int = Field(
        default=120,
        description="Maximum requests per client per minute (0 = unlimited)"
    )

    # Change summaries
    summary_max_significant: int = Field(
        default=3,
        ge=0,
        description="How many significant changes a comparison summary names"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="json",
        description="Log output format: 'json' for structured, 'text' for human-readable"
    )

    def get_cors_origins(self) -> List[str]:
        """
        Get CORS origins as a list.

        Parses comma-separated string and rejects wildcards.
        """
        origins = [origin.strip() for origin in self.cors_allowed_origins.split(',') if origin.strip()]

        if "*" in origins:
            raise ValueError(
                "Wildcard CORS (*) not allowed. "
                "Specify explicit origins in CORS_ALLOWED_ORIGINS"
            )

        return origins

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard Python logging levels."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v_upper

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v_lower = v.lower()
        if v_lower not in ("json", "text"):
            raise ValueError("Invalid log format. Must be 'json' or 'text'")
        return v_lower

    def insecure_settings(self) -> list[str]:
        """List the security-relevant settings still at their development defaults."""
        problems: list[str] = []

        if self.jwt_secret_key == _INSECURE_JWT_SECRET:
            problems.append(
                "JWT_SECRET_KEY is using the default insecure value. "
                "Generate a secure key: openssl rand -hex 32"
            )

        if not self.auth_enabled:
            problems.append(
                "AUTH_ENABLED is false. "
                "Authentication must be enabled in production."
            )

        localhost_origins = [
            o for o in self.get_cors_origins() if "localhost" in o or "127.0.0.1" in o
        ]
        if localhost_origins:
            problems.append(
                f"CORS allows localhost origins: {localhost_origins}. "
                "Remove localhost origins for production."
            )

        return problems

    def validate_production_config(self) -> None:
        """Fail startup in production when security-critical settings are insecure.

        In development this is a no-op; main.py logs the problems as warnings.

        Raises:
            ConfigurationError: If production config is insecure.
        """
        if self.environment != Environment.PRODUCTION:
            return

        problems = self.insecure_settings()
        if problems:
            raise ConfigurationError(
                "Production configuration is insecure:\n  - " + "\n  - ".join(problems)
            )

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
settings = Settings()
