"""Application configuration with validation."""

from enum import Enum
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import List

# Placeholder salt shipped for development. Production startup refuses it.
DEFAULT_IP_HASH_SALT = "dev-insecure-salt-change-me"


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class ConfigurationError(Exception):
    """Raised when application configuration is invalid for the environment."""
    pass


class Settings(BaseSettings):
    """
    Application settings with validation.

    Uses Pydantic for configuration validation, preventing
    common security issues like wildcard CORS or an unsalted
    contributor address hash.
    """

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/production)"
    )

    # CORS Configuration
    cors_allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:3001",
        description="Allowed CORS origins (comma-separated)"
    )

    # Database Configuration
    database_url: str = Field(
        default="sqlite:///./witness.db",
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

    # Contributor privacy
    # Client addresses are only ever stored as a salted SHA-256 prefix.
    ip_hash_salt: str = Field(
        default=DEFAULT_IP_HASH_SALT,
        description="Salt mixed into client address hashes (override in production)"
    )

    # Write throttling
    # Two separate gates: the bootstrap gate backs the session contribution
    # endpoints, the content gate runs inside create/propose/verify.
    bootstrap_rate_limit: int = Field(
        default=10,
        description="Contributions per window allowed by the session bootstrap gate"
    )
    content_rate_limit: int = Field(
        default=50,
        description="Writes per window allowed by the content gate"
    )
    rate_limit_window_seconds: int = Field(
        default=3600,
        description="Length of the contribution window in seconds"
    )

    # Consensus
    proposal_expiry_days: int = Field(
        default=30,
        description="Days a proposal stays open before it is considered expired"
    )
    expire_proposals_on_startup: bool = Field(
        default=True,
        description="Move overdue pending proposals to 'expired' when the API starts"
    )
    resolve_max_hops: int = Field(
        default=5,
        description="Maximum superseded_by hops followed when resolving a current version"
    )

    # Demo data
    seed_demo_data: bool = Field(
        default=False,
        description="Load fixtures/seed_records.json into an empty database on startup"
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

        Parses comma-separated string and validates no wildcards.
        """
        origins = [origin.strip() for origin in self.cors_allowed_origins.split(',') if origin.strip()]

        if "*" in origins:
            raise ValueError(
                "Wildcard CORS (*) not allowed. "
                "Specify explicit origins in CORS_ALLOWED_ORIGINS"
            )

        return origins

    @property
    def rate_limit_window_ms(self) -> int:
        return self.rate_limit_window_seconds * 1000

    @property
    def proposal_expiry_ms(self) -> int:
        return self.proposal_expiry_days * 24 * 60 * 60 * 1000

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard Python logging levels."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v_upper

    @field_validator('bootstrap_rate_limit', 'content_rate_limit', 'resolve_max_hops')
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Must be at least 1")
        return v

    def validate_production_config(self) -> None:
        """Validate configuration for production environment.

        In production, fails startup if privacy-critical settings use insecure defaults.
        In development, returns silently; main.py logs warnings instead.

        Raises:
            ConfigurationError: If production config is insecure.
        """
        errors: list[str] = []

        if self.ip_hash_salt == DEFAULT_IP_HASH_SALT:
            errors.append(
                "IP_HASH_SALT is using the default value. "
                "Generate a secret salt: openssl rand -hex 32"
            )

        origins = self.get_cors_origins()
        localhost_origins = [o for o in origins if "localhost" in o or "127.0.0.1" in o]
        if localhost_origins:
            errors.append(
                f"CORS allows localhost origins: {localhost_origins}. "
                "Remove localhost origins for production."
            )

        if self.seed_demo_data:
            errors.append("SEED_DEMO_DATA is enabled. Demo records must not reach production.")

        if errors and self.environment == Environment.PRODUCTION:
            raise ConfigurationError(
                "Production configuration is insecure:\n  - " + "\n  - ".join(errors)
            )

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()
