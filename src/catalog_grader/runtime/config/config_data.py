"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

import os
from typing import Literal

from loguru import logger
from pydantic import BaseModel, Field, computed_field


class CORSConfig(BaseModel):
    """CORS configuration for the application."""

    origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:3001"]
    )
    allow_credentials: bool = True
    allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    )
    allow_headers: list[str] = Field(default=["*"])


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="json", description="Log format")
    file: str | None = Field(default="logs/app.log", description="Log file path")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )


class DatabaseConfig(BaseModel):
    """Database configuration model."""

    url: str = Field(
        default="sqlite:///./catalog.db",
        description="Database connection URL",
    )
    environment_mode: str = Field(
        default="development", description="Environment mode: development or production"
    )
    auto_create_tables: bool = Field(
        default=True, description="Create missing tables on application startup"
    )
    pool_size: int = Field(default=20, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum pool overflow")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Pool recycle time in seconds")
    password_env_var: str | None = Field(
        default=None,
        description="Environment variable name containing database password",
    )
    password_file: str | None = Field(
        default=None,
        description="Path to file containing database password",
    )

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @computed_field
    @property
    def password(self) -> str | None:
        """
        Get the database password from the appropriate source.
        1. In development or test mode, parse it from the URL if present
        2. In production mode, read it from the mounted secrets file given by
           `password_file` or the environment variable named by `password_env_var`
        """
        if self.environment_mode in ("development", "test"):
            from sqlalchemy.engine import make_url

            return make_url(self.url).password
        elif self.environment_mode == "production":
            if self.password_file:
                try:
                    with open(self.password_file) as f:
                        return f.read().strip()
                except OSError as e:
                    raise ValueError(
                        "Failed to read database password from file."
                    ) from e
            elif self.password_env_var:
                password = os.getenv(self.password_env_var)
                if password:
                    return password
                raise ValueError(
                    f"Environment variable {self.password_env_var} not set"
                )
            elif self.is_sqlite:
                return None
            else:
                raise ValueError(
                    "In production mode, either password_file or password_env_var must be set"
                )
        else:
            raise ValueError(
                "Invalid environment_mode; must be 'development', 'production', or 'test'"
            )

    @computed_field
    @property
    def connection_string(self) -> str:
        """Construct the database connection string with the resolved password."""
        from sqlalchemy.engine import make_url

        base_url = make_url(self.url)
        if self.is_sqlite:
            return self.url

        resolved_password = self.password
        if base_url.password:
            if self.environment_mode == "production":
                logger.warning(
                    "Database URL contains a password in production mode; "
                    "consider using a secrets file or environment variable."
                )
            if resolved_password and resolved_password != base_url.password:
                logger.warning(
                    "Database password from secrets does not match the one in the URL. Using the secret."
                )
                base_url = base_url.set(password=resolved_password)
        elif resolved_password:
            base_url = base_url.set(password=resolved_password)

        # render_as_string keeps the password instead of SQLAlchemy's *** masking
        return base_url.render_as_string(hide_password=False)


class JWTConfig(BaseModel):
    """JWT validation configuration."""

    allowed_algorithms: list[str] = Field(
        default_factory=lambda: ["HS256"],
        description="JWT algorithms allowed for token validation",
    )
    gen_issuer: str = Field(
        default="catalog-grader", description="Issuer name to use when generating tokens"
    )
    audiences: list[str] = Field(
        default_factory=lambda: ["catalog-grader-api"],
        description="JWT audiences that this API accepts",
    )
    clock_skew: int = Field(default=60, description="Clock skew tolerance in seconds")
    access_token_ttl_seconds: int = Field(
        default=8 * 3600, description="Lifetime of minted access tokens"
    )


class LLMConfig(BaseModel):
    """Completion provider and generation pipeline settings."""

    default_provider: str = Field(
        default="OpenAI", description="Provider config name used when none is given"
    )
    default_model: str = Field(
        default="gpt-3.5-turbo", description="Model used when a provider has none"
    )
    timeout_seconds: float = Field(
        default=30.0, description="Timeout for a single completion call"
    )
    candidate_count: int = Field(
        default=3, ge=1, le=20, description="Number of similar product names to request"
    )
    attribute_count: int = Field(
        default=5, ge=1, le=50, description="Number of attributes to request"
    )
    max_tokens: int = Field(default=512, description="Completion token limit")


class GradingConfig(BaseModel):
    """Grading queue settings."""

    claim_ttl_seconds: int = Field(
        default=900, description="How long a fetched product stays claimed"
    )
    ai_generated_only: bool = Field(
        default=True, description="Only queue products created by the pipeline"
    )


class MetricsConfig(BaseModel):
    """Metrics aggregation settings."""

    default_window_days: int = Field(
        default=30, description="Trailing window used when no start date is given"
    )


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    host: str = Field(default="localhost", description="Application host")
    port: int = Field(default=8000, description="Application port")
    session_signing_secret: str | None = Field(
        default=None, description="Secret for signing bearer JWTs"
    )
    cors: CORSConfig = Field(
        default_factory=CORSConfig, description="CORS configuration"
    )


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    jwt: JWTConfig = Field(
        default_factory=JWTConfig, description="JWT validation configuration"
    )
    llm: LLMConfig = Field(
        default_factory=LLMConfig, description="Completion provider configuration"
    )
    grading: GradingConfig = Field(
        default_factory=GradingConfig, description="Grading queue configuration"
    )
    metrics: MetricsConfig = Field(
        default_factory=MetricsConfig, description="Metrics configuration"
    )
    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
