from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentVariables(BaseSettings):
    """Bootstrap values read from ``APP_*`` environment variables and .env files.

    Everything else lives in config.yaml; these only decide which file is
    loaded and for which environment.
    """

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = Field(default="development")
    config_file: str = Field(default="config.yaml")
