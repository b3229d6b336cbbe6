"""Configuration template substitution utilities."""

import os
import re
from pathlib import Path

import yaml
from loguru import logger
from pydantic_core import ValidationError

from catalog_grader.runtime.config.config_data import ConfigData

_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variable placeholders in text.

    Supports formats:
    - ${VAR_NAME} - required variable (raises error if missing)
    - ${VAR_NAME:-default} - optional with default value
    - ${VAR_NAME:?error_message} - required with custom error message
    """

    def replacer(match: re.Match) -> str:
        var_expr = match.group(1)

        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name, default)

        elif ":?" in var_expr:
            var_name, error_msg = var_expr.split(":?", 1)
            value = os.getenv(var_name)
            if value is None:
                raise ValueError(f"Required environment variable {var_name}: {error_msg}")
            return value

        else:
            value = os.getenv(var_expr)
            if value is None:
                raise ValueError(f"Required environment variable {var_expr} not set")
            return value

    return _PLACEHOLDER.sub(replacer, text)


def apply_environment_overrides(env_mode: str) -> None:
    """Promote ``<ENV>_FOO`` variables to ``FOO`` for the active environment."""
    prefix = f"{env_mode.upper()}_"
    overrides = [(var, value) for var, value in os.environ.items() if var.startswith(prefix)]
    if overrides:
        logger.info(
            "Applying environment-specific overrides: {}", [name for name, _ in overrides]
        )

    for var_name, var_value in overrides:
        os.environ[var_name[len(prefix):]] = var_value
        logger.debug("Set environment variable {} from {}", var_name[len(prefix):], var_name)


def load_templated_yaml(file_path: Path, env_mode: str = "development") -> ConfigData:
    """
    Load a YAML file with environment variable substitution.

    Args:
        file_path: Path to the YAML file
        env_mode: Active environment; selects the <ENV>_ variable overrides

    Returns:
        Parsed configuration with environment variables substituted

    Raises:
        ValueError: If required environment variables are missing or the file is invalid
        FileNotFoundError: If the YAML file doesn't exist
    """
    with open(file_path) as f:
        content = f.read()

    logger.info("Loading configuration for environment: {}", env_mode)
    apply_environment_overrides(env_mode)

    substituted_content = substitute_env_vars(content)

    try:
        loaded = yaml.safe_load(substituted_content)
        if not loaded:
            raise ValueError("Failed to parse YAML")
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e

    try:
        config = ConfigData(**loaded.get("config", {}))
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    if config.app.environment == "production" and not config.app.session_signing_secret:
        logger.warning("No session signing secret configured; bearer tokens will be rejected")

    return config


def load_config(file_path: Path, env_mode: str = "development") -> ConfigData:
    """Load config.yaml, falling back to model defaults when the file is absent."""
    if not file_path.exists():
        logger.warning("Configuration file {} not found; using defaults", file_path)
        return ConfigData()
    return load_templated_yaml(file_path, env_mode)
