"""Configuration template substitution utilities."""

import os
import re
from pathlib import Path

import yaml
from loguru import logger
from pydantic import ValidationError

from src.authgate.core.errors import ConfigurationError
from src.authgate.runtime.config.config_data import ConfigData


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

        if ":?" in var_expr:
            var_name, error_msg = var_expr.split(":?", 1)
            value = os.getenv(var_name)
            if value is None:
                raise ValueError(f"Required environment variable {var_name}: {error_msg}")
            return value

        value = os.getenv(var_expr)
        if value is None:
            raise ValueError(f"Required environment variable {var_expr} not set")
        return value

    return re.sub(r"\$\{([^}]+)\}", replacer, text)


def _apply_environment_overrides(env_mode: str) -> None:
    """Copy ``<ENV>_NAME`` variables to ``NAME`` for the active environment."""
    prefix = f"{env_mode.upper()}_"
    overrides = [
        (var, value) for var, value in os.environ.items() if var.startswith(prefix)
    ]
    if overrides:
        logger.info(
            "Applying environment-specific overrides: {}", [name for name, _ in overrides]
        )
    for var_name, var_value in overrides:
        os.environ[var_name[len(prefix):]] = var_value


def load_templated_yaml(file_path: Path) -> ConfigData:
    """
    Load the ``config:`` section of a YAML file with environment substitution.

    Args:
        file_path: Path to the YAML file

    Returns:
        Validated, frozen configuration

    Raises:
        ConfigurationError: If variables are missing, the YAML is malformed
            or the values fail validation
        FileNotFoundError: If the YAML file doesn't exist
    """
    content = Path(file_path).read_text()

    env_mode = os.getenv("APP_ENVIRONMENT", "development")
    logger.info("Loading configuration for environment: {}", env_mode)
    _apply_environment_overrides(env_mode)

    try:
        loaded = yaml.safe_load(substitute_env_vars(content))
    except ValueError as e:
        raise ConfigurationError(str(e)) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Error parsing YAML: {e}") from e

    if not isinstance(loaded, dict):
        raise ConfigurationError(f"{file_path} does not contain a YAML mapping")

    try:
        return ConfigData(**(loaded.get("config") or {}))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
