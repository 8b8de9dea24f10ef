"""Configuration loader for the job text extractor."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from extractor.logging import get_logger

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .models import AppConfig, TransportType
from .validators import check_for_warnings, emit_warnings

logger = get_logger(__name__, component="config")

DEFAULT_CONFIG_CANDIDATES = (
    Path("config.yaml"),
    Path("config") / "config.yaml",
)


def load_config(config_path: Optional[Path] = None) -> tuple[AppConfig, EnvironmentConfig]:
    """
    Load and validate configuration from a YAML file and environment variables.

    Lookup order:
    1. The provided config_path (must exist)
    2. config.yaml in the current directory
    3. ./config/config.yaml
    4. Built-in defaults when neither default location exists

    Environment variables override the provider settings and the native host
    command from the file.

    Args:
        config_path: Optional path to configuration file

    Returns:
        Tuple of (AppConfig, EnvironmentConfig)

    Raises:
        ConfigurationError: If configuration is invalid or an explicit path is missing
    """
    config_file = _find_config_file(config_path)

    config_dict: Dict[str, Any] = {}
    if config_file is not None:
        config_dict = _read_yaml(config_file)

    app_config = _validate(config_dict)

    try:
        env_config = load_environment_config()
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(
            f"Failed to load environment configuration: {e}",
            suggestions=["Check the values in your .env file"],
        ) from e

    app_config = apply_environment_overrides(app_config, env_config)

    warnings = check_for_warnings(app_config)
    if warnings:
        emit_warnings(warnings)

    return app_config, env_config


def apply_environment_overrides(app_config: AppConfig, env_config: EnvironmentConfig) -> AppConfig:
    """Return a copy of app_config with environment values applied."""
    provider_updates = {
        key: value
        for key, value in (
            ("provider", env_config.provider),
            ("model", env_config.model),
            ("api_key", env_config.api_key),
        )
        if value
    }

    updates: Dict[str, Any] = {}
    if provider_updates:
        updates["provider"] = app_config.provider.model_copy(update=provider_updates)

    if env_config.native_host_command:
        updates["transport"] = app_config.transport.model_copy(
            update={
                "type": TransportType.NATIVE.value,
                "command": env_config.native_host_command,
            }
        )

    if env_config.log_level:
        updates["logging"] = app_config.logging.model_copy(update={"level": env_config.log_level})

    if not updates:
        return app_config
    return app_config.model_copy(update=updates)


def _read_yaml(config_file: Path) -> Dict[str, Any]:
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Failed to parse YAML configuration: {e}",
            suggestions=[
                "Check YAML syntax in your config file",
                "Ensure proper indentation (use spaces, not tabs)",
            ],
            source=config_file,
        ) from e
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read configuration file: {e}",
            suggestions=["Check the file permissions"],
            source=config_file,
        ) from e

    if config_dict is None:
        return {}

    if not isinstance(config_dict, dict):
        raise ConfigurationError(
            f"Configuration file must contain a mapping, got {type(config_dict).__name__}",
            suggestions=["Review config.example.yaml for the expected layout"],
            source=config_file,
        )

    logger.debug(
        "Configuration file read",
        extra={"event": "config.file.read", "config_path": str(config_file)},
    )
    return config_dict


def _validate(config_dict: Dict[str, Any]) -> AppConfig:
    try:
        return AppConfig.model_validate(config_dict)
    except ValidationError as e:
        errors = []
        for error in e.errors():
            field_path = " -> ".join(str(loc) for loc in error["loc"]) or "(root)"
            error_type = error["type"]

            if error_type == "missing":
                errors.append(f"Missing required field: {field_path}")
            elif error_type in ("string_type", "int_type", "int_parsing", "bool_type", "list_type"):
                expected_type = error_type.split("_")[0]
                errors.append(
                    f"Invalid type for '{field_path}': expected {expected_type}, "
                    f"got {error.get('input')!r}"
                )
            elif error_type == "enum":
                errors.append(f"Invalid value for '{field_path}': {error['msg']}")
            else:
                errors.append(f"{field_path}: {error['msg']}")

        raise ConfigurationError(
            "Configuration validation failed",
            errors=errors,
            suggestions=[
                "Review config.example.yaml for correct format",
                "Durations accept milliseconds or strings like '500ms', '2s', 'PT2S'",
            ],
        ) from e


def _find_config_file(config_path: Optional[Path] = None) -> Optional[Path]:
    """
    Resolve the configuration file.

    Returns:
        Path to the configuration file, or None to use built-in defaults

    Raises:
        ConfigurationError: If an explicit path was given and does not exist
    """
    if config_path:
        if not config_path.exists():
            raise ConfigurationError(
                f"Specified configuration file not found: {config_path}",
                suggestions=[
                    f"Ensure {config_path} exists",
                    "Omit --config to use config.yaml or the built-in defaults",
                ],
            )
        return config_path

    for candidate in DEFAULT_CONFIG_CANDIDATES:
        if candidate.exists():
            return candidate

    logger.debug(
        "No configuration file found, using defaults",
        extra={
            "event": "config.defaults.used",
            "candidates": [str(c) for c in DEFAULT_CONFIG_CANDIDATES],
        },
    )
    return None
