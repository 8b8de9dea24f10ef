"""Environment variable loading and validation."""

import os
import shlex
from typing import List, Optional

from .exceptions import ConfigurationError
from .models import ProviderName

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class EnvironmentConfig:
    """Environment variable configuration holder.

    Every value is optional; when set, it overrides the matching YAML setting.
    """

    def __init__(
        self,
        log_level: Optional[str] = None,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        native_host_command: Optional[List[str]] = None,
        environment: str = "local",
    ):
        self.log_level = log_level
        self.provider = provider
        self.model = model
        self.api_key = api_key
        self.native_host_command = native_host_command
        self.environment = environment


def load_environment_config() -> EnvironmentConfig:
    """
    Load and validate environment variables.

    Optional environment variables:
    - LOG_LEVEL: Override log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - EXTRACTOR_PROVIDER: Analysis provider (ollama, perplexity)
    - EXTRACTOR_MODEL: Provider model name
    - EXTRACTOR_API_KEY: Provider credential (PERPLEXITY_API_KEY is also read)
    - NATIVE_HOST_COMMAND: Native host command line, shell-quoted
    - ENVIRONMENT: Environment label for logs (default: local)

    Returns:
        EnvironmentConfig with validated values

    Raises:
        ConfigurationError: If any variable is set to an invalid value
    """
    errors = []

    log_level = os.getenv("LOG_LEVEL")
    provider = os.getenv("EXTRACTOR_PROVIDER")
    model = os.getenv("EXTRACTOR_MODEL")
    api_key = os.getenv("EXTRACTOR_API_KEY") or os.getenv("PERPLEXITY_API_KEY")
    host_command_str = os.getenv("NATIVE_HOST_COMMAND")
    environment = os.getenv("ENVIRONMENT", "local")

    if log_level:
        log_level = log_level.upper()
        if log_level not in VALID_LOG_LEVELS:
            errors.append(
                f"Invalid LOG_LEVEL: '{log_level}'. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
            )

    if provider:
        provider = provider.strip().lower()
        valid_providers = [p.value for p in ProviderName]
        if provider not in valid_providers:
            errors.append(
                f"Invalid EXTRACTOR_PROVIDER: '{provider}'. "
                f"Must be one of: {', '.join(valid_providers)}"
            )

    native_host_command = None
    if host_command_str:
        try:
            native_host_command = shlex.split(host_command_str)
        except ValueError as e:
            errors.append(f"Invalid NATIVE_HOST_COMMAND: {e}")
        else:
            if not native_host_command:
                errors.append("NATIVE_HOST_COMMAND is set but empty")

    if errors:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=[
                "Check the values in your .env file",
                "Unset variables you do not need; all of them are optional",
            ],
        )

    return EnvironmentConfig(
        log_level=log_level,
        provider=provider,
        model=model or None,
        api_key=api_key or None,
        native_host_command=native_host_command,
        environment=environment,
    )
