"""Configuration management for the job text extractor."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import apply_environment_overrides, load_config
from .models import (
    AdvancedConfig,
    AggregationConfig,
    AppConfig,
    GreenhouseConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    ProviderName,
    ProviderSettings,
    ReadinessConfig,
    StrategiesConfig,
    TransportConfig,
    TransportType,
    UnresolvedTokenPolicy,
)

__all__ = [
    # Loader functions
    "load_config",
    "load_environment_config",
    "apply_environment_overrides",
    # Configuration models
    "AppConfig",
    "ReadinessConfig",
    "AggregationConfig",
    "GreenhouseConfig",
    "StrategiesConfig",
    "ProviderSettings",
    "TransportConfig",
    "LoggingConfig",
    "AdvancedConfig",
    "EnvironmentConfig",
    # Enums
    "LogLevel",
    "LogFormat",
    "ProviderName",
    "TransportType",
    "UnresolvedTokenPolicy",
    # Exceptions
    "ConfigurationError",
]
