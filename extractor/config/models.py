"""Configuration schema models using Pydantic."""

from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .duration import DurationParseError, parse_duration_ms


def _duration_field(value):
    try:
        return parse_duration_ms(value)
    except DurationParseError as e:
        raise ValueError(str(e)) from e


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class ProviderName(str, Enum):
    """Analysis providers the host can hand extracted text to."""

    OLLAMA = "ollama"
    PERPLEXITY = "perplexity"


class UnresolvedTokenPolicy(str, Enum):
    """What to do when an embedded Greenhouse posting has no discoverable board token."""

    FAIL = "fail"
    GENERIC = "generic"


class TransportType(str, Enum):
    """Host transport implementations."""

    NATIVE = "native"
    CONSOLE = "console"


class ReadinessConfig(BaseModel):
    """Polling parameters for deciding when a page has stopped changing."""

    poll_interval_ms: int = Field(500, description="Delay between content-length samples")
    required_stable_samples: int = Field(
        3, ge=1, le=50, description="Consecutive unchanged samples that count as stable"
    )
    minimum_length: int = Field(
        200, ge=0, description="Stable pages shorter than this keep being polled"
    )
    max_wait_ms: int = Field(10_000, description="Give up waiting and read the page anyway")

    @field_validator("poll_interval_ms", "max_wait_ms", mode="before")
    @classmethod
    def parse_durations(cls, v):
        """Accept milliseconds or duration strings like "500ms" and "10s"."""
        return _duration_field(v)

    @model_validator(mode="after")
    def check_interval_within_wait(self):
        if self.poll_interval_ms > self.max_wait_ms:
            raise ValueError(
                f"poll_interval_ms ({self.poll_interval_ms}) cannot exceed "
                f"max_wait_ms ({self.max_wait_ms})"
            )
        return self


class AggregationConfig(BaseModel):
    """Deadlines for collecting results from document contexts."""

    early_trigger_length: int = Field(
        1000, ge=0, description="A result longer than this arms the early trigger"
    )
    early_trigger_delay_ms: int = Field(
        1500, description="Grace period after the early trigger arms"
    )
    hard_deadline_ms: int = Field(15_000, description="Absolute collection deadline")

    @field_validator("early_trigger_delay_ms", "hard_deadline_ms", mode="before")
    @classmethod
    def parse_durations(cls, v):
        return _duration_field(v)


class GreenhouseConfig(BaseModel):
    """Direct job-board API settings."""

    api_base_url: str = Field(
        "https://boards-api.greenhouse.io/v1/boards",
        description="Base URL of the public job board API",
    )
    fallback_to_scrape: bool = Field(
        True, description="Scrape the page when the API request fails"
    )
    unresolved_token_policy: UnresolvedTokenPolicy = Field(
        UnresolvedTokenPolicy.FAIL,
        description="Embedded postings without a board token: fail or scrape generically",
    )

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        stripped = v.strip().rstrip("/")
        if not stripped.startswith(("http://", "https://")):
            raise ValueError("api_base_url must be an http(s) URL")
        return stripped

    model_config = {"use_enum_values": True}


class StrategiesConfig(BaseModel):
    """Content thresholds and rule tables for scraping strategies."""

    min_content_length: int = Field(
        100, ge=1, description="Shortest text any strategy may report"
    )
    description_min_length: int = Field(
        200, ge=1, description="Shortest description accepted from a candidate selector"
    )
    generic_min_region_length: int = Field(
        500, ge=1, description="Shortest content region the generic strategy prefers over the body"
    )
    rules_path: Optional[Path] = Field(
        None, description="Directory holding replacement sites.yaml / normalization.yaml"
    )


class ProviderSettings(BaseModel):
    """Analysis provider settings forwarded to the host with each payload.

    The credential is pre-resolved by the caller; a missing key never blocks
    extraction.
    """

    provider: ProviderName = Field(ProviderName.OLLAMA, description="Analysis provider")
    model: Optional[str] = Field(None, description="Model name (provider default when unset)")
    api_key: Optional[str] = Field(None, description="Provider credential", repr=False)

    model_config = {"use_enum_values": True}

    @property
    def resolved_model(self) -> str:
        if self.model:
            return self.model
        return "sonar-pro" if self.provider == ProviderName.PERPLEXITY.value else "qwen2.5:7b"


class TransportConfig(BaseModel):
    """Where extracted text is delivered."""

    type: TransportType = Field(TransportType.CONSOLE, description="native or console")
    command: List[str] = Field(
        default_factory=list, description="Native host executable and arguments"
    )
    timeout_ms: int = Field(60_000, description="Time allowed for the host to answer")

    @field_validator("timeout_ms", mode="before")
    @classmethod
    def parse_timeout(cls, v):
        return _duration_field(v)

    model_config = {"use_enum_values": True}

    @model_validator(mode="after")
    def check_native_command(self):
        if self.type == TransportType.NATIVE.value and not self.command:
            raise ValueError("transport.command is required when transport.type is 'native'")
        return self


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(LogFormat.KEY_VALUE, description="Log output format")

    model_config = {"use_enum_values": True}


class AdvancedConfig(BaseModel):
    """HTTP settings shared by API requests and page fetches."""

    http_request_timeout: int = Field(
        30, ge=1, le=300, description="Request timeout in seconds"
    )
    user_agent: str = Field(
        "Mozilla/5.0 (X11; Linux x86_64) JobTextExtractor/0.1",
        min_length=1,
        description="User-Agent string for HTTP requests",
    )

    @field_validator("user_agent")
    @classmethod
    def strip_user_agent(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("user_agent cannot be empty")
        return stripped


class AppConfig(BaseModel):
    """Root configuration object for the job text extractor."""

    readiness: ReadinessConfig = Field(default_factory=ReadinessConfig)
    aggregation: AggregationConfig = Field(default_factory=AggregationConfig)
    greenhouse: GreenhouseConfig = Field(default_factory=GreenhouseConfig)
    strategies: StrategiesConfig = Field(default_factory=StrategiesConfig)
    provider: ProviderSettings = Field(default_factory=ProviderSettings)
    transport: TransportConfig = Field(default_factory=TransportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    advanced: AdvancedConfig = Field(default_factory=AdvancedConfig)

    @model_validator(mode="after")
    def check_deadlines(self):
        if self.aggregation.early_trigger_delay_ms > self.aggregation.hard_deadline_ms:
            raise ValueError(
                "aggregation.early_trigger_delay_ms cannot exceed aggregation.hard_deadline_ms"
            )
        return self
