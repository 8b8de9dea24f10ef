"""Integration tests for configuration module."""

from pathlib import Path

import pytest

from extractor.config import (
    AppConfig,
    ConfigurationError,
    EnvironmentConfig,
    GreenhouseConfig,
    ProviderSettings,
    TransportType,
    UnresolvedTokenPolicy,
    apply_environment_overrides,
    load_config,
)
from extractor.config.duration import DurationParseError, format_duration_ms, parse_duration_ms
from extractor.config.environment import load_environment_config
from extractor.config.validators import check_for_warnings

# Test fixtures directory
FIXTURES_DIR = Path(__file__).parent / "fixtures"

ENV_VARS = (
    "LOG_LEVEL",
    "EXTRACTOR_PROVIDER",
    "EXTRACTOR_MODEL",
    "EXTRACTOR_API_KEY",
    "PERPLEXITY_API_KEY",
    "NATIVE_HOST_COMMAND",
    "ENVIRONMENT",
)


# Pytest fixtures
@pytest.fixture
def mock_env_vars(monkeypatch):
    """Start every test from an environment with no extractor variables set."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestConfigurationLoading:
    """Test configuration loading from YAML files."""

    def test_load_valid_config(self, mock_env_vars):
        """Test loading a configuration that sets every section."""
        app_config, env_config = load_config(FIXTURES_DIR / "valid_config.yaml")

        # Durations parsed to milliseconds
        assert app_config.readiness.poll_interval_ms == 250
        assert app_config.readiness.max_wait_ms == 8000
        assert app_config.aggregation.early_trigger_delay_ms == 1000
        assert app_config.aggregation.hard_deadline_ms == 12000
        assert app_config.transport.timeout_ms == 45000

        # Greenhouse settings
        assert app_config.greenhouse.api_base_url == "https://boards-api.greenhouse.io/v1/boards"
        assert app_config.greenhouse.fallback_to_scrape is False
        assert app_config.greenhouse.unresolved_token_policy == UnresolvedTokenPolicy.GENERIC.value

        # Provider and transport
        assert app_config.provider.provider == "perplexity"
        assert app_config.provider.resolved_model == "sonar"
        assert app_config.transport.type == TransportType.NATIVE.value
        assert app_config.transport.command == ["/usr/local/bin/job-host", "--quiet"]

        assert app_config.logging.level == "DEBUG"
        assert app_config.logging.format == "json"
        assert app_config.advanced.http_request_timeout == 20
        assert env_config.environment == "local"

    def test_load_minimal_config(self, mock_env_vars):
        """Test that omitted sections use defaults."""
        app_config, _ = load_config(FIXTURES_DIR / "minimal_config.yaml")

        assert app_config.readiness.poll_interval_ms == 500
        assert app_config.readiness.required_stable_samples == 3
        assert app_config.aggregation.early_trigger_length == 1000
        assert app_config.aggregation.hard_deadline_ms == 15000
        assert app_config.greenhouse.unresolved_token_policy == UnresolvedTokenPolicy.FAIL.value
        assert app_config.transport.type == TransportType.CONSOLE.value
        assert app_config.logging.level == "INFO"

    def test_defaults_without_config_file(self, mock_env_vars, tmp_path):
        """Test that no config file at the default locations means built-in defaults."""
        mock_env_vars.chdir(tmp_path)

        app_config, _ = load_config()

        assert app_config == AppConfig()

    def test_default_location_used(self, mock_env_vars, tmp_path):
        mock_env_vars.chdir(tmp_path)
        (tmp_path / "config.yaml").write_text("strategies:\n  min_content_length: 42\n", encoding="utf-8")

        app_config, _ = load_config()

        assert app_config.strategies.min_content_length == 42

    def test_empty_config_file(self, mock_env_vars, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("", encoding="utf-8")

        app_config, _ = load_config(config_file)

        assert app_config == AppConfig()

    def test_config_file_not_found(self, mock_env_vars):
        """Test error when an explicit config file doesn't exist."""
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(Path("nonexistent.yaml"))

        assert "not found" in str(exc_info.value)

    def test_invalid_yaml_syntax(self, tmp_path, mock_env_vars):
        """Test error on malformed YAML."""
        config_file = tmp_path / "bad.yaml"
        config_file.write_text("readiness:\n  poll_interval_ms: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(config_file)

        assert "Failed to parse YAML" in str(exc_info.value)

    def test_non_mapping_config(self, tmp_path, mock_env_vars):
        config_file = tmp_path / "list.yaml"
        config_file.write_text("- readiness\n- aggregation\n", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="must contain a mapping"):
            load_config(config_file)


class TestConfigurationValidation:
    """Test schema validation errors."""

    def _load(self, tmp_path, content):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(content, encoding="utf-8")
        return load_config(config_file)

    def test_invalid_duration(self, tmp_path, mock_env_vars):
        with pytest.raises(ConfigurationError) as exc_info:
            self._load(tmp_path, "readiness:\n  max_wait_ms: soon\n")

        assert any("max_wait_ms" in error for error in exc_info.value.errors)

    def test_invalid_enum(self, tmp_path, mock_env_vars):
        with pytest.raises(ConfigurationError) as exc_info:
            self._load(tmp_path, "greenhouse:\n  unresolved_token_policy: retry\n")

        assert any("unresolved_token_policy" in error for error in exc_info.value.errors)

    def test_invalid_type(self, tmp_path, mock_env_vars):
        with pytest.raises(ConfigurationError) as exc_info:
            self._load(tmp_path, "strategies:\n  min_content_length: lots\n")

        assert any("Invalid type for 'strategies -> min_content_length'" in e for e in exc_info.value.errors)

    def test_poll_interval_exceeds_max_wait(self, tmp_path, mock_env_vars):
        with pytest.raises(ConfigurationError):
            self._load(tmp_path, "readiness:\n  poll_interval_ms: 5s\n  max_wait_ms: 1s\n")

    def test_early_trigger_delay_exceeds_deadline(self, tmp_path, mock_env_vars):
        with pytest.raises(ConfigurationError) as exc_info:
            self._load(tmp_path, "aggregation:\n  early_trigger_delay_ms: 20s\n  hard_deadline_ms: 10s\n")

        assert any("early_trigger_delay_ms" in error for error in exc_info.value.errors)

    def test_native_transport_requires_command(self, tmp_path, mock_env_vars):
        with pytest.raises(ConfigurationError) as exc_info:
            self._load(tmp_path, "transport:\n  type: native\n")

        assert any("transport.command" in error for error in exc_info.value.errors)

    def test_api_base_url_must_be_http(self):
        with pytest.raises(ValueError):
            GreenhouseConfig(api_base_url="ftp://boards")

    def test_error_message_lists_errors_and_suggestions(self):
        error = ConfigurationError("Broken", errors=["first", "second"], suggestions=["fix it"])

        message = str(error)
        assert "1. first" in message
        assert "2. second" in message
        assert "fix it" in message


class TestConfigurationWarnings:
    """Non-fatal checks."""

    def test_default_config_has_no_warnings(self):
        assert check_for_warnings(AppConfig()) == []

    def test_deadline_not_longer_than_readiness(self):
        config = AppConfig.model_validate(
            {"readiness": {"max_wait_ms": "20s"}, "aggregation": {"hard_deadline_ms": "15s"}}
        )

        warnings = check_for_warnings(config)

        assert len(warnings) == 1
        assert "slow pages will be dropped" in warnings[0]

    def test_perplexity_without_key(self):
        config = AppConfig.model_validate({"provider": {"provider": "perplexity"}})

        assert any("api_key" in w for w in check_for_warnings(config))

    def test_warnings_emitted_on_load(self, tmp_path, mock_env_vars):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("readiness:\n  poll_interval_ms: 10\n", encoding="utf-8")

        with pytest.warns(UserWarning, match="poll_interval_ms"):
            load_config(config_file)


class TestDurationParsing:
    """Test duration parsing utilities."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (1500, 1500),
            ("750", 750),
            ("500ms", 500),
            ("2s", 2000),
            ("1.5s", 1500),
            ("1m", 60000),
            ("1m30s", 90000),
            ("1h", 3600000),
            ("PT2S", 2000),
            ("PT0.5S", 500),
            ("PT1M30S", 90000),
            ("pt1h", 3600000),
        ],
    )
    def test_parse(self, value, expected):
        assert parse_duration_ms(value) == expected

    @pytest.mark.parametrize("value", ["", "soon", "5 parsecs", "2s and more", "P1D", "PT", 0, -5, True, [1]])
    def test_parse_invalid(self, value):
        with pytest.raises(DurationParseError):
            parse_duration_ms(value)

    @pytest.mark.parametrize(
        "value, expected",
        [(450, "450ms"), (1000, "1s"), (2500, "2.5s"), (90000, "1.5m")],
    )
    def test_format(self, value, expected):
        assert format_duration_ms(value) == expected


class TestEnvironmentVariables:
    """Test environment variable loading."""

    def test_nothing_set(self, mock_env_vars):
        env_config = load_environment_config()

        assert env_config.log_level is None
        assert env_config.provider is None
        assert env_config.api_key is None
        assert env_config.native_host_command is None
        assert env_config.environment == "local"

    def test_values_read(self, mock_env_vars):
        mock_env_vars.setenv("LOG_LEVEL", "debug")
        mock_env_vars.setenv("EXTRACTOR_PROVIDER", " Perplexity ")
        mock_env_vars.setenv("EXTRACTOR_MODEL", "sonar")
        mock_env_vars.setenv("PERPLEXITY_API_KEY", "pplx-env")
        mock_env_vars.setenv("NATIVE_HOST_COMMAND", "'/opt/job host/run' --verbose")
        mock_env_vars.setenv("ENVIRONMENT", "dev")

        env_config = load_environment_config()

        assert env_config.log_level == "DEBUG"
        assert env_config.provider == "perplexity"
        assert env_config.model == "sonar"
        assert env_config.api_key == "pplx-env"
        assert env_config.native_host_command == ["/opt/job host/run", "--verbose"]
        assert env_config.environment == "dev"

    def test_extractor_api_key_preferred(self, mock_env_vars):
        mock_env_vars.setenv("EXTRACTOR_API_KEY", "primary")
        mock_env_vars.setenv("PERPLEXITY_API_KEY", "secondary")

        assert load_environment_config().api_key == "primary"

    def test_invalid_values_collected(self, mock_env_vars):
        """Test that every invalid variable is reported at once."""
        mock_env_vars.setenv("LOG_LEVEL", "LOUD")
        mock_env_vars.setenv("EXTRACTOR_PROVIDER", "chatbot")
        mock_env_vars.setenv("NATIVE_HOST_COMMAND", "'unterminated")

        with pytest.raises(ConfigurationError) as exc_info:
            load_environment_config()

        assert len(exc_info.value.errors) == 3

    def test_environment_overrides_file(self, mock_env_vars):
        mock_env_vars.setenv("EXTRACTOR_API_KEY", "from-env")
        mock_env_vars.setenv("NATIVE_HOST_COMMAND", "job-host")

        app_config, _ = load_config(FIXTURES_DIR / "minimal_config.yaml")

        assert app_config.provider.api_key == "from-env"
        assert app_config.provider.provider == "ollama"
        assert app_config.transport.type == TransportType.NATIVE.value
        assert app_config.transport.command == ["job-host"]

    def test_apply_overrides_without_values_returns_same_config(self):
        app_config = AppConfig()

        assert apply_environment_overrides(app_config, EnvironmentConfig()) is app_config


class TestProviderSettings:
    def test_resolved_model_defaults(self):
        assert ProviderSettings().resolved_model == "qwen2.5:7b"
        assert ProviderSettings(provider="perplexity").resolved_model == "sonar-pro"
        assert ProviderSettings(provider="perplexity", model="sonar").resolved_model == "sonar"

    def test_api_key_not_in_repr(self):
        assert "secret" not in repr(ProviderSettings(api_key="secret"))
