"""Non-fatal configuration checks."""

import warnings
from typing import List

from .duration import format_duration_ms
from .models import AppConfig, ProviderName


def check_for_warnings(app_config: AppConfig) -> List[str]:
    """
    Check a validated configuration for settings that work but are likely mistakes.

    Args:
        app_config: Validated configuration

    Returns:
        List of warning messages
    """
    warning_messages = []

    readiness = app_config.readiness
    aggregation = app_config.aggregation

    # Contexts still waiting for readiness when the deadline fires report nothing
    if aggregation.hard_deadline_ms <= readiness.max_wait_ms:
        warning_messages.append(
            f"aggregation.hard_deadline_ms ({format_duration_ms(aggregation.hard_deadline_ms)}) "
            f"is not longer than readiness.max_wait_ms "
            f"({format_duration_ms(readiness.max_wait_ms)}); slow pages will be dropped"
        )

    if readiness.poll_interval_ms < 50:
        warning_messages.append(
            f"Very short readiness.poll_interval_ms ({readiness.poll_interval_ms}ms) "
            "re-reads the page constantly"
        )

    if aggregation.early_trigger_length < app_config.strategies.min_content_length:
        warning_messages.append(
            "aggregation.early_trigger_length is below strategies.min_content_length; "
            "every result will arm the early trigger"
        )

    provider = app_config.provider
    if provider.provider == ProviderName.PERPLEXITY.value and not provider.api_key:
        warning_messages.append(
            "Provider 'perplexity' has no api_key; the host will not be able to analyse payloads"
        )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """Emit warning messages using Python's warnings module."""
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
