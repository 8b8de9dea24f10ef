"""Duration parsing utilities for configuration.

Timing settings (poll intervals, deadlines, request timeouts) are expressed in
milliseconds internally. Configuration files may give them as plain integers
(milliseconds) or as duration strings.
"""

import re
from typing import Union


class DurationParseError(ValueError):
    """Raised when a duration value cannot be parsed."""

    pass


_UNIT_MILLISECONDS = {
    "ms": 1,
    "s": 1000,
    "m": 60_000,
    "h": 3_600_000,
}


def parse_duration_ms(value: Union[str, int, float]) -> int:
    """
    Parse a duration to milliseconds.

    Supports:
    - Integers and floats: taken as milliseconds (``1500``)
    - Human-readable: ``"500ms"``, ``"2s"``, ``"1m"``, ``"1m30s"``, ``"1.5s"``
    - ISO-8601: ``"PT2S"``, ``"PT1M30S"``, ``"PT0.5S"``

    Args:
        value: Duration to parse

    Returns:
        Duration in milliseconds (always positive)

    Raises:
        DurationParseError: If the value is invalid, zero or negative

    Examples:
        >>> parse_duration_ms("500ms")
        500
        >>> parse_duration_ms("PT2S")
        2000
        >>> parse_duration_ms(750)
        750
    """
    if isinstance(value, bool):
        raise DurationParseError(f"Invalid duration: {value!r}")

    if isinstance(value, (int, float)):
        milliseconds = int(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise DurationParseError("Duration string cannot be empty")
        if text.isdigit():
            milliseconds = int(text)
        elif text.upper().startswith("P"):
            milliseconds = _parse_iso8601_duration(text)
        else:
            milliseconds = _parse_human_readable_duration(text)
    else:
        raise DurationParseError(f"Invalid duration type: {type(value).__name__}")

    if milliseconds <= 0:
        raise DurationParseError(f"Duration must be positive: {value!r}")

    return milliseconds


def _parse_iso8601_duration(duration_str: str) -> int:
    """Parse ``PT[n]H[n]M[n]S`` (days are not meaningful for page timing)."""
    pattern = r"^PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+(?:\.\d+)?)S)?$"
    match = re.match(pattern, duration_str.upper())

    if not match or not any(match.groups()):
        raise DurationParseError(
            f"Invalid ISO-8601 duration format: '{duration_str}'. "
            "Expected format like 'PT2S', 'PT1M30S' or 'PT0.5S'"
        )

    hours, minutes, seconds = match.groups()

    total = 0.0
    if hours:
        total += int(hours) * _UNIT_MILLISECONDS["h"]
    if minutes:
        total += int(minutes) * _UNIT_MILLISECONDS["m"]
    if seconds:
        total += float(seconds) * _UNIT_MILLISECONDS["s"]

    return int(round(total))


def _parse_human_readable_duration(duration_str: str) -> int:
    """Parse ``500ms``, ``2s``, ``1m30s`` style durations."""
    # "ms" must be tried before "m" and "s"
    pattern = r"(\d+(?:\.\d+)?)\s*(ms|s|m|h)"
    cleaned_input = re.sub(r"\s+", "", duration_str.lower())
    matches = re.findall(pattern, cleaned_input)

    if not matches:
        raise DurationParseError(
            f"Invalid duration format: '{duration_str}'. "
            "Expected format like '500ms', '2s', '1m' or combinations like '1m30s'"
        )

    parsed_str = "".join(f"{num}{unit}" for num, unit in matches)
    if parsed_str != cleaned_input:
        raise DurationParseError(
            f"Invalid characters in duration: '{duration_str}'. "
            "Use only numbers and units: ms, s, m, h"
        )

    total = sum(float(num) * _UNIT_MILLISECONDS[unit] for num, unit in matches)
    return int(round(total))


def format_duration_ms(milliseconds: int) -> str:
    """
    Render milliseconds for log and error messages.

    Examples:
        >>> format_duration_ms(450)
        '450ms'
        >>> format_duration_ms(2500)
        '2.5s'
    """
    if milliseconds < 1000:
        return f"{milliseconds}ms"
    seconds = milliseconds / 1000
    if seconds < 60:
        return f"{seconds:g}s"
    return f"{seconds / 60:g}m"
