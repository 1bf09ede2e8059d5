"""Parsing of human-readable duration strings such as ``"1m"`` or ``"1h30m"``."""

from __future__ import annotations

import re
from datetime import timedelta

from gateway.core.errors import ConfigurationAppError

# Unit suffix -> number of microseconds
_UNIT_MICROSECONDS: dict[str, float] = {
    "ns": 0.001,
    "us": 1.0,
    "µs": 1.0,  # U+00B5 micro sign
    "μs": 1.0,  # U+03BC greek mu
    "ms": 1_000.0,
    "s": 1_000_000.0,
    "m": 60_000_000.0,
    "h": 3_600_000_000.0,
}

_COMPONENT_RE = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def _invalid(value: str) -> ConfigurationAppError:
    return ConfigurationAppError(
        code="invalid_duration",
        message=f"Invalid duration: {value!r}",
        details={
            "value": value,
            "hint": 'Use a number followed by a unit, e.g. "30s", "1m" or "1h30m"',
        },
    )


def parse_duration(value: str) -> timedelta:
    """Parse a duration string into a ``timedelta``.

    A duration is an optional sign followed by one or more decimal numbers,
    each with a unit suffix (``ns``, ``us``, ``ms``, ``s``, ``m``, ``h``).
    The bare string ``"0"`` is accepted as zero.

    Args:
        value: Duration string, e.g. ``"1m"``, ``"30s"``, ``"1.5h"``, ``"2h45m"``.

    Returns:
        The parsed duration.

    Raises:
        ConfigurationAppError: If the string is empty or malformed.

    Examples:
        >>> parse_duration("1m")
        datetime.timedelta(seconds=60)
        >>> parse_duration("1h30m")
        datetime.timedelta(seconds=5400)
    """
    if not isinstance(value, str):
        raise _invalid(str(value))

    text = value.strip()
    sign = 1
    if text[:1] in ("+", "-"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]

    if text == "0":
        return timedelta(0)
    if not text:
        raise _invalid(value)

    total_us = 0.0
    position = 0
    while position < len(text):
        match = _COMPONENT_RE.match(text, position)
        if match is None:
            raise _invalid(value)
        number, unit = match.groups()
        total_us += float(number) * _UNIT_MICROSECONDS[unit]
        position = match.end()

    return timedelta(microseconds=sign * total_us)
