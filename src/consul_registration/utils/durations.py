"""Conversion between seconds and Consul duration strings."""

from __future__ import annotations

import re

__all__ = ["format_duration", "parse_duration"]

_DURATION_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h)?\s*$")

_UNIT_SECONDS: dict[str, float] = {
    "ms": 0.001,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(value: str | int | float) -> float:
    """Parse ``value`` into seconds.

    Numbers are taken as seconds. Strings accept an optional unit suffix of
    ``ms``, ``s``, ``m`` or ``h`` (``"10s"``, ``"500ms"``, ``"1m"``).
    """
    if isinstance(value, bool):
        raise TypeError("duration must be a number or a string")
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str):
        raise TypeError("duration must be a number or a string")
    match = _DURATION_PATTERN.match(value)
    if match is None:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return float(amount) * _UNIT_SECONDS[unit or "s"]


def format_duration(seconds: float) -> str:
    """Render ``seconds`` the way the Consul agent expects it (``"10s"``)."""
    if seconds < 0:
        raise ValueError("duration must not be negative")
    if float(seconds).is_integer():
        return f"{int(seconds)}s"
    return f"{round(seconds * 1000)}ms"
