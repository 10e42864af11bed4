"""
Prometheus duration strings.

Parses and formats durations in the Prometheus syntax, e.g. ``5m``, ``1h30m``,
``2d`` or ``250ms``. Units must appear at most once and in descending order.
"""

from __future__ import annotations

import re
from datetime import timedelta

DEFAULT_ALERT_FOR = timedelta(minutes=5)

_UNITS: list[tuple[str, int]] = [
    ("y", 365 * 24 * 60 * 60 * 1000),
    ("w", 7 * 24 * 60 * 60 * 1000),
    ("d", 24 * 60 * 60 * 1000),
    ("h", 60 * 60 * 1000),
    ("m", 60 * 1000),
    ("s", 1000),
    ("ms", 1),
]

_DURATION_RE = re.compile(
    r"^(?:(\d+)y)?(?:(\d+)w)?(?:(\d+)d)?(?:(\d+)h)?(?:(\d+)m)?(?:(\d+)s)?(?:(\d+)ms)?$"
)


class InvalidDurationError(ValueError):
    """Raised when a string is not a valid Prometheus duration."""


def parse_duration(value: str) -> timedelta:
    """
    Parse a Prometheus duration string.

    Args:
        value: Duration such as ``5m`` or ``1h30m``

    Returns:
        The duration as a timedelta

    Raises:
        InvalidDurationError: If the string is empty, malformed or out of range
    """
    if value == "0":
        return timedelta(0)

    match = _DURATION_RE.match(value) if value else None
    if not match or not any(match.groups()):
        raise InvalidDurationError(f"not a valid duration string: {value!r}")

    millis = 0
    for (_, factor), amount in zip(_UNITS, match.groups()):
        if amount:
            millis += int(amount) * factor
    try:
        return timedelta(milliseconds=millis)
    except OverflowError as e:
        raise InvalidDurationError(f"duration out of range: {value!r}") from e


def format_duration(value: timedelta) -> str:
    """Format a timedelta as the shortest Prometheus duration string."""
    millis = int(value.total_seconds() * 1000)
    if millis <= 0:
        return "0s"

    parts = []
    for unit, factor in _UNITS:
        amount, millis = divmod(millis, factor)
        if amount:
            parts.append(f"{amount}{unit}")
    return "".join(parts)


def alert_for_duration(value: str | None) -> timedelta:
    """
    Resolve the ``for`` duration of an alerting rule.

    Missing or malformed durations fall back to five minutes so that a typo
    in one rule does not block delivery of the whole group.
    """
    if not value:
        return DEFAULT_ALERT_FOR
    try:
        return parse_duration(value)
    except InvalidDurationError:
        return DEFAULT_ALERT_FOR
