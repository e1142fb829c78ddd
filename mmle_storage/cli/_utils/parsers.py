"""Parsing utilities for CLI input."""

import json
import re
from datetime import timedelta
from typing import Any

import click


def parse_duration(duration_str: str) -> timedelta:
    """Parse a duration string into a timedelta.

    Supported formats:
        - "30s" - 30 seconds
        - "3h" - 3 hours
        - "7d" - 7 days
        - "2w" - 2 weeks
        - "1m" - 1 month (30 days)

    Raises:
        click.BadParameter: If the format is invalid.
    """
    pattern = r"^(\d+)([sdwmh])$"
    match = re.match(pattern, duration_str.strip().lower())

    if not match:
        raise click.BadParameter(
            f"Invalid duration format: '{duration_str}'. "
            "Use format like '30s', '3h', '7d', '2w' or '1m' (30 days)."
        )

    value = int(match.group(1))
    unit = match.group(2)

    if value <= 0:
        raise click.BadParameter("Duration value must be positive.")

    unit_to_timedelta = {
        "s": timedelta(seconds=value),
        "h": timedelta(hours=value),
        "d": timedelta(days=value),
        "w": timedelta(weeks=value),
        "m": timedelta(days=value * 30),  # Approximate month as 30 days
    }

    return unit_to_timedelta[unit]


def parse_value(raw: str) -> Any:
    """Interpret a command-line value as JSON, falling back to plain text."""
    try:
        return json.loads(raw)
    except ValueError:
        return raw
