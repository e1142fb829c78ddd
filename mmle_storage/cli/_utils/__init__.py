"""CLI utilities for formatting and parsing."""

from .formatting import (
    console,
    print_error,
    print_stats,
    print_success,
    print_table,
    print_warning,
    truncate,
)
from .parsers import parse_duration, parse_value

__all__ = [
    "console",
    "print_table",
    "print_stats",
    "print_error",
    "print_success",
    "print_warning",
    "truncate",
    "parse_duration",
    "parse_value",
]
