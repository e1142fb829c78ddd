"""Command-line interface for mmle-storage."""

from .main import main

__all__ = ["main"]
