"""Custom exceptions for mmle-storage.

All exceptions inherit from MmleStorageError, so callers can catch every
storage-related failure in one place:

    from mmle_storage import Storage, MmleStorageError, InvalidArgumentError

    try:
        await storage.set("", {"name": "pipi"})
    except InvalidArgumentError as e:
        print(f"Bad call: {e}")
    except MmleStorageError as e:
        print(f"Storage error: {e}")
"""

from __future__ import annotations

from typing import Any


class MmleStorageError(Exception):
    """Base exception for all mmle-storage errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class InvalidArgumentError(MmleStorageError, ValueError):
    """Raised when a caller breaks the operation contract.

    This includes:
    - Empty or missing keys on set/get/remove
    - Values that cannot be serialized to JSON

    Example:
        InvalidArgumentError("Invalid arguments.", details={"key": ""})
    """

    pass


class BackendUnavailableError(MmleStorageError):
    """Raised by a substrate that cannot be used at all.

    The backend selector absorbs this during probing and falls back to the
    cookie jar; it never reaches callers of the facade.
    """

    pass


class QuotaExceededError(MmleStorageError):
    """Raised by a capacity-bound substrate when a write would not fit.

    Example:
        QuotaExceededError(
            "Local store quota exceeded",
            details={"quota": 5242880, "required": 5242900}
        )
    """

    pass


class MalformedStoredValueError(MmleStorageError):
    """Describes a stored value that could not be decoded or parsed.

    Reads absorb this condition and return the raw decoded text instead.
    """

    pass


class ConfigurationError(MmleStorageError):
    """Raised when storage configuration is invalid.

    Example:
        ConfigurationError(
            "Invalid MMLE_STORAGE_LOCAL_QUOTA",
            details={"value": "lots"}
        )
    """

    pass
