"""In-process local store substrates.

InMemoryLocalStore is the default local store: fast, capacity-bound and
volatile. UnavailableLocalStore stands in for a substrate that exists but
refuses every access, which is what forces the cookie fallback.
"""

from __future__ import annotations

import threading
from typing import Any

from ..config import DEFAULT_LOCAL_QUOTA
from ..exceptions import BackendUnavailableError, QuotaExceededError


def entry_size(key: str, value: str) -> int:
    """Capacity charged for one entry, in characters."""
    return len(key) + len(value)


class InMemoryLocalStore:
    """Thread-safe, capacity-bound in-memory key-value substrate.

    Characteristics:
    - Fast: O(1) get/set/remove
    - Volatile: data lost on process exit
    - Thread-safe: all operations are protected by a lock
    - Capacity-bound: total characters of keys plus values may not exceed
      `quota`; an oversized write raises QuotaExceededError and changes nothing

    Usage:
        store = InMemoryLocalStore(quota=1024)
        store.set_item("greeting", "hello")
        store.get_item("greeting")
    """

    def __init__(self, quota: int = DEFAULT_LOCAL_QUOTA) -> None:
        self.quota = quota
        self._store: dict[str, str] = {}
        self._used = 0
        self._lock = threading.Lock()

    def get_item(self, key: str) -> str | None:
        with self._lock:
            return self._store.get(key)

    def set_item(self, key: str, value: str) -> None:
        """Store a value, enforcing the quota.

        Raises:
            QuotaExceededError: If the write would push usage past the quota.
        """
        with self._lock:
            previous = self._store.get(key)
            freed = entry_size(key, previous) if previous is not None else 0
            required = self._used - freed + entry_size(key, value)
            if required > self.quota:
                raise QuotaExceededError(
                    "Local store quota exceeded",
                    details={"quota": self.quota, "required": required},
                )
            self._store[key] = value
            self._used = required

    def remove_item(self, key: str) -> None:
        with self._lock:
            previous = self._store.pop(key, None)
            if previous is not None:
                self._used -= entry_size(key, previous)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
            self._used = 0

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._store.keys())

    def get_stats(self) -> dict[str, Any]:
        with self._lock:
            return {
                "backend_type": "memory",
                "entry_count": len(self._store),
                "chars_used": self._used,
                "quota": self.quota,
            }


class UnavailableLocalStore:
    """A local store that rejects every operation.

    Models a disabled or access-denied substrate (private browsing, a
    read-only mount). Handing it to `Storage` selects the cookie jar.
    """

    def __init__(self, reason: str = "Local store is not available") -> None:
        self.reason = reason

    def _refuse(self) -> BackendUnavailableError:
        return BackendUnavailableError(self.reason)

    def get_item(self, key: str) -> str | None:
        raise self._refuse()

    def set_item(self, key: str, value: str) -> None:
        raise self._refuse()

    def remove_item(self, key: str) -> None:
        raise self._refuse()

    def clear(self) -> None:
        raise self._refuse()

    def keys(self) -> list[str]:
        raise self._refuse()

    def get_stats(self) -> dict[str, Any]:
        return {"backend_type": "unavailable", "entry_count": 0}
