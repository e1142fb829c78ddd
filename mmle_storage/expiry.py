"""Expiring entry wrapper.

An expiring entry is stored as a plain JSON object:

    {"expireAt": 1735689599000, "value": <anything>}

where `expireAt` is epoch milliseconds. Expiry is lazy: nothing sweeps
the store, an entry is only purged when a read finds it past its time.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

EXPIRE_AT_FIELD = "expireAt"
VALUE_FIELD = "value"


def to_millis(dt: datetime) -> int:
    """Epoch milliseconds for a datetime (naive means local time)."""
    return int(dt.timestamp() * 1000)


@dataclass
class ExpiringEntry:
    """A value paired with its expiration timestamp."""

    expire_at: int
    value: Any

    @classmethod
    def wrap(cls, value: Any, expire_at: datetime) -> ExpiringEntry:
        return cls(expire_at=to_millis(expire_at), value=value)

    @classmethod
    def from_stored(cls, stored: Any) -> ExpiringEntry | None:
        """Rebuild an entry from a stored value, or None if it is not one."""
        if not isinstance(stored, dict):
            return None
        expire_at = stored.get(EXPIRE_AT_FIELD)
        if isinstance(expire_at, bool) or not isinstance(expire_at, (int, float)):
            return None
        return cls(expire_at=int(expire_at), value=stored.get(VALUE_FIELD))

    def to_dict(self) -> dict[str, Any]:
        return {EXPIRE_AT_FIELD: self.expire_at, VALUE_FIELD: self.value}

    def is_expired(self, now: datetime) -> bool:
        return to_millis(now) > self.expire_at
