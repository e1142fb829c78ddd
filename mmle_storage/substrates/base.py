"""Protocols for the storage substrates the facade can sit on.

Substrates are deliberately dumb: they store strings under string keys and
know nothing about prefixes, codecs, JSON or expiry wrappers. Those
concerns belong to `Storage`.

Two shapes exist:
- LocalStore: a capacity-bound key-value store (get/set/remove/clear/keys).
- CookieJar: a single concatenated string surface, read as
  ``"a=1; b=2"`` and written one ``"name=value; expires=...; path=/"``
  entry at a time.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class LocalStore(Protocol):
    """Protocol for key-value substrates.

    Design Principles:
    - String keys and string values only
    - Writes may raise QuotaExceededError when the substrate is full
    - Any access may raise when the substrate is unavailable; the backend
      selector probes for this before the substrate is used
    - Thread-safety is the implementation's responsibility

    Example implementation:
        class MyStore:
            def get_item(self, key: str) -> str | None:
                return self._data.get(key)

            def set_item(self, key: str, value: str) -> None:
                self._data[key] = value

            # ... other methods
    """

    def get_item(self, key: str) -> str | None:
        """Return the value stored under `key`, or None if absent."""
        ...

    def set_item(self, key: str, value: str) -> None:
        """Store `value` under `key`, overwriting any existing value."""
        ...

    def remove_item(self, key: str) -> None:
        """Delete `key`. Removing an absent key is not an error."""
        ...

    def clear(self) -> None:
        """Remove every entry, including ones not written by this package."""
        ...

    def keys(self) -> list[str]:
        """Return every key currently stored, in substrate order."""
        ...

    def get_stats(self) -> dict[str, Any]:
        """Return substrate statistics.

        Should include at minimum:
        - "entry_count": number of entries
        - "backend_type": name of the substrate implementation
        """
        ...


@runtime_checkable
class CookieJar(Protocol):
    """Protocol for string-based cookie jars.

    Reading `cookie` yields every live cookie as ``"name=value"`` pairs
    joined by ``"; "``. Assigning to it stores a single cookie; attributes
    after the first ``;`` (expires, max-age, path) are interpreted by the
    jar, and an expiry in the past deletes the cookie.
    """

    @property
    def cookie(self) -> str: ...

    @cookie.setter
    def cookie(self, value: str) -> None: ...

    def get_stats(self) -> dict[str, Any]: ...
