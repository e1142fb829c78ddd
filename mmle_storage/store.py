"""Key-value storage facade.

`Storage` presents one asynchronous key-value API over whichever substrate
the backend selector picked: the local store when it accepts writes, the
cookie jar otherwise. Values are JSON-serialized, passed through the bound
codec and written under a namespaced key.

Usage:
    storage = Storage(compressor=ZlibCompressor())

    await storage.set("user", {"name": "pipi"})
    await storage.get("user")            # {"name": "pipi"}
    await storage.keys()                 # ["user"]

    await storage.set_with_expire("token", "abc", datetime.now() + timedelta(minutes=5))
    await storage.get_with_expire("token")   # "abc", or None once expired

    await storage.remove_all()

The substrate calls underneath are synchronous; the coroutine surface keeps
both backends interchangeable and lets errors surface at await time.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any

from .codecs import Compressor, dumps, try_parse
from .config import BackendConfig, BackendType, StorageConfig
from .exceptions import InvalidArgumentError
from .expiry import ExpiringEntry
from .selector import initialize as select_and_bind
from .substrates.base import CookieJar, LocalStore
from .substrates.cookies import (
    Clock,
    InMemoryCookieJar,
    ceil_to_second,
    format_cookie_date,
    parse_cookie_string,
    utc_now,
)
from .substrates.memory import InMemoryLocalStore

logger = logging.getLogger(__name__)


def _check_key(key: Any) -> str:
    if not key or not isinstance(key, str):
        raise InvalidArgumentError("Invalid arguments.", details={"key": repr(key)})
    return key


# Characters that split a cookie pair or a cookie string
COOKIE_RESERVED = (";", "=")


class Storage:
    """Unified key-value facade over a local store with cookie fallback.

    Args:
        local_store: Preferred substrate. Defaults to an InMemoryLocalStore
            sized by `config.local_quota`. Pass an UnavailableLocalStore (or
            any store that fails the probe) to run on cookies.
        cookie_jar: Fallback substrate. Defaults to an InMemoryCookieJar.
        compressor: Optional compression capability. When it offers the
            full Compressor interface, values are compressed on the way in.
        config: Prefix, cookie attributes and quota. Defaults to StorageConfig().
        clock: Source of "now" for expiry checks. Defaults to UTC wall time.
    """

    def __init__(
        self,
        local_store: LocalStore | None = None,
        cookie_jar: CookieJar | None = None,
        compressor: Compressor | None = None,
        config: StorageConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.config = config or StorageConfig()
        self._clock = clock or utc_now
        if local_store is None:
            local_store = InMemoryLocalStore(quota=self.config.local_quota)
        if cookie_jar is None:
            cookie_jar = InMemoryCookieJar(document_path=self.config.cookie_path, clock=self._clock)
        self.local_store = local_store
        self.cookie_jar = cookie_jar
        self.compressor = compressor
        self._backend = self.initialize()

    def initialize(self) -> BackendConfig:
        """(Re-)probe the substrates and bind backend and codecs.

        Safe to call again after the environment changes; each call fully
        replaces the previous selection. Never raises.
        """
        self._backend = select_and_bind(self.local_store, self.compressor, self.config.prefix)
        return self._backend

    @property
    def backend(self) -> BackendConfig:
        return self._backend

    @property
    def backend_type(self) -> BackendType:
        return self._backend.backend_type

    # --- Substrate access ---

    def _substrate_key(self, key: str) -> str:
        return self.config.prefix + key

    def _strip_prefix(self, names: list[str]) -> list[str]:
        prefix = self.config.prefix
        return [
            name[len(prefix) :] for name in names if name.startswith(prefix) and name != prefix
        ]

    def _check_cookie_key(self, backend: BackendConfig, key: str) -> None:
        if backend.backend_type != BackendType.COOKIE:
            return
        if any(c in key for c in COOKIE_RESERVED) or key != key.strip():
            raise InvalidArgumentError(
                "Key cannot be stored as a cookie name", details={"key": repr(key)}
            )

    def _cookie_mapping(self) -> dict[str, str]:
        return parse_cookie_string(self.cookie_jar.cookie)

    def _write_cookie(self, substrate_key: str, encoded: str, expires: datetime) -> None:
        self.cookie_jar.cookie = (
            f"{substrate_key}={encoded}"
            f"; expires={format_cookie_date(expires)}"
            f"; path={self.config.cookie_path}"
        )

    def _read_raw(self, backend: BackendConfig, substrate_key: str) -> str | None:
        if backend.backend_type == BackendType.COOKIE:
            return self._cookie_mapping().get(substrate_key)
        return self.local_store.get_item(substrate_key)

    def _base_set(self, key: Any, value: Any, expires: datetime | None = None) -> None:
        key = _check_key(key)
        try:
            serialized = dumps(value)
        except (TypeError, ValueError) as e:
            raise InvalidArgumentError(
                "Value is not JSON-serializable",
                details={"key": key, "type": type(value).__name__},
            ) from e

        backend = self._backend
        self._check_cookie_key(backend, key)
        encoded = backend.codec.encode(serialized)
        substrate_key = self._substrate_key(key)

        if backend.backend_type == BackendType.COOKIE:
            if ";" in encoded:
                raise InvalidArgumentError(
                    "Value cannot be stored in a cookie without compression",
                    details={"key": key, "codec": backend.codec.name},
                )
            self._write_cookie(substrate_key, encoded, expires or self.config.cookie_far_future)
        else:
            self.local_store.set_item(substrate_key, encoded)

    # --- Public operations ---

    async def keys(self) -> list[str]:
        """List every stored key, without the namespace prefix. Unordered."""
        if self._backend.backend_type == BackendType.COOKIE:
            return self._strip_prefix(list(self._cookie_mapping()))
        return self._strip_prefix(self.local_store.keys())

    async def set(self, key: str, value: Any) -> None:
        """Store a JSON-serializable value under `key`. Last write wins.

        Raises:
            InvalidArgumentError: Empty key or non-serializable value. On the cookie
                jar, also a key holding `;`, `=` or edge whitespace, or an
                uncompressed value whose JSON contains `;`.
            QuotaExceededError: The local store has no room for the entry.
        """
        self._base_set(key, value)

    async def get(self, key: str) -> Any:
        """Return the value stored under `key`, or None if absent.

        Stored content that does not decode or parse as JSON is returned as
        the raw decoded string instead of failing the read.

        Raises:
            InvalidArgumentError: Empty key, or a key the cookie jar cannot hold.
        """
        key = _check_key(key)
        backend = self._backend
        self._check_cookie_key(backend, key)
        raw = self._read_raw(backend, self._substrate_key(key))
        if not raw:
            return None
        return try_parse(backend.codec.decode(raw))

    async def remove(self, key: str) -> None:
        """Delete `key`. Removing an absent key succeeds.

        On the cookie jar a deleting write is only issued when the cookie
        exists, so absent keys never create spurious entries.

        Raises:
            InvalidArgumentError: Empty key, or a key the cookie jar cannot hold.
        """
        key = _check_key(key)
        backend = self._backend
        self._check_cookie_key(backend, key)
        substrate_key = self._substrate_key(key)
        if backend.backend_type == BackendType.COOKIE:
            if substrate_key in self._cookie_mapping():
                self._write_cookie(substrate_key, "", self.config.cookie_dead)
        else:
            self.local_store.remove_item(substrate_key)

    async def remove_all(self) -> None:
        """Remove every stored key.

        One `remove` per key, run concurrently; completes when all of them
        have settled. A failing removal is logged and does not stop the rest.
        """
        # TODO: use a single clear() when the substrate holds only our prefix
        stored_keys = await self.keys()
        results = await asyncio.gather(
            *(self.remove(key) for key in stored_keys), return_exceptions=True
        )
        for key, result in zip(stored_keys, results):
            if isinstance(result, Exception):
                logger.warning(f"Failed to remove key '{key}': {result}")

    async def set_with_expire(self, key: str, value: Any, expire_at: datetime) -> None:
        """Store a value that is discarded once `expire_at` has passed.

        The cookie jar also receives `expire_at`, rounded up to the whole
        second a cookie date can carry, as the cookie's own expiry; the
        local store relies on lazy deletion in `get_with_expire`.

        Raises:
            InvalidArgumentError: Empty key, non-serializable value or a
                non-datetime `expire_at`.
        """
        if not isinstance(expire_at, datetime):
            raise InvalidArgumentError(
                "expire_at must be a datetime", details={"type": type(expire_at).__name__}
            )
        entry = ExpiringEntry.wrap(value, expire_at)
        self._base_set(key, entry.to_dict(), ceil_to_second(expire_at))

    async def get_with_expire(self, key: str) -> Any:
        """Return a value stored by `set_with_expire`, or None.

        An entry found past its expiry is removed before None is returned.
        A value stored without an expiry wrapper also reads as None.
        """
        stored = await self.get(key)
        if stored is None:
            return None

        entry = ExpiringEntry.from_stored(stored)
        if entry is None:
            logger.debug(f"Key '{key}' holds no expiring entry")
            return None

        if entry.is_expired(self._clock()):
            logger.debug(f"Key '{key}' expired, purging")
            await self.remove(key)
            return None
        return entry.value

    def get_stats(self) -> dict[str, Any]:
        """Report the active backend, codec and substrate statistics."""
        backend = self._backend
        substrate = (
            self.cookie_jar if backend.backend_type == BackendType.COOKIE else self.local_store
        )
        return {
            "backend": backend.backend_type.value,
            "codec": backend.codec.name,
            "compressed": backend.compressed,
            "prefix": self.config.prefix,
            "substrate": substrate.get_stats(),
        }
