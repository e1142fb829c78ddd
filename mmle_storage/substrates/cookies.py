"""String-based cookie jar substrate.

Emulates the ``document.cookie`` surface: one string for reading all live
cookies and one-cookie-per-assignment writes carrying their own attributes.

    jar = InMemoryCookieJar()
    jar.cookie = "a=1; expires=Fri, 31 Dec 9999 23:59:59 GMT; path=/"
    jar.cookie = "b=2; path=/"
    jar.cookie            # "a=1; b=2"
    jar.cookie = "a=; expires=Thu, 01 Jan 1970 00:00:00 GMT; path=/"
    jar.cookie            # "b=2"

Nothing is parsed into a persistent structure on behalf of callers: every
read produces a fresh string, and `Storage` re-parses it on every access.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime, parsedate_to_datetime
from typing import Any

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(dt: datetime) -> datetime:
    """Convert to UTC. Naive datetimes are local time, as in `to_millis`."""
    return dt.astimezone(timezone.utc)


def format_cookie_date(dt: datetime) -> str:
    """Format a datetime the way ``Date.toGMTString()`` does.

    Naive datetimes are taken as local time.
    """
    return format_datetime(dt.astimezone(timezone.utc), usegmt=True)


def ceil_to_second(dt: datetime) -> datetime:
    """Round up to the next whole second, the resolution of a cookie date."""
    if dt.microsecond:
        return dt.replace(microsecond=0) + timedelta(seconds=1)
    return dt


def parse_cookie_string(cookie: str) -> dict[str, str]:
    """Split a jar string into a transient name -> raw value mapping.

    Pairs are separated by ``"; "`` and split on the first ``"="``, so
    values that contain ``=`` survive intact. Later duplicates win.
    """
    jar: dict[str, str] = {}
    if not cookie:
        return jar
    for pair in cookie.split("; "):
        name, _, value = pair.partition("=")
        jar[name] = value
    return jar


@dataclass
class _Cookie:
    name: str
    value: str
    path: str
    expires: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires is not None and self.expires <= now


class InMemoryCookieJar:
    """Thread-safe in-memory cookie jar with expiry and path handling.

    Characteristics:
    - Cookies are keyed by (name, path); the same name on two paths is two
      cookies, as in a browser
    - Expired cookies disappear at read time, evaluated with `clock`
    - Only cookies whose path is a prefix of `document_path` are visible
    - A write whose expiry is already past deletes the cookie instead

    Usage:
        jar = InMemoryCookieJar(document_path="/app")
        jar.cookie = "session=abc; path=/"
    """

    def __init__(self, document_path: str = "/", clock: Clock | None = None) -> None:
        self.document_path = document_path
        self._clock = clock or utc_now
        self._cookies: dict[tuple[str, str], _Cookie] = {}
        self._lock = threading.Lock()

    def _visible(self, cookie: _Cookie) -> bool:
        return self.document_path.startswith(cookie.path)

    @property
    def cookie(self) -> str:
        now = _as_utc(self._clock())
        with self._lock:
            expired = [k for k, c in self._cookies.items() if c.is_expired(now)]
            for k in expired:
                del self._cookies[k]
            return "; ".join(
                f"{c.name}={c.value}" for c in self._cookies.values() if self._visible(c)
            )

    @cookie.setter
    def cookie(self, value: str) -> None:
        parsed = self._parse_write(value)
        if parsed is None:
            return
        now = _as_utc(self._clock())
        with self._lock:
            key = (parsed.name, parsed.path)
            if parsed.is_expired(now):
                self._cookies.pop(key, None)
            else:
                self._cookies[key] = parsed

    def _parse_write(self, raw: str) -> _Cookie | None:
        pair, *attributes = raw.split(";")
        name, sep, value = pair.partition("=")
        name = name.strip()
        if not sep or not name:
            logger.debug(f"Ignoring cookie write without a name: {raw!r}")
            return None

        cookie = _Cookie(name=name, value=value.strip(), path=self.document_path)
        max_age: int | None = None
        for attribute in attributes:
            attr_name, _, attr_value = attribute.strip().partition("=")
            attr_name = attr_name.lower()
            if attr_name == "path" and attr_value.startswith("/"):
                cookie.path = attr_value
            elif attr_name == "expires":
                try:
                    expires = parsedate_to_datetime(attr_value)
                except (TypeError, ValueError):
                    logger.debug(f"Ignoring unparseable cookie expiry: {attr_value!r}")
                    continue
                # "-0000" dates parse naive but are still UTC
                if expires.tzinfo is None:
                    expires = expires.replace(tzinfo=timezone.utc)
                cookie.expires = _as_utc(expires)
            elif attr_name == "max-age":
                try:
                    max_age = int(attr_value)
                except ValueError:
                    logger.debug(f"Ignoring unparseable cookie max-age: {attr_value!r}")

        # Max-Age takes precedence over Expires
        if max_age is not None:
            now = _as_utc(self._clock())
            cookie.expires = now + timedelta(seconds=max_age) if max_age > 0 else now
        return cookie

    def clear(self) -> None:
        with self._lock:
            self._cookies.clear()

    def get_stats(self) -> dict[str, Any]:
        with self._lock:
            return {
                "backend_type": "cookie",
                "entry_count": len(self._cookies),
                "document_path": self.document_path,
            }
