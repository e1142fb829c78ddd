"""Storage substrates for the mmle-storage facade.

Usage:
    from mmle_storage import Storage
    from mmle_storage.substrates import InMemoryCookieJar, SQLiteLocalStore

    # Persistent local store
    storage = Storage(local_store=SQLiteLocalStore("storage.db"))

    # Force the cookie jar
    storage = Storage(local_store=UnavailableLocalStore(), cookie_jar=InMemoryCookieJar())
"""

from .base import CookieJar, LocalStore
from .cookies import (
    InMemoryCookieJar,
    ceil_to_second,
    format_cookie_date,
    parse_cookie_string,
)
from .memory import InMemoryLocalStore, UnavailableLocalStore
from .sqlite import SQLiteLocalStore

__all__ = [
    "CookieJar",
    "LocalStore",
    "InMemoryCookieJar",
    "InMemoryLocalStore",
    "SQLiteLocalStore",
    "UnavailableLocalStore",
    "ceil_to_second",
    "format_cookie_date",
    "parse_cookie_string",
]
