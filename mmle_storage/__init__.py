"""
mmle-storage - one key-value API over a local store with cookie fallback.

Values are stored in a capacity-bound local store when it is usable and in
a string cookie jar when it is not, optionally compressed, optionally with
an expiry date.

Quick Start:

    import asyncio
    from datetime import datetime, timedelta

    from mmle_storage import Storage, ZlibCompressor

    async def main():
        storage = Storage(compressor=ZlibCompressor())
        await storage.set("profile", {"name": "pipi"})
        print(await storage.get("profile"))

        soon = datetime.now() + timedelta(minutes=5)
        await storage.set_with_expire("token", "abc", soon)
        print(await storage.get_with_expire("token"))

    asyncio.run(main())

Falling Back to Cookies:

    from mmle_storage.substrates import UnavailableLocalStore

    storage = Storage(local_store=UnavailableLocalStore())
    storage.backend_type        # BackendType.COOKIE

Error Handling:

    from mmle_storage import InvalidArgumentError, MmleStorageError

    try:
        await storage.get("")
    except InvalidArgumentError as e:
        print(f"Bad key: {e.details}")

Enable `logging.basicConfig(level=logging.DEBUG)` to see backend probing
and codec selection.
"""

from .codecs import IDENTITY_CODEC, Codec, Compressor, ZlibCompressor
from .config import BackendConfig, BackendType, StorageConfig
from .exceptions import (
    BackendUnavailableError,
    ConfigurationError,
    InvalidArgumentError,
    MalformedStoredValueError,
    MmleStorageError,
    QuotaExceededError,
)
from .expiry import ExpiringEntry
from .selector import probe_local_store, select_backend
from .store import Storage

__version__ = "0.1.0"

__all__ = [
    # Facade
    "Storage",
    # Configuration
    "BackendConfig",
    "BackendType",
    "StorageConfig",
    # Codecs
    "Codec",
    "Compressor",
    "IDENTITY_CODEC",
    "ZlibCompressor",
    # Selection
    "probe_local_store",
    "select_backend",
    # Expiry
    "ExpiringEntry",
    # Exceptions
    "MmleStorageError",
    "BackendUnavailableError",
    "ConfigurationError",
    "InvalidArgumentError",
    "MalformedStoredValueError",
    "QuotaExceededError",
]
