"""Backend selection.

Probing is split from deciding: `probe_local_store` and `probe_compressor`
turn the environment into booleans, and `select_backend` is a pure
function of those results. `initialize` glues them together and never
raises; an unusable local store silently selects the cookie jar.
"""

from __future__ import annotations

import logging
import random
from typing import Any

from .codecs import IDENTITY_CODEC, Compressor, compression_codecs, probe_compressor
from .config import DEFAULT_PREFIX, BackendConfig, BackendType
from .substrates.base import LocalStore

logger = logging.getLogger(__name__)


def probe_local_store(store: LocalStore | None, prefix: str = DEFAULT_PREFIX) -> bool:
    """Check that `store` accepts a write and a delete.

    Uses a randomized disposable key so an existing entry is never touched.
    Any failure (missing capability, quota exceeded, access denied) counts
    as unavailable.
    """
    if store is None:
        return False
    key = f"{prefix}__{round(random.random() * 1e7)}"
    try:
        store.set_item(key, "")
        store.remove_item(key)
    except Exception as e:
        logger.debug(f"Local store probe failed: {e}")
        return False
    return True


def select_backend(local_store_ok: bool, compressor: Compressor | None = None) -> BackendConfig:
    """Decide backend and codecs from probe results."""
    backend_type = BackendType.LOCAL_STORAGE if local_store_ok else BackendType.COOKIE
    if compressor is not None:
        cookie_codec, local_codec = compression_codecs(compressor)
        return BackendConfig(backend_type, cookie_codec, local_codec, compressed=True)
    return BackendConfig(backend_type, IDENTITY_CODEC, IDENTITY_CODEC)


def initialize(
    local_store: LocalStore | None,
    compressor: Any = None,
    prefix: str = DEFAULT_PREFIX,
) -> BackendConfig:
    """Probe the environment and return a fresh backend selection."""
    local_ok = probe_local_store(local_store, prefix)
    usable_compressor = compressor if probe_compressor(compressor) else None
    if compressor is not None and usable_compressor is None:
        logger.debug(f"Ignoring compressor {type(compressor).__name__}: incomplete interface")

    config = select_backend(local_ok, usable_compressor)
    logger.debug(
        f"Selected backend={config.backend_type.value} "
        f"codec={config.codec.name} compressed={config.compressed}"
    )
    return config
