"""Value encoding pipeline.

Every value goes through the same steps on its way to a substrate:

    value -> JSON text -> codec.encode -> substrate
    substrate -> codec.decode -> JSON parse (or raw text) -> value

The codec defaults to an identity pass-through. When a compressor is
available, two variants are bound: a URL-safe one for cookies and a
text-safe one for the local store.
"""

from __future__ import annotations

import base64
import json
import logging
import zlib
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from .exceptions import MalformedStoredValueError

logger = logging.getLogger(__name__)


def through(content: str) -> str:
    """Return the content unchanged."""
    return content


@dataclass(frozen=True)
class Codec:
    """A paired encode/decode transform applied to serialized values."""

    encoder: Callable[[str], str]
    decoder: Callable[[str], str]
    name: str = "identity"

    def encode(self, text: str) -> str:
        return self.encoder(text)

    def decode(self, text: str) -> str:
        """Decode stored text, falling back to the input on garbage.

        Values not produced by `encode` (foreign writes, a codec switch
        between sessions) must not fail the read, so any decoder error or
        empty result hands back the raw text for `try_parse` to deal with.
        """
        try:
            decoded = self.decoder(text)
        except Exception as e:
            logger.debug(
                MalformedStoredValueError(
                    "Stored value could not be decoded",
                    details={"codec": self.name, "error": e},
                )
            )
            return text
        if decoded is None or (decoded == "" and text != ""):
            logger.debug(f"Codec '{self.name}' produced no output, keeping raw value")
            return text
        return decoded


IDENTITY_CODEC = Codec(encoder=through, decoder=through, name="identity")


@runtime_checkable
class Compressor(Protocol):
    """Injectable compression capability.

    Mirrors the lz-string surface: one pair for URL-safe output (cookie
    transport) and one for free-form text output (local store transport).
    Decompressors may return None or raise on input they did not produce.
    """

    def compress_to_encoded_uri_component(self, text: str) -> str: ...

    def decompress_from_encoded_uri_component(self, text: str) -> str | None: ...

    def compress_to_utf16(self, text: str) -> str: ...

    def decompress_from_utf16(self, text: str) -> str | None: ...


class ZlibCompressor:
    """Compressor built on zlib.

    - URL-safe variant: zlib + unpadded URL-safe base64. The output never
      contains ``;``, ``=``, spaces or commas, so it survives a cookie jar.
    - Text variant: zlib + base85, denser, for substrates that accept any text.

    Usage:
        storage = Storage(compressor=ZlibCompressor())
    """

    def __init__(self, level: int = 6) -> None:
        self.level = level

    def compress_to_encoded_uri_component(self, text: str) -> str:
        compressed = zlib.compress(text.encode("utf-8"), self.level)
        return base64.urlsafe_b64encode(compressed).decode("ascii").rstrip("=")

    def decompress_from_encoded_uri_component(self, text: str) -> str:
        padded = text + "=" * (-len(text) % 4)
        return zlib.decompress(base64.urlsafe_b64decode(padded)).decode("utf-8")

    def compress_to_utf16(self, text: str) -> str:
        compressed = zlib.compress(text.encode("utf-8"), self.level)
        return base64.b85encode(compressed).decode("ascii")

    def decompress_from_utf16(self, text: str) -> str:
        return zlib.decompress(base64.b85decode(text)).decode("utf-8")


_COMPRESSOR_METHODS = (
    "compress_to_encoded_uri_component",
    "decompress_from_encoded_uri_component",
    "compress_to_utf16",
    "decompress_from_utf16",
)


def probe_compressor(candidate: Any) -> bool:
    """Check whether `candidate` offers all four compression functions."""
    if candidate is None:
        return False
    return all(callable(getattr(candidate, name, None)) for name in _COMPRESSOR_METHODS)


def compression_codecs(compressor: Compressor) -> tuple[Codec, Codec]:
    """Build the (cookie, local store) codec pair for a compressor."""
    cookie_codec = Codec(
        encoder=compressor.compress_to_encoded_uri_component,
        decoder=compressor.decompress_from_encoded_uri_component,
        name="compress-uri",
    )
    local_codec = Codec(
        encoder=compressor.compress_to_utf16,
        decoder=compressor.decompress_from_utf16,
        name="compress-utf16",
    )
    return cookie_codec, local_codec


def dumps(value: Any) -> str:
    """Serialize a value to compact JSON text.

    Raises:
        TypeError, ValueError: If the value is not JSON-serializable.
    """
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)


def try_parse(text: str) -> Any:
    """Parse JSON text, returning the text itself when it is not JSON."""
    try:
        return json.loads(text)
    except ValueError as e:
        logger.debug(
            MalformedStoredValueError("Stored value is not JSON", details={"error": e})
        )
        return text
