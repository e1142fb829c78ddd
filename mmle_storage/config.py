"""Configuration models for mmle-storage."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING

from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from .codecs import Codec


class BackendType(str, Enum):
    """Storage substrates the facade can sit on."""

    LOCAL_STORAGE = "localStorage"
    COOKIE = "cookie"


# Namespace prefix isolating our entries from anything else in the substrate
DEFAULT_PREFIX = "mmle-storage__"
DEFAULT_COOKIE_PATH = "/"

# Cookie expiry used for entries that should never expire
COOKIE_UNDEAD = datetime(9999, 12, 31, 23, 59, 59, tzinfo=timezone.utc)
# Cookie expiry that makes the jar drop an entry
COOKIE_DEAD = datetime(1970, 1, 1, 0, 0, 0, tzinfo=timezone.utc)

# Same order of magnitude as browser localStorage (5M characters)
DEFAULT_LOCAL_QUOTA = 5 * 1024 * 1024

PREFIX_ENV_VAR = "MMLE_STORAGE_PREFIX"
COOKIE_PATH_ENV_VAR = "MMLE_STORAGE_COOKIE_PATH"
LOCAL_QUOTA_ENV_VAR = "MMLE_STORAGE_LOCAL_QUOTA"


@dataclass
class StorageConfig:
    """Settings shared by the facade and its substrates.

    GOTCHAS:
    - Changing `prefix` on an existing store hides every entry written under
      the old prefix; nothing is migrated.
    - `local_quota` only applies to substrates created by the facade itself.
      Substrates passed in keep their own quota.
    """

    prefix: str = DEFAULT_PREFIX
    cookie_path: str = DEFAULT_COOKIE_PATH
    cookie_far_future: datetime = field(default_factory=lambda: COOKIE_UNDEAD)
    cookie_dead: datetime = field(default_factory=lambda: COOKIE_DEAD)
    local_quota: int = DEFAULT_LOCAL_QUOTA

    def __post_init__(self) -> None:
        if not self.prefix:
            raise ConfigurationError("Namespace prefix must not be empty")
        if self.local_quota < 0:
            raise ConfigurationError(
                "Local store quota must be non-negative",
                details={"local_quota": self.local_quota},
            )

    @classmethod
    def from_env(cls) -> StorageConfig:
        """Build a config, overriding defaults from MMLE_STORAGE_* variables.

        Raises:
            ConfigurationError: If a variable holds an unusable value.
        """
        prefix = os.environ.get(PREFIX_ENV_VAR, "").strip() or DEFAULT_PREFIX
        cookie_path = os.environ.get(COOKIE_PATH_ENV_VAR, "").strip() or DEFAULT_COOKIE_PATH

        quota_raw = os.environ.get(LOCAL_QUOTA_ENV_VAR, "").strip()
        local_quota = DEFAULT_LOCAL_QUOTA
        if quota_raw:
            try:
                local_quota = int(quota_raw)
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid {LOCAL_QUOTA_ENV_VAR}",
                    details={"value": quota_raw},
                ) from e

        return cls(prefix=prefix, cookie_path=cookie_path, local_quota=local_quota)


@dataclass(frozen=True)
class BackendConfig:
    """Result of backend selection: which substrate and which codecs.

    Returned by `Storage.initialize()` and replaced wholesale on re-probe.
    """

    backend_type: BackendType
    cookie_codec: Codec
    local_codec: Codec
    compressed: bool = False

    @property
    def codec(self) -> Codec:
        """Codec bound to the active backend."""
        if self.backend_type == BackendType.COOKIE:
            return self.cookie_codec
        return self.local_codec
