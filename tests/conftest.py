"""Shared pytest fixtures for mmle-storage tests."""

from datetime import datetime, timedelta, timezone

import pytest

from mmle_storage import Storage, ZlibCompressor
from mmle_storage.substrates import (
    InMemoryCookieJar,
    InMemoryLocalStore,
    UnavailableLocalStore,
)


class FakeClock:
    """Controllable wall clock shared by the facade and the cookie jar."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sample_value():
    """Nested value exercising every JSON shape."""
    return {
        "name": "pipi",
        "age": 3,
        "ratio": 0.5,
        "tags": ["a", "b", "c"],
        "active": True,
        "nothing": None,
        "nested": {"list": [1, {"deep": "yes"}], "empty": {}},
    }


def make_storage(backend: str, compressed: bool, clock: FakeClock) -> Storage:
    """Build a Storage pinned to one backend and codec configuration."""
    local_store = InMemoryLocalStore() if backend == "local" else UnavailableLocalStore()
    return Storage(
        local_store=local_store,
        cookie_jar=InMemoryCookieJar(clock=clock),
        compressor=ZlibCompressor() if compressed else None,
        clock=clock,
    )


@pytest.fixture(
    params=[
        ("local", False),
        ("local", True),
        ("cookie", False),
        ("cookie", True),
    ],
    ids=["local-identity", "local-zlib", "cookie-identity", "cookie-zlib"],
)
def storage(request, clock: FakeClock) -> Storage:
    """Storage under every backend/codec combination."""
    backend, compressed = request.param
    return make_storage(backend, compressed, clock)


@pytest.fixture
def local_storage(clock: FakeClock) -> Storage:
    return make_storage("local", False, clock)


@pytest.fixture
def cookie_storage(clock: FakeClock) -> Storage:
    return make_storage("cookie", False, clock)
