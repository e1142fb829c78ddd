"""Tests for expiring entries and lazy purge-on-read."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from mmle_storage import BackendType, ExpiringEntry, InvalidArgumentError, Storage
from mmle_storage.substrates import InMemoryCookieJar, UnavailableLocalStore

PREFIX = "mmle-storage__"


class TestExpiringEntry:
    """Tests for the stored wrapper structure."""

    def test_wrap_uses_epoch_millis(self) -> None:
        expire_at = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)
        entry = ExpiringEntry.wrap({"name": "pipi"}, expire_at)
        assert entry.to_dict() == {"expireAt": 1705320000000, "value": {"name": "pipi"}}

    def test_from_stored_roundtrip(self) -> None:
        entry = ExpiringEntry.from_stored({"expireAt": 1705320000000, "value": [1, 2]})
        assert entry == ExpiringEntry(expire_at=1705320000000, value=[1, 2])

    @pytest.mark.parametrize(
        "stored",
        ["text", 42, None, [1, 2], {"value": 1}, {"expireAt": "soon"}, {"expireAt": True}],
    )
    def test_from_stored_rejects_other_values(self, stored) -> None:
        assert ExpiringEntry.from_stored(stored) is None

    def test_is_expired_is_strict(self) -> None:
        now = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)
        entry = ExpiringEntry.wrap("v", now)
        assert entry.is_expired(now) is False
        assert entry.is_expired(now + timedelta(milliseconds=1)) is True


class TestSetWithExpire:
    """Storing expiring values through the facade."""

    async def test_not_yet_expired(self, storage: Storage, clock) -> None:
        await storage.set_with_expire("abc99", {"name": "pipi"}, clock.now + timedelta(minutes=1))
        clock.advance(0.3)

        assert await storage.get_with_expire("abc99") == {"name": "pipi"}
        assert "abc99" in await storage.keys()

    async def test_expired_reads_as_absent_and_is_purged(self, storage: Storage, clock) -> None:
        await storage.set_with_expire("abc99", {"name": "pipi"}, clock.now + timedelta(seconds=0.1))
        clock.advance(0.3)

        assert await storage.get_with_expire("abc99") is None
        assert "abc99" not in await storage.keys()

    async def test_past_expiry_is_absent_immediately(self, storage: Storage, clock) -> None:
        await storage.set_with_expire("k", "v", clock.now - timedelta(seconds=1))
        assert await storage.get_with_expire("k") is None
        assert await storage.keys() == []

    async def test_stored_wrapper_is_visible_to_get(self, storage: Storage, clock) -> None:
        expire_at = clock.now + timedelta(hours=1)
        await storage.set_with_expire("k", [1, 2], expire_at)

        assert await storage.get("k") == {
            "expireAt": int(expire_at.timestamp() * 1000),
            "value": [1, 2],
        }

    async def test_rejects_non_datetime_expiry(self, storage: Storage) -> None:
        with pytest.raises(InvalidArgumentError):
            await storage.set_with_expire("k", "v", 1705320000000)

    async def test_rejects_empty_key(self, storage: Storage, clock) -> None:
        with pytest.raises(InvalidArgumentError):
            await storage.set_with_expire("", "v", clock.now + timedelta(hours=1))

    async def test_falsy_values_survive(self, storage: Storage, clock) -> None:
        for i, value in enumerate([0, False, "", [], {}]):
            await storage.set_with_expire(f"k{i}", value, clock.now + timedelta(hours=1))
            assert await storage.get_with_expire(f"k{i}") == value


class TestGetWithExpire:
    """Lazy expiry semantics."""

    async def test_missing_key_is_absent(self, storage: Storage) -> None:
        assert await storage.get_with_expire("missing") is None

    async def test_plain_value_reads_as_absent(self, storage: Storage) -> None:
        await storage.set("plain", {"name": "pipi"})
        assert await storage.get_with_expire("plain") is None
        assert await storage.get("plain") == {"name": "pipi"}

    async def test_local_store_keeps_expired_entry_until_read(
        self, local_storage: Storage, clock
    ) -> None:
        await local_storage.set_with_expire("k", "v", clock.now + timedelta(seconds=1))
        clock.advance(5)

        # No sweeper: the entry is still physically stored
        assert await local_storage.keys() == ["k"]
        assert await local_storage.get_with_expire("k") is None
        assert local_storage.local_store.get_item(PREFIX + "k") is None

    async def test_cookie_uses_native_expiry(self, cookie_storage: Storage, clock) -> None:
        assert cookie_storage.backend_type == BackendType.COOKIE
        await cookie_storage.set_with_expire("k", "v", clock.now + timedelta(seconds=1))
        clock.advance(5)

        # The jar drops the cookie on its own
        assert await cookie_storage.keys() == []
        assert await cookie_storage.get("k") is None

    async def test_sub_second_expiry_is_readable_before_it_passes(
        self, storage: Storage, clock
    ) -> None:
        await storage.set_with_expire("k", "v", clock.now + timedelta(milliseconds=500))
        assert await storage.get_with_expire("k") == "v"

        clock.advance(0.4)
        assert await storage.get_with_expire("k") == "v"

        clock.advance(0.6)
        assert await storage.get_with_expire("k") is None

    async def test_cookie_date_rounds_up_to_whole_second(
        self, cookie_storage: Storage, clock
    ) -> None:
        await cookie_storage.set_with_expire("k", "v", clock.now + timedelta(milliseconds=500))
        clock.advance(0.9)

        # Lazy expiry is the authority even though the cookie lives until :01
        assert await cookie_storage.keys() == ["k"]
        assert await cookie_storage.get_with_expire("k") is None
        assert await cookie_storage.keys() == []

    async def test_naive_clock_is_local_time_for_jar_and_expiry(self) -> None:
        start = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)
        now = {"t": start.astimezone().replace(tzinfo=None)}

        def naive_clock() -> datetime:
            return now["t"]

        storage = Storage(
            local_store=UnavailableLocalStore(),
            cookie_jar=InMemoryCookieJar(clock=naive_clock),
            clock=naive_clock,
        )
        await storage.set_with_expire("k", "v", start + timedelta(minutes=30))
        assert await storage.get_with_expire("k") == "v"

        now["t"] += timedelta(minutes=29)
        assert await storage.get_with_expire("k") == "v"

        now["t"] += timedelta(minutes=2)
        assert await storage.keys() == []
        assert await storage.get_with_expire("k") is None

    async def test_naive_expiry_datetime(self, local_storage: Storage) -> None:
        """Naive datetimes are local time, like the wall clock."""
        real = Storage(local_store=local_storage.local_store)
        await real.set_with_expire("k", "v", datetime.now() + timedelta(hours=1))
        assert await real.get_with_expire("k") == "v"
