"""Tests for in-process local store substrates.

These tests define the contract every LocalStore must fulfill.
"""

from __future__ import annotations

import threading

import pytest

from mmle_storage.exceptions import BackendUnavailableError, QuotaExceededError
from mmle_storage.substrates import InMemoryLocalStore, LocalStore, UnavailableLocalStore


class TestLocalStoreProtocol:
    """Test that the in-memory stores implement the protocol."""

    def test_inmemory_store_implements_protocol(self) -> None:
        assert isinstance(InMemoryLocalStore(), LocalStore)

    def test_unavailable_store_implements_protocol(self) -> None:
        assert isinstance(UnavailableLocalStore(), LocalStore)

    def test_protocol_is_runtime_checkable(self) -> None:
        class NotAStore:
            pass

        assert not isinstance(NotAStore(), LocalStore)


class TestInMemoryLocalStore:
    """Test suite for InMemoryLocalStore."""

    @pytest.fixture
    def store(self) -> InMemoryLocalStore:
        return InMemoryLocalStore()

    # --- Basic operations ---

    def test_get_returns_none_for_missing_key(self, store: InMemoryLocalStore) -> None:
        assert store.get_item("nonexistent") is None

    def test_set_and_get_roundtrip(self, store: InMemoryLocalStore) -> None:
        store.set_item("abc", "value")
        assert store.get_item("abc") == "value"

    def test_set_overwrites_existing(self, store: InMemoryLocalStore) -> None:
        store.set_item("abc", "first")
        store.set_item("abc", "second")
        assert store.get_item("abc") == "second"

    def test_remove_deletes_entry(self, store: InMemoryLocalStore) -> None:
        store.set_item("abc", "value")
        store.remove_item("abc")
        assert store.get_item("abc") is None

    def test_remove_missing_key_is_silent(self, store: InMemoryLocalStore) -> None:
        store.remove_item("nonexistent")
        assert store.keys() == []

    def test_clear_removes_all_entries(self, store: InMemoryLocalStore) -> None:
        for i in range(3):
            store.set_item(f"key{i}", "v")
        store.clear()
        assert store.keys() == []
        assert store.get_stats()["chars_used"] == 0

    def test_keys_returns_all_keys(self, store: InMemoryLocalStore) -> None:
        for i in range(3):
            store.set_item(f"key{i}", "v")
        assert set(store.keys()) == {"key0", "key1", "key2"}

    # --- Quota ---

    def test_write_beyond_quota_raises(self) -> None:
        store = InMemoryLocalStore(quota=10)
        with pytest.raises(QuotaExceededError) as exc_info:
            store.set_item("key", "12345678")
        assert exc_info.value.details["quota"] == 10

    def test_rejected_write_leaves_store_unchanged(self) -> None:
        store = InMemoryLocalStore(quota=10)
        store.set_item("k", "1234")
        with pytest.raises(QuotaExceededError):
            store.set_item("k", "1234567890")
        assert store.get_item("k") == "1234"
        assert store.get_stats()["chars_used"] == 5

    def test_overwrite_reuses_capacity(self) -> None:
        """Replacing a value only charges the difference."""
        store = InMemoryLocalStore(quota=10)
        store.set_item("k", "123456789")
        store.set_item("k", "987654321")
        assert store.get_item("k") == "987654321"

    def test_remove_frees_capacity(self) -> None:
        store = InMemoryLocalStore(quota=10)
        store.set_item("a", "123456789")
        store.remove_item("a")
        store.set_item("b", "123456789")
        assert store.get_item("b") == "123456789"

    # --- Statistics ---

    def test_get_stats_returns_required_fields(self, store: InMemoryLocalStore) -> None:
        store.set_item("ab", "cd")
        stats = store.get_stats()
        assert stats["backend_type"] == "memory"
        assert stats["entry_count"] == 1
        assert stats["chars_used"] == 4

    # --- Thread safety ---

    def test_concurrent_set_operations(self, store: InMemoryLocalStore) -> None:
        num_threads = 10
        entries_per_thread = 100
        errors: list[Exception] = []

        def worker(thread_id: int) -> None:
            try:
                for i in range(entries_per_thread):
                    store.set_item(f"thread{thread_id}_entry{i}", "v")
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(num_threads)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert store.get_stats()["entry_count"] == num_threads * entries_per_thread


class TestUnavailableLocalStore:
    """Every access to an unavailable store is refused."""

    @pytest.mark.parametrize(
        "call",
        [
            lambda s: s.get_item("k"),
            lambda s: s.set_item("k", "v"),
            lambda s: s.remove_item("k"),
            lambda s: s.clear(),
            lambda s: s.keys(),
        ],
        ids=["get_item", "set_item", "remove_item", "clear", "keys"],
    )
    def test_operations_raise(self, call) -> None:
        with pytest.raises(BackendUnavailableError):
            call(UnavailableLocalStore())

    def test_reason_is_reported(self) -> None:
        with pytest.raises(BackendUnavailableError, match="private mode"):
            UnavailableLocalStore("private mode").set_item("k", "v")
