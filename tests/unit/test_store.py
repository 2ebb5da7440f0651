"""
Unit tests for the policy store and the reader/writer lock.

Tests cover:
- Insert, replace and snapshot semantics of PolicyStore
- Shared and exclusive acquisition of ReadWriteLock
- Lock timeouts surfacing as LockTimeoutError
"""

import threading

import pytest

from regoscope.errors import EngineError, LockTimeoutError
from regoscope.store import PolicyStore, ReadWriteLock


# =============================================================================
# PolicyStore Tests
# =============================================================================


class TestPolicyStore:
    """Tests for PolicyStore."""

    def test_empty(self) -> None:
        """A new store holds nothing."""
        store = PolicyStore()
        assert len(store) == 0
        assert store.get_all() == {}
        assert store.get("missing.rego") is None

    def test_put_and_get(self) -> None:
        """Stored source comes back unchanged."""
        store = PolicyStore()
        store.put("a.rego", "package a\n")
        assert store.get("a.rego") == "package a\n"
        assert "a.rego" in store

    def test_replace(self) -> None:
        """Putting the same name twice keeps the latest source."""
        store = PolicyStore()
        store.put("a.rego", "old")
        store.put("a.rego", "new")
        assert store.get("a.rego") == "new"
        assert len(store) == 1

    def test_no_validation(self) -> None:
        """Any text is accepted."""
        store = PolicyStore()
        store.put("broken.rego", "this is {{ not rego")
        assert store.get("broken.rego") == "this is {{ not rego"

    def test_snapshot_is_copy(self) -> None:
        """Changing a snapshot does not change the store."""
        store = PolicyStore()
        store.put("a.rego", "package a")
        snapshot = store.get_all()
        snapshot["b.rego"] = "package b"
        del snapshot["a.rego"]
        assert store.get_all() == {"a.rego": "package a"}

    def test_names_sorted(self) -> None:
        """Names come back sorted; iteration follows the same order."""
        store = PolicyStore()
        for name in ("c.rego", "a.rego", "b.rego"):
            store.put(name, "")
        assert store.names() == ["a.rego", "b.rego", "c.rego"]
        assert list(store) == ["a.rego", "b.rego", "c.rego"]

    def test_clear(self) -> None:
        """clear() forgets everything."""
        store = PolicyStore()
        store.put("a.rego", "package a")
        store.clear()
        assert len(store) == 0
        assert "a.rego" not in store

    def test_repr(self) -> None:
        """repr shows the policy count."""
        store = PolicyStore()
        store.put("a.rego", "")
        assert repr(store) == "<PolicyStore: 1 policies>"


# =============================================================================
# ReadWriteLock Tests
# =============================================================================


class TestReadWriteLock:
    """Tests for ReadWriteLock."""

    def test_initial_state(self) -> None:
        """A new lock is free."""
        lock = ReadWriteLock()
        assert lock.readers == 0
        assert not lock.write_locked

    def test_shared_readers(self) -> None:
        """Several readers hold the lock together."""
        lock = ReadWriteLock()
        with lock.read(timeout=0.1):
            with lock.read(timeout=0.1):
                assert lock.readers == 2
            assert lock.readers == 1
        assert lock.readers == 0

    def test_write_is_exclusive(self) -> None:
        """A writer flags the lock and releases it on exit."""
        lock = ReadWriteLock()
        with lock.write(timeout=0.1):
            assert lock.write_locked
        assert not lock.write_locked

    def test_read_times_out_under_writer(self) -> None:
        """A reader gives up while a writer holds the lock."""
        lock = ReadWriteLock()
        lock.acquire_write()
        with pytest.raises(LockTimeoutError) as exc_info:
            lock.acquire_read(timeout=0.05)
        lock.release_write()

        assert exc_info.value.mode == "read"
        assert exc_info.value.timeout_seconds == 0.05
        assert lock.readers == 0

    def test_write_times_out_under_reader(self) -> None:
        """A writer gives up while a reader holds the lock."""
        lock = ReadWriteLock()
        with lock.read():
            with pytest.raises(LockTimeoutError) as exc_info:
                lock.acquire_write(timeout=0.05)
        assert exc_info.value.mode == "write"
        assert not lock.write_locked

    def test_write_times_out_under_writer(self) -> None:
        """The lock is not reentrant for writers."""
        lock = ReadWriteLock()
        with lock.write():
            with pytest.raises(LockTimeoutError):
                lock.acquire_write(timeout=0.05)

    def test_timeout_is_engine_error(self) -> None:
        """Lock timeouts are caught as engine errors."""
        lock = ReadWriteLock()
        lock.acquire_write()
        with pytest.raises(EngineError) as exc_info:
            lock.acquire_read(timeout=0.01)
        lock.release_write()
        assert exc_info.value.error_type == "engine_error"

    def test_released_on_exception(self) -> None:
        """Leaving a with block by exception releases the lock."""
        lock = ReadWriteLock()
        with pytest.raises(ValueError):
            with lock.write():
                raise ValueError("boom")
        assert not lock.write_locked
        with lock.read(timeout=0.1):
            assert lock.readers == 1

    def test_unmatched_release(self) -> None:
        """Releasing without acquiring is a programming error."""
        lock = ReadWriteLock()
        with pytest.raises(RuntimeError):
            lock.release_read()
        with pytest.raises(RuntimeError):
            lock.release_write()

    def test_writer_waits_for_reader(self) -> None:
        """A blocked writer proceeds once the last reader leaves."""
        lock = ReadWriteLock()
        acquired = threading.Event()

        def writer() -> None:
            with lock.write(timeout=5.0):
                acquired.set()

        lock.acquire_read()
        thread = threading.Thread(target=writer)
        thread.start()
        assert not acquired.wait(timeout=0.05)

        lock.release_read()
        thread.join(timeout=5.0)
        assert acquired.is_set()

    def test_concurrent_writers_serialize(self) -> None:
        """Writers never overlap."""
        lock = ReadWriteLock()
        active = 0
        overlaps = 0
        guard = threading.Lock()

        def writer() -> None:
            nonlocal active, overlaps
            for _ in range(50):
                with lock.write(timeout=5.0):
                    with guard:
                        active += 1
                        if active > 1:
                            overlaps += 1
                    with guard:
                        active -= 1

        threads = [threading.Thread(target=writer) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10.0)

        assert overlaps == 0
        assert not lock.write_locked
