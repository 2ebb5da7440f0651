"""
Reader/writer lock for the engine resource.

Any number of readers may hold the lock together; a writer holds it alone.
Registration and evaluation take the write side, inventory and coverage
reads take the read side.

Acquisition can be bounded by a timeout. Failing to acquire in time raises
LockTimeoutError, which callers see as an engine error; the call never runs
partially.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from regoscope.errors import LockTimeoutError
from regoscope.utils.logging import get_logger

logger = get_logger(__name__)


class ReadWriteLock:
    """
    Non-reentrant reader/writer lock.

    Usage:
        lock = ReadWriteLock()
        with lock.read(timeout=5.0):
            ...
        with lock.write(timeout=5.0):
            ...
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False

    @property
    def readers(self) -> int:
        """Number of readers currently holding the lock."""
        return self._readers

    @property
    def write_locked(self) -> bool:
        """Whether a writer currently holds the lock."""
        return self._writer

    def acquire_read(self, timeout: float | None = None) -> None:
        """
        Acquire shared access.

        Args:
            timeout: Seconds to wait, or None to wait forever

        Raises:
            LockTimeoutError: If a writer held the lock for the whole timeout
        """
        with self._cond:
            if not self._cond.wait_for(lambda: not self._writer, timeout=timeout):
                logger.warning("Read lock not acquired within %ss", timeout)
                raise LockTimeoutError(mode="read", timeout_seconds=timeout)
            self._readers += 1

    def release_read(self) -> None:
        """Release shared access."""
        with self._cond:
            if self._readers == 0:
                msg = "release_read() called without a matching acquire_read()"
                raise RuntimeError(msg)
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self, timeout: float | None = None) -> None:
        """
        Acquire exclusive access.

        Args:
            timeout: Seconds to wait, or None to wait forever

        Raises:
            LockTimeoutError: If readers or a writer held the lock for the whole timeout
        """
        with self._cond:
            ready = self._cond.wait_for(
                lambda: not self._writer and self._readers == 0,
                timeout=timeout,
            )
            if not ready:
                logger.warning("Write lock not acquired within %ss", timeout)
                raise LockTimeoutError(mode="write", timeout_seconds=timeout)
            self._writer = True

    def release_write(self) -> None:
        """Release exclusive access."""
        with self._cond:
            if not self._writer:
                msg = "release_write() called without a matching acquire_write()"
                raise RuntimeError(msg)
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read(self, timeout: float | None = None) -> Iterator[None]:
        """Hold shared access for the duration of a with block."""
        self.acquire_read(timeout)
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write(self, timeout: float | None = None) -> Iterator[None]:
        """Hold exclusive access for the duration of a with block."""
        self.acquire_write(timeout)
        try:
            yield
        finally:
            self.release_write()
