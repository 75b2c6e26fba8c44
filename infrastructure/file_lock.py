"""Directory-scoped advisory lock with timeout and stale lock detection."""

from __future__ import annotations

import fcntl
import logging
import os
import time
from pathlib import Path
from typing import IO, Optional

from core.errors import LockTimeoutError, PersistenceError

LOCK_FILENAME = ".lock"
LOCK_TIMEOUT_SECONDS = 5.0
LOCK_RETRY_INTERVAL_SECONDS = 0.1

logger = logging.getLogger("taskctl.lock")


def process_exists(pid: int) -> bool:
    """Check if a process with given PID exists."""
    if pid <= 0:
        return False
    try:
        os.kill(pid, 0)
        return True
    except ProcessLookupError:
        return False
    except PermissionError:
        # Process exists but belongs to someone else
        return True
    except (OverflowError, OSError):
        return False


def read_lock_owner(lock_path: Path) -> Optional[int]:
    try:
        content = lock_path.read_text(encoding="utf-8").strip()
        return int(content)
    except (OSError, ValueError):
        return None


class FileLock:
    """Exclusive lock on a data directory, held through a `.lock` marker file.

    The marker contains the holder's pid. A marker naming a dead process is
    removed before the first attempt. On contention the lock is retried every
    `retry_interval` seconds until `timeout` elapses. Release always deletes
    the marker.

    Usage:
        with FileLock(data_dir):
            ...
    """

    def __init__(
        self,
        data_dir: Path,
        timeout: float = LOCK_TIMEOUT_SECONDS,
        retry_interval: float = LOCK_RETRY_INTERVAL_SECONDS,
    ) -> None:
        self.data_dir = Path(data_dir)
        self.path = self.data_dir / LOCK_FILENAME
        self.timeout = timeout
        self.retry_interval = retry_interval
        self._handle: Optional[IO[str]] = None

    @property
    def held(self) -> bool:
        return self._handle is not None

    def remove_stale(self) -> bool:
        """Delete the marker when it names a process that is no longer running."""
        if not self.path.exists():
            return False
        pid = read_lock_owner(self.path)
        if pid is None or process_exists(pid):
            return False
        # Only unlink a marker we hold the flock on; a live holder keeps its flock,
        # so a marker replaced since the pid was read is never removed.
        try:
            handle = open(self.path, "r", encoding="utf-8")
        except OSError:
            return False
        try:
            try:
                fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
            except OSError:
                return False
            if not self._is_current(handle) or read_lock_owner(self.path) != pid:
                return False
            try:
                self.path.unlink()
            except FileNotFoundError:
                return False
            except OSError as exc:
                logger.warning("Unable to remove stale lock %s: %s", self.path, exc)
                return False
        finally:
            try:
                fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
            finally:
                handle.close()
        logger.info("Removed stale lock %s left by pid %s", self.path, pid)
        return True

    def acquire(self) -> "FileLock":
        if self._handle is not None:
            return self
        self.remove_stale()
        deadline = time.monotonic() + self.timeout
        while True:
            handle = self._try_lock()
            if handle is not None:
                handle.seek(0)
                handle.truncate()
                handle.write(str(os.getpid()))
                handle.flush()
                self._handle = handle
                return self
            if time.monotonic() >= deadline:
                raise LockTimeoutError(self.path, self.timeout)
            logger.debug("Lock %s is busy, retrying in %ss", self.path, self.retry_interval)
            time.sleep(self.retry_interval)

    def _try_lock(self) -> Optional[IO[str]]:
        try:
            handle = open(self.path, "a+", encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Unable to open lock file {self.path}: {exc}", self.path) from exc
        try:
            fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except (BlockingIOError, PermissionError):
            handle.close()
            return None
        except OSError as exc:
            handle.close()
            raise PersistenceError(f"Unable to lock {self.path}: {exc}", self.path) from exc
        # The previous holder may have unlinked the marker between open() and flock();
        # a lock on an orphaned inode does not count.
        if not self._is_current(handle):
            handle.close()
            return None
        return handle

    def _is_current(self, handle: IO[str]) -> bool:
        """True when `handle` still refers to the marker at `self.path`."""
        try:
            current = os.stat(self.path)
        except FileNotFoundError:
            return False
        return os.fstat(handle.fileno()).st_ino == current.st_ino

    def release(self) -> None:
        handle = self._handle
        if handle is None:
            return
        self._handle = None
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Unable to remove lock file %s: %s", self.path, exc)
        finally:
            try:
                fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
            finally:
                handle.close()

    def __enter__(self) -> "FileLock":
        return self.acquire()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


__all__ = ["FileLock", "LOCK_FILENAME", "process_exists", "read_lock_owner"]
