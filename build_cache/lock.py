"""
Exclusive cross-process lock over one cache version directory.

The lock is an OS advisory lock (flock on POSIX, msvcrt on Windows) taken
through `filelock`. It is released by the OS if the holding process dies.
Filesystems without flock fail instead of degrading to an existence lock,
which would survive a crashed holder.
"""

from __future__ import annotations

import logging
from pathlib import Path

from filelock import FileLock, Timeout

from .errors import LockAcquisitionFailure
from .paths import LOCK_FILE_NAME

logger = logging.getLogger(__name__)


class CacheLock:
    """Handle for a held cache lock. Releasing it more than once is a no-op."""

    def __init__(self, lock: FileLock, path: Path):
        self._lock = lock
        self.path = path

    @property
    def is_locked(self) -> bool:
        return self._lock.is_locked

    def release(self) -> None:
        if not self._lock.is_locked:
            return
        self._lock.release()
        logger.debug("released cache lock %s", self.path)

    def __enter__(self) -> "CacheLock":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()

    def __repr__(self) -> str:
        state = "locked" if self.is_locked else "unlocked"
        return f"CacheLock({str(self.path)!r}, {state})"


def acquire_lock(
    directory: Path,
    name: str = LOCK_FILE_NAME,
    description: str = "build directory",
) -> CacheLock:
    """Lock `directory/name` exclusively, creating the file if absent.

    Blocks the calling thread, without timeout, while another holder has it.

    Args:
        directory: Existing directory that will contain the lock file.
        name: Lock file name.
        description: Human-readable name of what is being locked (for logs).

    Raises:
        LockAcquisitionFailure: the lock file could not be opened or locked.
    """
    path = Path(directory) / name
    lock = FileLock(str(path), timeout=-1, thread_local=False, fallback_to_soft=False)
    try:
        try:
            lock.acquire(timeout=0)
        except Timeout:
            logger.info("Blocking waiting for file lock on %s", description)
            lock.acquire()
    except (OSError, NotImplementedError) as e:
        raise LockAcquisitionFailure(f"failed to lock file `{path}`: {e}", path=path) from e

    logger.debug("acquired cache lock %s", path)
    return CacheLock(lock, path)
