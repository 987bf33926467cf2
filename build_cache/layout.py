"""
The cache layout: resolved paths plus the lock that guards them.

A `CacheLayout` is constructed once per build invocation. Construction
resolves the paths, creates the version directory if needed, and blocks until
the version lock is held. The lock is held until `close()` (or the end of a
`with` block); there is no finer-grained locking inside a cache version.

Typical use:

    layout = CacheLayout.open(load_cache_dir(config_path))
    if layout is not None:
        with layout:
            layout.prepare()
            compile_into(layout.deps, layout.fingerprint)
"""

from __future__ import annotations

import enum
import logging
from pathlib import Path
from typing import Any, Optional, Union

from .backup import BackupExclusion, backup_exclusion_for
from .errors import CacheLayoutError, DirectoryCreationFailure
from .lock import CacheLock, acquire_lock
from .paths import CACHE_VERSION, CachePaths, ensure_cache_dirs

logger = logging.getLogger(__name__)


class LayoutState(enum.Enum):
    RESOLVED = "resolved"
    LOCKED = "locked"
    PREPARED = "prepared"
    RELEASED = "released"


class CacheLayout:
    """Paths of all cache output locations, locked for this process.

    Attributes:
        paths: The resolved `CachePaths`.
        state: Current `LayoutState`.
    """

    def __init__(
        self,
        root: Union[str, Path],
        *,
        version: str = CACHE_VERSION,
        backup_exclusion: Optional[BackupExclusion] = None,
    ):
        self.paths = CachePaths(root=Path(root), version=version)
        self.state = LayoutState.RESOLVED
        self._lock: Optional[CacheLock] = None
        logger.debug("resolved cache layout at %s", self.paths.dest)

        # A freshly created version directory is the one chance to exclude it
        # from backups.
        if _create_dest(self.paths.dest):
            _exclude_from_backups(self.paths.dest, backup_exclusion or backup_exclusion_for())

        self._lock = acquire_lock(self.paths.dest)
        self.state = LayoutState.LOCKED

    @classmethod
    def open(cls, cache_dir: Optional[Union[str, Path]], **kwargs: Any) -> Optional["CacheLayout"]:
        """Lock and return the layout under `cache_dir`, or None if caching is off.

        This function will block if the directory is already locked.
        """
        if cache_dir is None:
            return None
        return cls(cache_dir, **kwargs)

    def prepare(self) -> "CacheLayout":
        """Make sure all directories of the layout exist on the filesystem."""
        if self.state is LayoutState.RELEASED:
            raise CacheLayoutError(
                f"cache layout at `{self.paths.dest}` was already released", path=self.paths.dest
            )
        ensure_cache_dirs(self.paths)
        self.state = LayoutState.PREPARED
        return self

    def close(self) -> None:
        """Release the cache lock. Later calls are no-ops."""
        if self._lock is not None:
            lock, self._lock = self._lock, None
            lock.release()
        self.state = LayoutState.RELEASED

    def __enter__(self) -> "CacheLayout":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __del__(self) -> None:
        # __init__ may have failed before _lock existed.
        if getattr(self, "_lock", None) is not None:
            self.close()

    def __repr__(self) -> str:
        return f"CacheLayout({str(self.dest)!r}, state={self.state.value})"

    @property
    def is_locked(self) -> bool:
        return self._lock is not None and self._lock.is_locked

    @property
    def root(self) -> Path:
        return self.paths.root

    @property
    def dest(self) -> Path:
        return self.paths.dest

    @property
    def deps(self) -> Path:
        return self.paths.deps

    @property
    def build(self) -> Path:
        return self.paths.build

    @property
    def fingerprint(self) -> Path:
        return self.paths.fingerprint

    @property
    def lock_path(self) -> Path:
        return self.paths.lock_path


def _create_dest(dest: Path) -> bool:
    """Create `dest` if missing. Returns True only for the process that created it."""
    if dest.is_dir():
        return False
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.mkdir()
    except FileExistsError as e:
        if dest.is_dir():
            # Another process won the race.
            return False
        raise DirectoryCreationFailure(f"failed to create directory `{dest}`: {e}", path=dest) from e
    except OSError as e:
        raise DirectoryCreationFailure(f"failed to create directory `{dest}`: {e}", path=dest) from e
    logger.debug("created cache version directory %s", dest)
    return True


def _exclude_from_backups(dest: Path, strategy: BackupExclusion) -> None:
    try:
        strategy(dest)
    except Exception as e:
        # Optional feature: failure must not prevent the build from working.
        logger.debug("ignoring backup exclusion failure for %s: %s", dest, e)
