"""
Filesystem layout for the build cache.

This is the on-disk contract every compiler driver, build-script runner and
fingerprint consumer relies on:

    <root>/
        <CACHE_VERSION>/
            .cache-lock     # held for the whole build invocation
            .fingerprint/   # fingerprint records, one directory per package
            deps/           # compiled artifacts
            build/          # build-script executables and their outputs
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .errors import DirectoryCreationFailure

logger = logging.getLogger(__name__)

# The cache format version. Increment this on ANY breaking change to the
# layout below: the new value produces a disjoint tree next to the old one,
# and old trees are never migrated or deleted automatically.
CACHE_VERSION = "0"

LOCK_FILE_NAME = ".cache-lock"


@dataclass(frozen=True)
class CachePaths:
    """Resolved paths for one cache version.

    Attributes:
        root: Configured cache root (e.g. ~/.cache/build).
        version: Cache format version segment.
        dest: Directory for this version (root/version).
        deps: Directory for compiled artifacts.
        build: Directory for build scripts and their output.
        fingerprint: Directory for fingerprint records.
        lock_path: Lock file guarding dest.
    """
    root: Path
    version: str = CACHE_VERSION

    @property
    def dest(self) -> Path:
        return self.root / self.version

    @property
    def deps(self) -> Path:
        return self.dest / "deps"

    @property
    def build(self) -> Path:
        return self.dest / "build"

    @property
    def fingerprint(self) -> Path:
        return self.dest / ".fingerprint"

    @property
    def lock_path(self) -> Path:
        return self.dest / LOCK_FILE_NAME


def ensure_cache_dirs(paths: CachePaths) -> None:
    """Create the directory structure for a cache version.

    Safe to call repeatedly. Must only be called while the cache lock is held.

    Raises:
        DirectoryCreationFailure: a directory could not be created (permission
            denied, disk full, or a non-directory already sits at the path).
    """
    for directory in (paths.deps, paths.fingerprint, paths.build):
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryCreationFailure(
                f"failed to create directory `{directory}`: {e}", path=directory
            ) from e
        logger.debug("ensured cache directory %s", directory)
