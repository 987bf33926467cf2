"""Error taxonomy for cache layout setup.

Absence of a configured cache root is not an error: callers get `None`
from `CacheLayout.open`. Backup-exclusion failures never surface either.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class CacheLayoutError(Exception):
    """Base class for fatal cache layout failures."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class LockAcquisitionFailure(CacheLayoutError):
    """The cache lock file could not be opened or locked."""


class DirectoryCreationFailure(CacheLayoutError):
    """A cache directory could not be created."""
