"""
build_cache

On-disk layout and locking for a build system's output cache:
a versioned directory tree (deps / build / .fingerprint) guarded by a
single exclusive lock per cache version.

Public entry points:
- `CacheLayout.open(cache_dir)` for library callers
- `python -m build_cache.run --config path/to/cache.yaml` for scripts
"""

from .errors import CacheLayoutError, DirectoryCreationFailure, LockAcquisitionFailure
from .layout import CacheLayout, LayoutState
from .paths import CACHE_VERSION, LOCK_FILE_NAME, CachePaths

__all__ = [
    "__version__",
    "CACHE_VERSION",
    "LOCK_FILE_NAME",
    "CacheLayout",
    "CacheLayoutError",
    "CachePaths",
    "DirectoryCreationFailure",
    "LayoutState",
    "LockAcquisitionFailure",
]
__version__ = "0.1.0"
