"""
Backup-exclusion strategies for freshly created cache directories.

A strategy is any callable taking a directory path. Strategies register
per `sys.platform` value; platforms without one get the no-op. Callers treat
every strategy as best-effort and discard its failures.
"""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from typing import Callable, Dict, Optional, Protocol


class BackupExclusion(Protocol):
    def __call__(self, path: Path) -> None: ...


_BACKUP_EXCLUSION_REGISTRY: Dict[str, BackupExclusion] = {}


def register_backup_exclusion(platform: str) -> Callable[[BackupExclusion], BackupExclusion]:
    """Decorator to register the backup-exclusion strategy for a platform."""
    def decorator(fn: BackupExclusion) -> BackupExclusion:
        if platform in _BACKUP_EXCLUSION_REGISTRY:
            raise KeyError(f"Backup exclusion for '{platform}' already registered")
        _BACKUP_EXCLUSION_REGISTRY[platform] = fn
        return fn
    return decorator


def no_backup_exclusion(path: Path) -> None:
    """Default strategy: the platform has no backup-exclusion attribute."""


@register_backup_exclusion("darwin")
def exclude_from_time_machine(path: Path) -> None:
    """Mark `path` as excluded from Time Machine backups.

    `tmutil addexclusion` (without -p) sets the same sticky resource attribute
    as NSURLIsExcludedFromBackupKey, so the exclusion follows the directory.
    """
    subprocess.run(
        ["tmutil", "addexclusion", str(path)],
        check=True,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )


def backup_exclusion_for(platform: Optional[str] = None) -> BackupExclusion:
    """Return the strategy for `platform` (default: the running platform)."""
    if platform is None:
        platform = sys.platform
    return _BACKUP_EXCLUSION_REGISTRY.get(platform, no_backup_exclusion)


def registered_platforms() -> list[str]:
    return sorted(_BACKUP_EXCLUSION_REGISTRY.keys())
