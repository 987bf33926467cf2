import sys

import pytest

from build_cache import backup
from build_cache.backup import (
    backup_exclusion_for,
    exclude_from_time_machine,
    no_backup_exclusion,
    register_backup_exclusion,
)


def test_platform_without_strategy_gets_noop():
    assert backup_exclusion_for("linux") is no_backup_exclusion
    assert backup_exclusion_for("win32") is no_backup_exclusion


def test_macos_uses_time_machine_exclusion():
    assert backup_exclusion_for("darwin") is exclude_from_time_machine
    assert "darwin" in backup.registered_platforms()


def test_default_platform_is_detected_at_runtime():
    assert backup_exclusion_for() is backup_exclusion_for(sys.platform)


def test_noop_does_nothing(tmp_path):
    no_backup_exclusion(tmp_path)

    assert list(tmp_path.iterdir()) == []


def test_register_new_platform(monkeypatch, tmp_path):
    monkeypatch.setattr(backup, "_BACKUP_EXCLUSION_REGISTRY", dict(backup._BACKUP_EXCLUSION_REGISTRY))
    seen = []

    @register_backup_exclusion("plan9")
    def mark(path):
        seen.append(path)

    backup_exclusion_for("plan9")(tmp_path)

    assert seen == [tmp_path]


def test_register_duplicate_platform_fails(monkeypatch):
    monkeypatch.setattr(backup, "_BACKUP_EXCLUSION_REGISTRY", dict(backup._BACKUP_EXCLUSION_REGISTRY))

    with pytest.raises(KeyError):
        register_backup_exclusion("darwin")(no_backup_exclusion)


def test_time_machine_exclusion_invokes_tmutil(monkeypatch, tmp_path):
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append((cmd, kwargs))

    monkeypatch.setattr(backup.subprocess, "run", fake_run)

    exclude_from_time_machine(tmp_path)

    assert calls[0][0] == ["tmutil", "addexclusion", str(tmp_path)]
    assert calls[0][1]["check"] is True
