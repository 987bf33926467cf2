from pathlib import Path

import pytest

from build_cache.config import (
    ENV_CACHE_DIR,
    CacheConfig,
    build_cache_config,
    load_cache_dir,
    load_yaml_config,
    resolve_cache_dir,
)


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_no_config_and_no_env_disables_cache():
    assert load_cache_dir(None, env={}) is None


def test_config_without_cache_key_disables_cache(tmp_path):
    cfg_path = _write(tmp_path / "cache.yaml", "other: 1\n")

    assert load_cache_dir(cfg_path, env={}) is None


def test_empty_config_file_disables_cache(tmp_path):
    cfg_path = _write(tmp_path / "cache.yaml", "")

    assert load_cache_dir(cfg_path, env={}) is None


def test_absolute_path_from_file(tmp_path):
    target = tmp_path / "elsewhere"
    cfg_path = _write(tmp_path / "cache.yaml", f"cache:\n  path: '{target}'\n")

    assert load_cache_dir(cfg_path, env={}) == target


def test_relative_path_anchored_at_config_file(tmp_path):
    (tmp_path / "conf").mkdir()
    cfg_path = _write(tmp_path / "conf" / "cache.yaml", "cache:\n  path: out/cache\n")

    assert load_cache_dir(cfg_path, env={}) == (tmp_path / "conf" / "out" / "cache").absolute()


def test_env_overrides_file(tmp_path):
    cfg_path = _write(tmp_path / "cache.yaml", "cache:\n  path: from-file\n")
    env_dir = tmp_path / "from-env"

    assert load_cache_dir(cfg_path, env={ENV_CACHE_DIR: str(env_dir)}) == env_dir


def test_relative_env_anchored_at_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    assert load_cache_dir(None, env={ENV_CACHE_DIR: "rel"}) == Path.cwd() / "rel"


def test_empty_env_value_counts_as_unset(tmp_path):
    cfg_path = _write(tmp_path / "cache.yaml", "cache:\n  path: from-file\n")

    assert load_cache_dir(cfg_path, env={ENV_CACHE_DIR: ""}) == tmp_path / "from-file"


def test_resolve_uses_os_environ_by_default(monkeypatch, tmp_path):
    monkeypatch.setenv(ENV_CACHE_DIR, str(tmp_path / "env-cache"))

    assert resolve_cache_dir(CacheConfig()) == tmp_path / "env-cache"


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_yaml_config(tmp_path / "nope.yaml")


def test_top_level_must_be_mapping(tmp_path):
    cfg_path = _write(tmp_path / "cache.yaml", "- a\n- b\n")

    with pytest.raises(ValueError):
        load_yaml_config(cfg_path)


def test_cache_key_must_be_mapping():
    with pytest.raises(ValueError):
        build_cache_config({"cache": "somewhere"})


def test_unknown_cache_key_rejected():
    with pytest.raises(TypeError):
        build_cache_config({"cache": {"path": "x", "dir": "y"}})


def test_non_string_path_rejected():
    with pytest.raises(ValueError):
        build_cache_config({"cache": {"path": 42}})


def test_empty_config_file_reads_as_empty_mapping(tmp_path):
    cfg_path = _write(tmp_path / "cache.yaml", "")

    assert load_yaml_config(cfg_path) == {}
    assert build_cache_config({}) == CacheConfig()
