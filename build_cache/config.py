"""
Configuration for build_cache.

The only setting is where the cache lives. It comes from, in order:
- the BUILD_CACHE_DIR environment variable
- the `cache.path` key of a YAML config file
An unset root is valid and means caching is disabled.

Example `cache.yaml`:

    cache:
      path: ~/.cache/build
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

ENV_CACHE_DIR = "BUILD_CACHE_DIR"


@dataclass(frozen=True)
class CacheConfig:
    """Cache-level configuration."""
    path: Optional[str] = None  # None disables the cache


def load_yaml_config(path: str | Path) -> Dict[str, Any]:
    """Read a cache config file. An empty file means caching is disabled."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config must be a mapping at top level: {path}")
    return data


def build_cache_config(data: Dict[str, Any]) -> CacheConfig:
    """Build CacheConfig from a nested dict.

    Expected top-level keys:
    - cache (optional)
    """
    cache_dict = data.get("cache", None) or {}
    if not isinstance(cache_dict, dict):
        raise ValueError("Config key 'cache' must be a mapping")
    cfg = CacheConfig(**cache_dict)
    if cfg.path is not None and not isinstance(cfg.path, str):
        raise ValueError(f"cache.path must be a string, got {type(cfg.path).__name__}")
    return cfg


def resolve_cache_dir(
    cfg: CacheConfig,
    base_dir: str | Path = ".",
    env: Optional[Mapping[str, str]] = None,
) -> Optional[Path]:
    """Return the absolute cache root, or None if caching is disabled.

    Args:
        cfg: Parsed file configuration.
        base_dir: Directory that relative `cfg.path` values are anchored to
            (the config file's directory).
        env: Environment mapping (default: os.environ). Relative values here
            are anchored to the current directory.
    """
    env = os.environ if env is None else env

    from_env = env.get(ENV_CACHE_DIR, "")
    if from_env:
        return Path(from_env).expanduser().absolute()

    if not cfg.path:
        return None
    path = Path(cfg.path).expanduser()
    if not path.is_absolute():
        path = Path(base_dir) / path
    return path.absolute()


def load_cache_dir(
    config_path: Optional[str | Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Optional[Path]:
    """Configuration provider: the optional cache root for this invocation."""
    if config_path is None:
        return resolve_cache_dir(CacheConfig(), env=env)
    config_path = Path(config_path)
    cfg = build_cache_config(load_yaml_config(config_path))
    return resolve_cache_dir(cfg, base_dir=config_path.parent, env=env)
