"""
CLI runner: `python -m build_cache.run --config cache.yaml [-- COMMAND ...]`

This is the orchestrator: it composes
- config -> optional cache root
- cache layout (lock + directories)
- an optional child command that does the actual artifact I/O

The lock is held for the whole lifetime of the child command, so two
invocations against the same cache version run one after the other.
"""

from __future__ import annotations

import argparse
import logging
import os
import subprocess
import time
from pathlib import Path
from typing import Dict, Optional

from .config import load_cache_dir
from .errors import CacheLayoutError
from .layout import CacheLayout


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="build_cache layout runner")
    p.add_argument("--config", type=str, default=None, help="Path to YAML config")
    p.add_argument("--cache-dir", type=str, default=None, help="Cache root (overrides env and config)")
    p.add_argument("--no-prepare", action="store_true", help="Lock only; do not create subdirectories")
    p.add_argument("--hold", type=float, default=0.0, help="Seconds to keep the lock after setup")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    p.add_argument("command", nargs=argparse.REMAINDER, help="Command to run while holding the lock")
    return p.parse_args(argv)


def layout_env(layout: CacheLayout) -> Dict[str, str]:
    """Environment variables handing the layout paths to a child process."""
    return {
        "BUILD_CACHE_ROOT": str(layout.root),
        "BUILD_CACHE_DEST": str(layout.dest),
        "BUILD_CACHE_DEPS": str(layout.deps),
        "BUILD_CACHE_BUILD": str(layout.build),
        "BUILD_CACHE_FINGERPRINT": str(layout.fingerprint),
    }


def main(argv: Optional[list[str]] = None) -> int:
    args = _parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.INFO, format="%(message)s")

    command = list(args.command)
    if command and command[0] == "--":
        command = command[1:]

    if args.cache_dir:
        cache_dir = Path(args.cache_dir).expanduser().absolute()
    else:
        cache_dir = load_cache_dir(args.config)
    if cache_dir is None:
        print("[DISABLED] no cache directory configured", flush=True)
        return 0

    try:
        layout = CacheLayout(cache_dir)
        with layout:
            if not args.no_prepare:
                layout.prepare()
            print(f"[LOCKED] dest={layout.dest}", flush=True)
            for name, value in layout_env(layout).items():
                print(f"{name}={value}", flush=True)

            if args.hold > 0:
                time.sleep(args.hold)

            if command:
                env = {**os.environ, **layout_env(layout)}
                try:
                    code = subprocess.call(command, env=env)
                except OSError as e:
                    print(f"[FAILED] could not run `{command[0]}`: {e}", flush=True)
                    return 1
                print(f"[DONE] command exited with {code}", flush=True)
                return code

        print("[DONE] released", flush=True)
        return 0

    except CacheLayoutError as e:
        print(f"[FAILED] {type(e).__name__}: {e}", flush=True)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
