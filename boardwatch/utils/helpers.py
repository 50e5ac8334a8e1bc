"""Utility functions for boardwatch runtime paths."""

import os
from pathlib import Path

DATA_DIR_NAME = ".boardwatch"


def ensure_dir(path: Path) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_path() -> Path:
    """
    Get the runtime data directory.

    `BOARDWATCH_DATA_DIR` overrides the default `~/.boardwatch`.
    """
    env_path = str(os.environ.get("BOARDWATCH_DATA_DIR") or "").strip()
    if env_path:
        return ensure_dir(Path(env_path).expanduser())
    return ensure_dir(Path.home() / DATA_DIR_NAME)


def expand_path(value: str) -> Path:
    """Expand `~` and make the path absolute."""
    return Path(str(value or "")).expanduser().resolve()
