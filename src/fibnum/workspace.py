from __future__ import annotations

import os
from pathlib import Path

SETTINGS_FILE = "fibnum.toml"


def workspace_dir() -> Path:
    env = os.environ.get("FIBNUM_HOME")
    if env:
        return Path(env).expanduser().resolve()
    return (Path.home() / ".fibnum").resolve()


def settings_path() -> Path:
    return workspace_dir() / SETTINGS_FILE


def resolve_output_path(path: str | os.PathLike[str]) -> Path:
    """
    Resolve a user-provided output path.

    - '~' expanded to user home
    - Absolute paths unchanged
    - Relative paths are relative to the current directory
    """
    raw = os.fspath(path)
    if not raw:
        raise ValueError("Output path is empty")
    p = Path(os.path.expanduser(raw))
    if not p.is_absolute():
        p = Path.cwd() / p
    return Path(os.path.normpath(p))
