from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

try:
    import tomllib as toml
except Exception:
    import tomli as toml  # type: ignore

from fibnum.utility import UserInputError
from fibnum.workspace import settings_path

# Keys that must be non-negative integers when present
_INT_KEYS = (
    ("ALLOC", "INIT_SIZE"),
    ("ALLOC", "CHUNK_SIZE"),
    ("ALLOC", "MAX_LIMBS"),
    ("DEVICE", "MAX_OFFSET"),
    ("DEVICE", "BUFFER_SIZE"),
    ("BENCH", "MAX_OFFSET"),
)


@dataclass
class Settings:
    """
    Wrap the TOML dict read from a settings file.
    .as_dict() feeds runtime.apply().
    """
    data: dict[str, Any]
    source: Path | None = None

    def as_dict(self) -> dict[str, Any]:
        return self.data


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as f:
            return toml.load(f)
    except OSError as e:
        raise UserInputError(f"reading {path}: {e.strerror or e}.") from None
    except toml.TOMLDecodeError as e:
        lineno = getattr(e, "lineno", None)
        colno = getattr(e, "colno", None)
        msg = getattr(e, "msg", str(e))
        where = []
        if lineno is not None:
            where.append(f"line {lineno}")
        if colno is not None:
            where.append(f"column {colno}")
        loc = f" (at {', '.join(where)})" if where else ""
        # No traceback chaining
        raise UserInputError(f"reading {path.name}: {msg}{loc}.") from None


def _validate(data: dict[str, Any], path: Path) -> None:
    for section, key in _INT_KEYS:
        sect = data.get(section)
        if not isinstance(sect, dict) or key not in sect:
            continue
        v = sect[key]
        # bool is an int subclass; reject it explicitly
        if isinstance(v, bool) or not isinstance(v, int) or v < 0:
            raise UserInputError(f"{path.name}: {section}.{key} must be a non-negative integer, got {v!r}.")
    for section in ("ALLOC", "DEVICE", "BENCH", "BEHAVIOUR"):
        if section in data and not isinstance(data[section], dict):
            raise UserInputError(f"{path.name}: [{section}] must be a table.")
    for key in ("INIT_SIZE", "CHUNK_SIZE"):
        if data.get("ALLOC", {}).get(key) == 0:
            raise UserInputError(f"{path.name}: ALLOC.{key} must be at least 1.")
    dbg = data.get("BEHAVIOUR", {}).get("DEBUG")
    if dbg is not None and not isinstance(dbg, bool):
        raise UserInputError(f"{path.name}: BEHAVIOUR.DEBUG must be true or false.")


def load_settings(path: str | Path | None = None) -> Settings:
    """
    Load settings from `path`, or from <workspace>/fibnum.toml when no path is
    given. A missing default file yields empty settings (built-in defaults);
    a missing explicit file is an error.
    """
    explicit = path is not None
    p = Path(path).expanduser() if explicit else settings_path()

    if not p.exists():
        if explicit:
            raise UserInputError(f"settings file not found: {p}")
        return Settings(data={}, source=None)

    data = _load_toml(p)
    _validate(data, p)
    return Settings(data=data, source=p)
