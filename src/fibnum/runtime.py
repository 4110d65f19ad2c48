# runtime.py
from __future__ import annotations

import sys
from contextvars import ContextVar
from dataclasses import dataclass, field
from importlib.util import find_spec
from typing import TYPE_CHECKING, Any

from colorama import Fore, Style

if TYPE_CHECKING:
    from fibnum.config import Settings

DEFAULTS: dict[str, dict[str, Any]] = {
    "BEHAVIOUR": {"DEBUG": False},
    "ALLOC": {"INIT_SIZE": 4, "CHUNK_SIZE": 4, "MAX_LIMBS": 0},
    "DEVICE": {"MAX_OFFSET": 1000, "BUFFER_SIZE": 500},
    "BENCH": {"OUTPUT_FILE": "data.txt", "MAX_OFFSET": 1000},
}


def _merge(base: dict[str, Any], over: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for k, v in over.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge(out[k], v)
        else:
            out[k] = v
    return out


@dataclass
class Runtime:
    source: str = "defaults"
    settings: dict[str, Any] = field(default_factory=lambda: _merge({}, DEFAULTS))
    debug: bool = False  # controls [debug] lines and tracebacks

    def apply(self, settings: Settings | dict[str, Any]) -> None:
        self.source = str(getattr(settings, "source", None) or "defaults")

        if isinstance(settings, dict):
            cfg = settings
        else:
            cfg = settings.as_dict()

        # unknown sections pass through untouched
        self.settings = _merge(DEFAULTS, dict(cfg))

        dbg = self.get("BEHAVIOUR.DEBUG", None)
        if isinstance(dbg, bool):
            self.debug = dbg

    def get(self, key: str, default: Any = None) -> Any:
        """Support dotted lookups, e.g., 'DEVICE.MAX_OFFSET'."""
        if not key:
            return default
        cur = self.settings
        if "." in key:
            for part in key.split("."):
                if isinstance(cur, dict) and part in cur:
                    cur = cur[part]
                else:
                    return default
            return cur
        return cur.get(key, default)


# --- Context management ---

_current_runtime: ContextVar[Runtime | None] = ContextVar("fibnum_runtime", default=None)


def current() -> Runtime:
    rt = _current_runtime.get()
    if rt is None:
        rt = Runtime()
        _current_runtime.set(rt)
    return rt


def reset() -> None:
    _current_runtime.set(None)


def APPLY(settings: Settings | dict[str, Any]) -> None:
    current().apply(settings)


def CFG(key: str, default: Any = None) -> Any:
    return current().get(key, default)


def debug(msg: str) -> None:
    """Write a [debug] line to stderr when the runtime debug flag is on."""
    if current().debug:
        print(f"{Fore.CYAN}[debug]{Style.RESET_ALL} {msg}", file=sys.stderr)


# ---- Dependency check --------------------------------------------------------

def ensure_runtime_deps(strict: bool = True, required: tuple[str, ...] = ("gmpy2", "sympy")) -> bool:
    """
    Verify the reference libraries are available. Uses find_spec() so nothing
    is imported here.
    If strict=True, prints a friendly error and returns False when missing.
    """
    missing = [name for name in required if find_spec(name) is None]

    if not missing:
        return True

    msg = (
        f"{Fore.RED}{Style.BRIGHT}\nMissing dependencies:{Style.RESET_ALL} "
        + ", ".join(missing)
        + "\nInstall with: "
        + f"{Fore.YELLOW}pip install " + " ".join(missing) + f"{Style.RESET_ALL}"
    )
    print(msg)
    return not strict
