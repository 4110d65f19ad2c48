# -----------------------------------------------------------------------------
#  Utility functions and error types
# -----------------------------------------------------------------------------

from __future__ import annotations

LIMB_BITS = 64
LIMB_MASK = (1 << LIMB_BITS) - 1
LIMB_BASE = 1 << LIMB_BITS


class UserInputError(Exception):
    pass


class BigNumError(Exception):
    """Base class for errors raised by the bignum core."""


class AllocationFailure(BigNumError, MemoryError):
    pass


class InvalidHandle(BigNumError):
    pass


class PreconditionViolation(BigNumError, ValueError):
    pass


class UnsupportedShift(BigNumError, ValueError):
    pass


def max2(x: int, y: int) -> int:
    return x if x > y else y


def div_roundup(x: int, length: int) -> int:
    """Integer ceil(x / length) for x >= 0, length > 0."""
    return (x + length - 1) // length


def round_up(x: int, chunk: int) -> int:
    """Smallest multiple of `chunk` that is >= x."""
    return div_roundup(x, chunk) * chunk


def clz64(word: int) -> int:
    """Leading zero bits of a single 64-bit word; 64 for word == 0."""
    return LIMB_BITS - (word & LIMB_MASK).bit_length()


def parse_index(text: str) -> int:
    """Parse a non-negative Fibonacci index from user input."""
    s = str(text).strip().replace("_", "")
    if not s:
        raise UserInputError("Invalid input: empty index.")
    try:
        n = int(s, 10)
    except ValueError:
        raise UserInputError(f"Invalid input: '{text}' is not an integer.") from None
    if n < 0:
        raise UserInputError(f"Invalid input: index must be non-negative, got {n}.")
    return n


def flatten_dotted(d: dict, prefix: str = "") -> dict[str, object]:
    """Flatten nested dicts into {'A.B': value} pairs."""
    out: dict[str, object] = {}
    for k, v in d.items():
        key = f"{prefix}.{k}" if prefix else str(k)
        if isinstance(v, dict):
            out.update(flatten_dotted(v, key))
        else:
            out[key] = v
    return out


def typename(x: object) -> str:
    return type(x).__name__
