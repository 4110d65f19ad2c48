from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

# Version
try:
    __version__ = _pkg_version("fibnum")
except PackageNotFoundError:
    __version__ = "0+unknown"

# Public API re-exports
from .arith import add, add_magnitude, mult, negate, sub, sub_magnitude
from .bignum import BigInt, allocate, copy, release, resize, swap
from .bitops import bit_length, clz, cmp_magnitude, lshift, lshift_into
from .fib import fib_fdoubling, fibonacci, fibonacci_str
from .render import render_bytes, to_string
from .runtime import APPLY, CFG
from .storage import LimbAllocator
from .utility import (
    AllocationFailure,
    BigNumError,
    InvalidHandle,
    PreconditionViolation,
    UnsupportedShift,
)

__all__ = [
    "APPLY",
    "CFG",
    "AllocationFailure",
    "BigInt",
    "BigNumError",
    "InvalidHandle",
    "LimbAllocator",
    "PreconditionViolation",
    "UnsupportedShift",
    "__version__",
    "add",
    "add_magnitude",
    "allocate",
    "bit_length",
    "clz",
    "cmp_magnitude",
    "copy",
    "fib_fdoubling",
    "fibonacci",
    "fibonacci_str",
    "lshift",
    "lshift_into",
    "mult",
    "negate",
    "release",
    "render_bytes",
    "resize",
    "sub",
    "sub_magnitude",
    "swap",
    "to_string",
]
