# -----------------------------------------------------------------------------
#  fib.py
#  Fibonacci numbers by fast doubling
# -----------------------------------------------------------------------------

from __future__ import annotations

from fibnum.arith import add, mult, sub
from fibnum.bignum import BigInt
from fibnum.bitops import lshift_into
from fibnum.render import to_string
from fibnum.storage import LimbAllocator


def fib_fdoubling(dest: BigInt, n: int) -> None:
    """
    dest = F(n), walking the bits of n from the top.

    With (f1, f2) = (F(k), F(k+1)):
        F(2k)   = F(k) * [ 2 * F(k+1) - F(k) ]
        F(2k+1) = F(k)^2 + F(k+1)^2
    Temporaries are rotated with swap(), never copied.
    """
    if n < 0:
        raise ValueError(f"Fibonacci index must be non-negative, got {n}")
    dest.resize(1)
    dest.sign = False
    if n < 2:  # F(0) = 0, F(1) = 1
        dest.limbs[0] = n
        return

    f1 = dest  # F(k)
    f1.limbs[0] = 0
    alloc = dest.allocator
    f2 = BigInt(1, allocator=alloc)  # F(k+1)
    f2.limbs[0] = 1
    k1 = BigInt(1, allocator=alloc)
    k2 = BigInt(1, allocator=alloc)

    try:
        # walk through the bits of n
        i = 1 << (n.bit_length() - 1)
        while i:
            lshift_into(f2, 1, k1)  # k1 = 2 * F(k+1)
            sub(k1, f1, k1)         # k1 = 2 * F(k+1) - F(k)
            mult(k1, f1, k2)        # k2 = k1 * f1 = F(2k)
            mult(f1, f1, k1)        # k1 = F(k)^2
            f1.swap(k2)             # f1 = F(2k) now
            mult(f2, f2, k2)        # k2 = F(k+1)^2
            add(k1, k2, f2)         # f2 = F(k)^2 + F(k+1)^2 = F(2k+1) now
            if n & i:
                f1.swap(f2)         # f1 = F(2k+1)
                add(f1, f2, f2)     # f2 = F(2k+2)
            i >>= 1
    finally:
        f2.release()
        k1.release()
        k2.release()


def fibonacci(n: int, *, allocator: LimbAllocator | None = None) -> BigInt:
    """Return a new BigInt holding F(n); the caller owns it."""
    dest = BigInt(1, allocator=allocator)
    try:
        fib_fdoubling(dest, n)
    except Exception:
        dest.release()
        raise
    return dest


def fibonacci_str(n: int) -> str:
    """Decimal string of F(n)."""
    bn = fibonacci(n)
    try:
        return to_string(bn)
    finally:
        bn.release()
