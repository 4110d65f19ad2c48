# -----------------------------------------------------------------------------
#  arith.py
#  Sign-aware addition, subtraction and schoolbook multiplication
# -----------------------------------------------------------------------------

"""
All operations write into an output BigInt `c` and are safe when `c` is one
(or both) of the inputs:

  * add/sub walk the limbs least significant first and read limb i of both
    inputs before limb i of the output is written;
  * mult computes into a scratch BigInt and swaps it into `c` at the end.

The magnitude helpers ignore signs; sign handling lives in add() only.
"""

from __future__ import annotations

from fibnum.bignum import BigInt
from fibnum.bitops import cmp_magnitude, msb
from fibnum.utility import LIMB_BASE, LIMB_BITS, LIMB_MASK, PreconditionViolation, div_roundup, max2


def _normalize_zero(c: BigInt) -> None:
    if c.size == 1 and c.limbs[0] == 0:
        c.sign = False


def _do_add(a: BigInt, b: BigInt, c: BigInt) -> None:
    # result needs at most max(msb) + 1 bits; min size = 1
    d = max2(msb(a), msb(b)) + 1
    c.resize(div_roundup(d, LIMB_BITS))

    la, lb, lc = a.limbs, b.limbs, c.limbs
    carry = 0
    for i in range(c.size):
        carry += (la[i] if i < a.size else 0) + (lb[i] if i < b.size else 0)
        lc[i] = carry & LIMB_MASK
        carry >>= LIMB_BITS

    if not lc[c.size - 1] and c.size > 1:
        c.resize(c.size - 1)


def _do_sub(a: BigInt, b: BigInt, c: BigInt) -> None:
    c.resize(max2(a.size, b.size))

    la, lb, lc = a.limbs, b.limbs, c.limbs
    borrow = 0
    for i in range(c.size):
        t = (la[i] if i < a.size else 0) - (lb[i] if i < b.size else 0) - borrow
        if t < 0:
            lc[i] = t + LIMB_BASE
            borrow = 1
        else:
            lc[i] = t
            borrow = 0

    # drop every zero limb on top, keep at least one
    top = c.size
    while top > 1 and not lc[top - 1]:
        top -= 1
    c.resize(top)


def add_magnitude(a: BigInt, b: BigInt, c: BigInt) -> None:
    """|c| = |a| + |b|; c.sign is left alone."""
    _do_add(a, b, c)


def sub_magnitude(a: BigInt, b: BigInt, c: BigInt) -> None:
    """|c| = |a| - |b|; requires |a| >= |b|."""
    if cmp_magnitude(a, b) < 0:
        raise PreconditionViolation("sub_magnitude requires |a| >= |b|")
    _do_sub(a, b, c)


def add(a: BigInt, b: BigInt, c: BigInt) -> None:
    """c = a + b"""
    a._checked()
    b._checked()
    if a.sign == b.sign:  # both positive or both negative
        sign = a.sign
        _do_add(a, b, c)
        c.sign = sign
    else:
        if a.sign:  # let a >= 0, b < 0
            a, b = b, a
        cmp = cmp_magnitude(a, b)
        if cmp > 0:
            # |a| > |b| and b < 0, hence c = a - |b|
            _do_sub(a, b, c)
            c.sign = False
        elif cmp < 0:
            # |a| < |b| and b < 0, hence c = -(|b| - |a|)
            _do_sub(b, a, c)
            c.sign = True
        else:
            c.set_small(0)
    _normalize_zero(c)


def _negated_view(src: BigInt) -> BigInt:
    """Read-only alias of src's limbs with the sign flipped."""
    view = BigInt.__new__(BigInt)
    view._alloc = src.allocator
    view.limbs = src._checked()
    view.size = src.size
    view.sign = not src.sign
    return view


def negate(src: BigInt, dest: BigInt) -> None:
    """dest = -src"""
    dest.copy_from(src)
    dest.sign = not src.sign
    _normalize_zero(dest)


def sub(a: BigInt, b: BigInt, c: BigInt) -> None:
    """c = a - b, computed as a + (-b); b is never modified."""
    if c is b:
        # c gets written while -b is still being read; take a private copy
        nb = b.clone()
        nb.sign = not nb.sign
        try:
            add(a, nb, c)
        finally:
            nb.release()
    else:
        add(a, _negated_view(b), c)


def _mult_add(c: BigInt, offset: int, x: int) -> None:
    """c += x << (64 * offset), stopping once nothing is left to carry."""
    limbs = c.limbs
    carry = 0
    for i in range(offset, c.size):
        carry += limbs[i] + (x & LIMB_MASK)
        limbs[i] = carry & LIMB_MASK
        carry >>= LIMB_BITS
        x >>= LIMB_BITS
        if not x and not carry:
            return


def mult(a: BigInt, b: BigInt, c: BigInt) -> None:
    """c = a * b, long multiplication."""
    a._checked()
    b._checked()
    # product has at most msb(a) + msb(b) bits; min size = 1
    d = max2(div_roundup(msb(a) + msb(b), LIMB_BITS), 1)

    if c is a or c is b:
        out = BigInt(d, allocator=c.allocator)
    else:
        out = c
        out.resize(d)
        for i in range(d):
            out.limbs[i] = 0

    la, lb = a.limbs, b.limbs
    for i in range(a.size):
        ai = la[i]
        for j in range(b.size):
            _mult_add(out, i + j, ai * lb[j])

    # the bound overshoots by one limb, or by all of them for a zero operand
    top = out.size
    while top > 1 and not out.limbs[top - 1]:
        top -= 1
    out.resize(top)
    out.sign = a.sign != b.sign
    _normalize_zero(out)

    if out is not c:
        c.swap(out)
        out.release()
