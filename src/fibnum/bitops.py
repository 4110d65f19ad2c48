# -----------------------------------------------------------------------------
#  bitops.py
#  Magnitude comparison, bit scanning and left shift
# -----------------------------------------------------------------------------

from __future__ import annotations

from fibnum.bignum import BigInt
from fibnum.utility import LIMB_BITS, LIMB_MASK, UnsupportedShift, clz64


def clz(src: BigInt) -> int:
    """
    Count leading zero bits, starting at the top significant limb.
    An all-zero value gives size * 64.
    """
    limbs = src._checked()
    cnt = 0
    for i in range(src.size - 1, -1, -1):
        if limbs[i]:
            return cnt + clz64(limbs[i])
        cnt += LIMB_BITS
    return cnt


def msb(src: BigInt) -> int:
    """Bit length of the magnitude; 0 for zero."""
    return src.size * LIMB_BITS - clz(src)


bit_length = msb


def cmp_magnitude(a: BigInt, b: BigInt) -> int:
    """
    Compare |a| with |b|: 1, 0 or -1.

    More significant limbs wins outright, so both operands must be trimmed.
    """
    la, lb = a._checked(), b._checked()
    if a.size > b.size:
        return 1
    if a.size < b.size:
        return -1
    for i in range(a.size - 1, -1, -1):
        if la[i] > lb[i]:
            return 1
        if la[i] < lb[i]:
            return -1
    return 0


def _check_shift(shift: int) -> int:
    if not 0 <= shift < LIMB_BITS:
        raise UnsupportedShift(f"shift must be in [0, {LIMB_BITS}), got {shift}")
    return shift


def lshift(src: BigInt, shift: int) -> None:
    """src <<= shift, in place, for 0 <= shift < 64."""
    lshift_into(src, shift, src)


def lshift_into(src: BigInt, shift: int, dest: BigInt) -> None:
    """
    dest = src << shift, for 0 <= shift < 64; src is left untouched unless it
    is dest.

    Limbs are written from the top down and each write only reads limbs at or
    below its own index, so dest may be src.
    """
    _check_shift(shift)
    src._checked()
    if not shift:
        dest.copy_from(src)
        return

    n = src.size
    grow = shift > clz(src)
    dest.resize(n + grow)
    dest.sign = src.sign

    # re-read after the resize: dest may be src with a new buffer
    s, d = src.limbs, dest.limbs
    back = LIMB_BITS - shift
    if grow:
        d[n] = s[n - 1] >> back
    for i in range(n - 1, 0, -1):
        d[i] = ((s[i] << shift) & LIMB_MASK) | (s[i - 1] >> back)
    d[0] = (s[0] << shift) & LIMB_MASK
