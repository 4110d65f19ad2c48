# -----------------------------------------------------------------------------
#  render.py
#  Binary to decimal conversion (double dabble)
# -----------------------------------------------------------------------------

from __future__ import annotations

from fibnum.bignum import BigInt
from fibnum.utility import LIMB_BITS


def to_string(src: BigInt) -> str:
    """
    Decimal string of src.

    Walks every bit from the top limb down, doubling a decimal digit buffer
    and adding the bit in. The buffer holds bits/3 + 2 + sign characters,
    which always fits since log10(2) < 1/3.
    """
    limbs = src._checked()
    # log10(x) = log2(x) / log2(10) ~= log2(x) / 3.322
    length = (LIMB_BITS * src.size) // 3 + 2 + src.sign
    width = length - 1
    digits = [0] * width
    top = width  # index of the most significant non-zero digit

    # src.limbs[0] contains the least significant bits
    for i in range(src.size - 1, -1, -1):
        word = limbs[i]
        for bit in range(LIMB_BITS - 1, -1, -1):
            carry = (word >> bit) & 1
            for j in range(width - 1, top - 1, -1):
                v = digits[j] * 2 + carry
                if v >= 10:
                    digits[j] = v - 10
                    carry = 1
                else:
                    digits[j] = v
                    carry = 0
            if carry:
                top -= 1
                digits[top] = 1

    # skip leading zeros, keep one digit
    if top == width:
        top = width - 1
    s = "".join(map(str, digits[top:]))
    return "-" + s if src.sign else s


def render_bytes(src: BigInt) -> bytes:
    """ASCII decimal digits followed by a NUL terminator."""
    return to_string(src).encode("ascii") + b"\0"
