# -----------------------------------------------------------------------------
#  bignum.py
#  Sign-magnitude big integer and its storage lifecycle
# -----------------------------------------------------------------------------

"""
BigInt keeps a growable buffer of 64-bit limbs, least significant first.

    limbs     array('Q'); len(limbs) is the capacity
    size      number of significant limbs (>= 1)
    sign      True for negative; zero is always stored with sign False

Every mutating operation keeps the object identity and may swap or replace
the buffer. release() drops the buffer; using the object afterwards raises
InvalidHandle.
"""

from __future__ import annotations

from array import array

from fibnum.storage import LimbAllocator, default_allocator
from fibnum.utility import LIMB_BITS, LIMB_MASK, InvalidHandle


class BigInt:
    __slots__ = ("_alloc", "limbs", "sign", "size")

    def __init__(self, size: int = 1, *, allocator: LimbAllocator | None = None):
        if size < 1:
            raise ValueError(f"initial size must be >= 1, got {size}")
        self._alloc = allocator or default_allocator()
        self.limbs: array | None = self._alloc.allocate(size)
        self.size = size
        self.sign = False

    # --- construction / conversion -------------------------------------------

    @classmethod
    def allocate(cls, size: int = 1, *, allocator: LimbAllocator | None = None) -> BigInt:
        """New BigInt of `size` limbs, value +0."""
        return cls(size, allocator=allocator)

    @classmethod
    def from_int(cls, value: int, *, allocator: LimbAllocator | None = None) -> BigInt:
        mag = -value if value < 0 else value
        words = []
        while mag:
            words.append(mag & LIMB_MASK)
            mag >>= LIMB_BITS
        bn = cls(max(1, len(words)), allocator=allocator)
        for i, w in enumerate(words):
            bn.limbs[i] = w
        bn.sign = value < 0
        return bn

    def __int__(self) -> int:
        limbs = self._checked()
        mag = 0
        for i in range(self.size - 1, -1, -1):
            mag = (mag << LIMB_BITS) | limbs[i]
        return -mag if self.sign else mag

    # --- state ----------------------------------------------------------------

    @property
    def capacity(self) -> int:
        return len(self._checked())

    @property
    def allocator(self) -> LimbAllocator:
        return self._alloc

    @property
    def released(self) -> bool:
        return self.limbs is None

    def _checked(self) -> array:
        if self.limbs is None:
            raise InvalidHandle("operation on a released BigInt")
        return self.limbs

    def is_zero(self) -> bool:
        limbs = self._checked()
        return self.size == 1 and limbs[0] == 0

    def digits(self) -> list[int]:
        """Significant limbs, least significant first."""
        return list(self._checked()[: self.size])

    # --- storage manager ------------------------------------------------------

    def resize(self, size: int) -> None:
        """
        Set the number of significant limbs.

        Growing zero-fills the new limbs and may reallocate to the next chunk
        multiple; shrinking silently drops the high limbs. size == 0 releases
        the BigInt. On AllocationFailure nothing changes.
        """
        limbs = self._checked()
        if size < 0:
            raise ValueError(f"negative size {size}")
        if size == self.size:
            return
        if size == 0:
            self.release()
            return
        if size > len(limbs):
            limbs = self._alloc.grow(limbs, size)
            self.limbs = limbs
        if size > self.size:
            # limbs past the old size may hold stale words from an earlier shrink
            for i in range(self.size, size):
                limbs[i] = 0
        self.size = size

    def copy_from(self, src: BigInt) -> None:
        """dest = src; dest keeps its own buffer."""
        src_limbs = src._checked()
        if src is self:
            return
        self.resize(src.size)
        self.limbs[: src.size] = src_limbs[: src.size]
        self.sign = src.sign

    def clone(self) -> BigInt:
        out = BigInt(self.size, allocator=self._alloc)
        out.copy_from(self)
        return out

    def swap(self, other: BigInt) -> None:
        """Exchange buffers, sizes, signs and allocators in O(1)."""
        self._checked()
        other._checked()
        self._alloc, other._alloc = other._alloc, self._alloc
        self.limbs, other.limbs = other.limbs, self.limbs
        self.size, other.size = other.size, self.size
        self.sign, other.sign = other.sign, self.sign

    def set_small(self, value: int) -> None:
        """Overwrite with a non-negative single-limb value."""
        self.resize(1)
        self.limbs[0] = value & LIMB_MASK
        self.sign = False

    def release(self) -> None:
        if self.limbs is None:
            raise InvalidHandle("BigInt already released")
        self.limbs = None
        self.size = 0
        self.sign = False

    # --- dunder conveniences --------------------------------------------------

    def __repr__(self) -> str:
        if self.limbs is None:
            return "BigInt(<released>)"
        return f"BigInt({int(self)}, size={self.size}, capacity={len(self.limbs)})"

    def __eq__(self, other):
        if isinstance(other, BigInt):
            return int(self) == int(other)
        if isinstance(other, int):
            return int(self) == other
        return NotImplemented

    __hash__ = None  # mutable


# Functional spellings of the storage manager

def allocate(size: int = 1, *, allocator: LimbAllocator | None = None) -> BigInt:
    return BigInt.allocate(size, allocator=allocator)


def resize(bn: BigInt, size: int) -> None:
    bn.resize(size)


def copy(dest: BigInt, src: BigInt) -> None:
    dest.copy_from(src)


def swap(a: BigInt, b: BigInt) -> None:
    a.swap(b)


def release(bn: BigInt | None) -> None:
    if bn is None:
        raise InvalidHandle("release of a null BigInt")
    bn.release()
