# -----------------------------------------------------------------------------
#  storage.py
#  Limb buffer allocator
# -----------------------------------------------------------------------------

from __future__ import annotations

from array import array
from dataclasses import dataclass

from fibnum.runtime import CFG
from fibnum.utility import AllocationFailure, max2, round_up

LIMB_TYPECODE = "Q"  # unsigned 64-bit

INIT_ALLOC_SIZE = 4
ALLOC_CHUNK_SIZE = 4


@dataclass(frozen=True)
class LimbAllocator:
    """
    Hands out zero-filled limb buffers.

    Every request either returns a buffer or raises AllocationFailure; callers
    touch their size/capacity bookkeeping only after a buffer came back.
    max_limbs=None means no limit beyond what the interpreter can provide.
    """
    init_size: int = INIT_ALLOC_SIZE
    chunk_size: int = ALLOC_CHUNK_SIZE
    max_limbs: int | None = None

    def __post_init__(self):
        if self.init_size < 1 or self.chunk_size < 1:
            raise ValueError("init_size and chunk_size must be >= 1")

    @classmethod
    def from_runtime(cls) -> LimbAllocator:
        cap = int(CFG("ALLOC.MAX_LIMBS", 0) or 0)
        return cls(
            init_size=int(CFG("ALLOC.INIT_SIZE", INIT_ALLOC_SIZE)),
            chunk_size=int(CFG("ALLOC.CHUNK_SIZE", ALLOC_CHUNK_SIZE)),
            max_limbs=cap or None,
        )

    def _check(self, count: int) -> None:
        if self.max_limbs is not None and count > self.max_limbs:
            raise AllocationFailure(f"cannot allocate {count} limbs (limit {self.max_limbs})")

    def _capacity(self, count: int, wanted: int) -> int:
        # only `count` is held to the limit; the padding is clamped to it
        self._check(count)
        if self.max_limbs is not None:
            return min(wanted, self.max_limbs)
        return wanted

    def allocate(self, count: int) -> array:
        """New buffer of max(count, init_size) zero limbs."""
        capacity = self._capacity(count, max2(count, self.init_size))
        try:
            return array(LIMB_TYPECODE, bytes(8 * capacity))
        except MemoryError:
            raise AllocationFailure(f"cannot allocate {capacity} limbs") from None

    def grow(self, buf: array, count: int) -> array:
        """
        Return a buffer holding at least `count` limbs, rounded up to the
        allocation chunk. The old content is kept, the new tail is zero.
        On failure `buf` is left as it was.
        """
        if count <= len(buf):
            return buf
        capacity = self._capacity(count, round_up(count, self.chunk_size))
        try:
            grown = array(LIMB_TYPECODE, buf)
            grown.frombytes(bytes(8 * (capacity - len(buf))))
        except MemoryError:
            raise AllocationFailure(f"cannot grow buffer to {capacity} limbs") from None
        return grown


def default_allocator() -> LimbAllocator:
    return LimbAllocator.from_runtime()
