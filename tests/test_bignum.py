# tests/test_bignum.py
"""
Storage lifecycle and bit scanning of BigInt.

Run: pytest -v
"""

from __future__ import annotations

import operator

import pytest
from conftest import assert_canonical, random_value

from fibnum import runtime
from fibnum.arith import add
from fibnum.bignum import BigInt, allocate, copy, release, resize, swap
from fibnum.bitops import bit_length, clz, cmp_magnitude, lshift, lshift_into
from fibnum.storage import LimbAllocator
from fibnum.utility import AllocationFailure, InvalidHandle, UnsupportedShift

# ---------- storage manager ---------------------------------------------------


@pytest.mark.parametrize("size,capacity", [(1, 4), (3, 4), (4, 4), (9, 9)])
def test_allocate_is_zero_with_capacity_floor(size, capacity):
    bn = allocate(size)
    assert bn.size == size
    assert bn.capacity == capacity
    assert int(bn) == 0
    assert bn.sign is False
    assert all(w == 0 for w in bn.limbs)


def test_allocate_rejects_empty():
    with pytest.raises(ValueError):
        BigInt(0)


def test_resize_grows_in_chunks_and_zero_fills():
    bn = BigInt.from_int(7)
    resize(bn, 5)
    assert bn.size == 5
    assert bn.capacity == 8
    assert bn.digits() == [7, 0, 0, 0, 0]


def test_resize_same_size_is_noop():
    bn = BigInt.from_int(2**70)
    buf = bn.limbs
    resize(bn, bn.size)
    assert bn.limbs is buf
    assert int(bn) == 2**70


def test_shrink_is_lossy_and_regrow_does_not_resurrect():
    bn = BigInt.from_int(2**130 - 1)
    assert bn.size == 3
    bn.resize(1)
    assert int(bn) == 2**64 - 1
    bn.resize(3)
    assert int(bn) == 2**64 - 1, "stale limbs must be cleared on regrow"


def test_resize_to_zero_releases():
    bn = BigInt.from_int(5)
    bn.resize(0)
    assert bn.released
    with pytest.raises(InvalidHandle):
        bn.release()


def test_release_twice_and_null_are_reported():
    bn = allocate(1)
    release(bn)
    with pytest.raises(InvalidHandle):
        release(bn)
    with pytest.raises(InvalidHandle):
        release(None)
    with pytest.raises(InvalidHandle):
        int(bn)
    with pytest.raises(InvalidHandle):
        add(bn, BigInt.from_int(1), BigInt(1))


def test_copy_keeps_dest_capacity_and_takes_sign():
    dest = allocate(8)
    src = BigInt.from_int(-12345)
    copy(dest, src)
    assert int(dest) == -12345
    assert dest.size == 1
    assert dest.capacity == 8
    # the copy is independent of src
    src.limbs[0] = 1
    assert int(dest) == -12345


def test_swap_exchanges_everything_but_identity():
    a = BigInt.from_int(-(2**100))
    b = BigInt.from_int(3)
    ida, idb = id(a), id(b)
    buf_a, buf_b = a.limbs, b.limbs
    swap(a, b)
    assert (id(a), id(b)) == (ida, idb)
    assert a.limbs is buf_b and b.limbs is buf_a
    assert int(a) == 3 and int(b) == -(2**100)


def test_clone_is_deep():
    a = BigInt.from_int(2**65 + 1)
    b = a.clone()
    a.set_small(0)
    assert int(b) == 2**65 + 1


# ---------- allocation failures -----------------------------------------------


def test_allocate_beyond_limit_fails():
    alloc = LimbAllocator(max_limbs=4)
    with pytest.raises(AllocationFailure):
        BigInt(5, allocator=alloc)


def test_failed_grow_leaves_bookkeeping_untouched():
    alloc = LimbAllocator(max_limbs=4)
    bn = BigInt.from_int(2**64 + 9, allocator=alloc)
    before = (bn.size, bn.capacity, bn.digits(), bn.limbs)
    with pytest.raises(AllocationFailure):
        bn.resize(5)
    assert (bn.size, bn.capacity, bn.digits(), bn.limbs) == before
    # still usable
    bn.resize(4)
    assert int(bn) == 2**64 + 9


def test_limit_that_is_not_a_chunk_multiple():
    # chunk 4 would round 9 up to 12, past the limit of 10
    alloc = LimbAllocator(max_limbs=10)
    assert BigInt(10, allocator=alloc).capacity == 10
    bn = BigInt(1, allocator=alloc)
    bn.resize(9)
    assert (bn.size, bn.capacity) == (9, 10)
    bn.resize(10)
    assert bn.capacity == 10
    with pytest.raises(AllocationFailure):
        bn.resize(11)
    assert bn.size == 10


def test_init_size_is_clamped_to_limit():
    alloc = LimbAllocator(init_size=8, max_limbs=3)
    assert BigInt(1, allocator=alloc).capacity == 3


def test_allocation_failure_is_a_memory_error():
    assert issubclass(AllocationFailure, MemoryError)


def test_allocator_follows_runtime_settings():
    runtime.APPLY({"ALLOC": {"INIT_SIZE": 2, "CHUNK_SIZE": 8, "MAX_LIMBS": 16}})
    bn = BigInt(1)
    assert bn.capacity == 2
    bn.resize(3)
    assert bn.capacity == 8
    with pytest.raises(AllocationFailure):
        bn.resize(17)


# ---------- comparator / bit scanner ------------------------------------------


@pytest.mark.parametrize("value,bits", [
    (0, 0),
    (1, 1),
    (2**63, 64),
    (2**64 - 1, 64),
    (2**64, 65),
    (-(2**200), 201),
])
def test_bit_length(value, bits):
    bn = BigInt.from_int(value)
    assert bit_length(bn) == bits
    assert clz(bn) == bn.size * 64 - bits


def test_clz_of_wide_zero_is_defined():
    bn = allocate(3)
    assert clz(bn) == 192
    assert bit_length(bn) == 0


def test_cmp_magnitude_ignores_sign():
    assert cmp_magnitude(BigInt.from_int(-5), BigInt.from_int(3)) == 1
    assert cmp_magnitude(BigInt.from_int(3), BigInt.from_int(-5)) == -1
    assert cmp_magnitude(BigInt.from_int(-7), BigInt.from_int(7)) == 0
    assert cmp_magnitude(BigInt.from_int(2**64), BigInt.from_int(2**64 - 1)) == 1


def test_cmp_magnitude_is_a_total_order(rng):
    values = [abs(random_value(rng)) for _ in range(40)]
    bns = [BigInt.from_int(v) for v in values]
    for x, bx in zip(values, bns):
        for y, by in zip(values, bns):
            expected = (x > y) - (x < y)
            assert cmp_magnitude(bx, by) == expected, f"{x} vs {y}"


# ---------- shifts ------------------------------------------------------------


@pytest.mark.parametrize("value,shift", [
    (0, 1),
    (1, 63),
    (2**63, 1),
    (2**64 - 1, 1),
    (0xDEADBEEF << 100, 17),
    (-(2**130 + 5), 3),
    (12345, 0),
])
def test_lshift_in_place(value, shift):
    bn = BigInt.from_int(value)
    lshift(bn, shift)
    assert int(bn) == value << shift
    assert_canonical(bn)


def test_lshift_into_leaves_source_alone():
    src = BigInt.from_int(2**127 + 3)
    dest = BigInt.from_int(99)
    lshift_into(src, 1, dest)
    assert int(dest) == (2**127 + 3) << 1
    assert int(src) == 2**127 + 3
    assert src.size == 2
    assert_canonical(dest)


def test_lshift_into_shrinks_larger_dest():
    dest = BigInt.from_int(2**500)
    lshift_into(BigInt.from_int(5), 2, dest)
    assert int(dest) == 20
    assert dest.size == 1


@pytest.mark.parametrize("shift", [64, 65, 128, -1])
def test_unsupported_shift_is_rejected(shift):
    bn = BigInt.from_int(3)
    with pytest.raises(UnsupportedShift):
        lshift(bn, shift)
    assert int(bn) == 3


def test_shift_by_one_equals_doubling(rng):
    for _ in range(50):
        x = abs(random_value(rng))
        a = BigInt.from_int(x)
        b = BigInt.from_int(x)
        lshift(a, 1)
        add(b, b, b)
        assert int(a) == int(b) == 2 * x
        assert a.size == b.size


def test_bigint_is_not_an_index():
    bn = BigInt.from_int(3)
    assert int(bn) == 3
    with pytest.raises(TypeError):
        operator.index(bn)
    with pytest.raises(TypeError):
        range(bn)
