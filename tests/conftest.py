# tests/conftest.py
from __future__ import annotations

import random

import pytest

from fibnum import runtime
from fibnum.bignum import BigInt


@pytest.fixture(autouse=True)
def _isolated_runtime(tmp_path, monkeypatch):
    """Fresh runtime settings and an empty workspace for every test."""
    monkeypatch.setenv("FIBNUM_HOME", str(tmp_path / "home"))
    runtime.reset()
    yield
    runtime.reset()


@pytest.fixture
def rng():
    return random.Random(0xF1B)


def random_value(rng: random.Random, max_bits: int = 320) -> int:
    """Signed random int; roughly one in eight is zero or a limb boundary."""
    pick = rng.randrange(8)
    if pick == 0:
        return 0
    if pick == 1:
        v = (1 << (64 * rng.randrange(1, 4))) - rng.randrange(0, 2)
    else:
        v = rng.getrandbits(rng.randrange(1, max_bits))
    return -v if rng.random() < 0.5 else v


def assert_canonical(bn: BigInt) -> None:
    assert 1 <= bn.size <= bn.capacity, f"size {bn.size} / capacity {bn.capacity}"
    if bn.size > 1:
        assert bn.limbs[bn.size - 1] != 0, f"untrimmed top limb in {bn!r}"
    if bn.is_zero():
        assert bn.sign is False, "zero must be stored with sign False"
