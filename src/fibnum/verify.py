# -----------------------------------------------------------------------------
#  verify.py
#  Cross-check the fast-doubling engine against reference libraries
# -----------------------------------------------------------------------------

from __future__ import annotations

from dataclasses import dataclass

import gmpy2
from sympy import fibonacci as sympy_fibonacci

from fibnum.fib import fibonacci
from fibnum.render import to_string


@dataclass
class VerifyResult:
    n: int
    value: str            # rendered by fibnum
    ok_gmpy2: bool
    ok_sympy: bool

    @property
    def ok(self) -> bool:
        return self.ok_gmpy2 and self.ok_sympy


def reference_fibonacci(n: int) -> int:
    """F(n) from gmpy2."""
    return int(gmpy2.fib(n))


def check(n: int) -> VerifyResult:
    """Compute F(n) with fibnum and compare both the value and its decimal form."""
    bn = fibonacci(n)
    try:
        value = int(bn)
        text = to_string(bn)
    finally:
        bn.release()

    ref = gmpy2.fib(n)
    # mpz.digits() is not bound by the int max str digits limit
    ok_g = value == int(ref) and text == ref.digits(10)
    ok_s = value == int(sympy_fibonacci(n))
    return VerifyResult(n=n, value=text, ok_gmpy2=ok_g, ok_sympy=ok_s)
