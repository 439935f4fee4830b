"""
Fixed-Point Arithmetic for Vault Accounting

Every ratio in the vault (weights, fees, prices, divergences) is an integer
scaled by ``ONE = 10**18``. Functions here are pure and operate on plain
Python ints, but they emulate an unsigned 256-bit word: operands must lie in
``[0, MAX_UINT256]`` and any result outside that range raises a ``MathError``
subclass instead of silently growing or wrapping.

Design Principles:
- Pure Functions: no state, no logging, deterministic results.
- Round Down: ``mul_down``/``div_down`` truncate, so accounting never credits
  more than the pool holds.
- Loud Failure: overflow, underflow and division by zero are named errors so
  the surrounding transaction can revert.
"""

from decimal import Decimal, ROUND_DOWN, InvalidOperation
from typing import List, Sequence, Union

from managed_vault.core.errors import (
    AddOverflow,
    DivInternal,
    MulOverflow,
    OutOfBounds,
    SubUnderflow,
    ZeroDivision,
)

ONE = 10**18
MAX_UINT256 = 2**256 - 1
DECIMALS = 18

Numeric = Union[int, str, float, Decimal]


def _check(*values: int) -> None:
    for v in values:
        if not isinstance(v, int) or isinstance(v, bool):
            raise OutOfBounds(value=v)
        if v < 0 or v > MAX_UINT256:
            raise OutOfBounds(value=v)


def add(a: int, b: int) -> int:
    _check(a, b)
    c = a + b
    if c > MAX_UINT256:
        raise AddOverflow(a=a, b=b)
    return c


def sub(a: int, b: int) -> int:
    _check(a, b)
    if b > a:
        raise SubUnderflow(a=a, b=b)
    return a - b


def mul_int(a: int, b: int) -> int:
    """Plain integer product (no rescaling), range checked."""
    _check(a, b)
    c = a * b
    if c > MAX_UINT256:
        raise MulOverflow(a=a, b=b)
    return c


def mul_down(a: int, b: int) -> int:
    return mul_int(a, b) // ONE


def div_down(a: int, b: int) -> int:
    _check(a, b)
    if b == 0:
        raise ZeroDivision(a=a)
    if a == 0:
        return 0
    a_inflated = a * ONE
    if a_inflated > MAX_UINT256:
        raise DivInternal(a=a, b=b)
    return a_inflated // b


def to_fixed(value: Numeric) -> int:
    """
    Converts a human readable number into its 18-decimal integer form.

    Strings and Decimals are converted exactly; floats go through ``repr`` so
    ``0.01`` becomes ``10**16`` rather than the nearest binary fraction.
    Extra precision beyond 18 decimals is truncated.

    Raises:
        OutOfBounds: if the value is negative, not numeric, or too large.
    """
    if isinstance(value, bool):
        raise OutOfBounds(value=value)
    if isinstance(value, int):
        scaled = value * ONE
    else:
        try:
            dec = Decimal(repr(value)) if isinstance(value, float) else Decimal(str(value))
            scaled = int((dec * ONE).to_integral_value(rounding=ROUND_DOWN))
        except (InvalidOperation, ValueError) as e:
            raise OutOfBounds(value=value) from e
    _check(scaled)
    return scaled


def from_fixed(x: int) -> Decimal:
    return Decimal(x) / Decimal(ONE)


def weight_sum_is_one(weights: Sequence[int], tolerance: int = 1) -> bool:
    total = sum(weights)
    return abs(total - ONE) <= tolerance


def normalize(values: Sequence[int]) -> List[int]:
    """
    Scales a non-negative vector so it sums to exactly ``ONE``.

    Each component is rounded down and the last non-zero component absorbs the
    rounding dust, so the sum is exact.

    Raises:
        ZeroDivision: if every component is zero.
    """
    total = 0
    for v in values:
        total = add(total, v)
    if total == 0:
        raise ZeroDivision(a=0)
    out = [mul_int(v, ONE) // total for v in values]
    dust = ONE - sum(out)
    if dust:
        idx = max(i for i, v in enumerate(values) if v > 0)
        out[idx] += dust
    return out


def clamp_min_weight(weights: Sequence[int], min_weight: int) -> List[int]:
    """
    Lifts every weight below ``min_weight`` to the floor and takes the deficit
    proportionally from the weights above it. Input must sum to ``ONE``; the
    output does too.

    Iterates because shrinking the unclamped weights can push another one
    under the floor.
    """
    out = list(weights)
    n = len(out)
    if n == 0 or min_weight * n > ONE:
        return out
    clamped = [False] * n
    while True:
        newly = [i for i in range(n) if not clamped[i] and out[i] < min_weight]
        if not newly:
            break
        for i in newly:
            clamped[i] = True
        free = [i for i in range(n) if not clamped[i]]
        budget = ONE - min_weight * (n - len(free))
        free_total = sum(weights[i] for i in free)
        for i in range(n):
            if clamped[i]:
                out[i] = min_weight
        if not free or free_total == 0:
            break
        for i in free:
            out[i] = weights[i] * budget // free_total
        dust = budget - sum(out[i] for i in free)
        out[free[-1]] += dust
    return out
