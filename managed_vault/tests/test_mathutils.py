"""
Tests for the fixed-point arithmetic helpers.
"""
from decimal import Decimal

import pytest

from managed_vault.core.errors import (
    AddOverflow,
    DivInternal,
    MathError,
    MulOverflow,
    OutOfBounds,
    SubUnderflow,
    ZeroDivision,
)
from managed_vault.core.mathutils import (
    MAX_UINT256,
    ONE,
    add,
    clamp_min_weight,
    div_down,
    from_fixed,
    mul_down,
    normalize,
    sub,
    to_fixed,
    weight_sum_is_one,
)


def test_mul_and_div_round_down():
    third = div_down(ONE, 3 * ONE)
    assert third == 333333333333333333
    assert mul_down(third, 3 * ONE) == 999999999999999999
    assert mul_down(1, 1) == 0


def test_overflow_and_underflow_are_errors():
    with pytest.raises(AddOverflow):
        add(MAX_UINT256, 1)
    with pytest.raises(SubUnderflow):
        sub(1, 2)
    with pytest.raises(MulOverflow):
        mul_down(MAX_UINT256, 2)
    with pytest.raises(DivInternal):
        div_down(MAX_UINT256, ONE)
    with pytest.raises(ZeroDivision):
        div_down(ONE, 0)


def test_operands_outside_uint256_are_rejected():
    with pytest.raises(OutOfBounds):
        add(-1, 1)
    with pytest.raises(OutOfBounds):
        mul_down(MAX_UINT256 + 1, 1)
    with pytest.raises(MathError):
        to_fixed("-0.5")


def test_to_fixed_is_exact_for_decimal_inputs():
    assert to_fixed("0.01") == 10**16
    assert to_fixed(0.01) == 10**16
    assert to_fixed(20) == 20 * ONE
    assert to_fixed(Decimal("1.5")) == 15 * 10**17
    assert from_fixed(15 * 10**17) == Decimal("1.5")
    with pytest.raises(OutOfBounds):
        to_fixed("abc")


def test_normalize_sums_exactly_to_one():
    weights = normalize([1, 1, 1])
    assert sum(weights) == ONE
    assert weights[0] == weights[1] == ONE // 3
    with pytest.raises(ZeroDivision):
        normalize([0, 0])


def test_weight_sum_tolerance():
    assert weight_sum_is_one([ONE // 2, ONE // 2])
    assert weight_sum_is_one([ONE // 3, ONE // 3, ONE // 3], tolerance=1)
    assert not weight_sum_is_one([ONE // 3, ONE // 3, ONE // 3], tolerance=0)


def test_clamp_min_weight_redistributes_deficit():
    floor = 10**16
    weights = clamp_min_weight([ONE - 10**15, 10**15], floor)
    assert weights[1] == floor
    assert sum(weights) == ONE

    # already above the floor: untouched
    assert clamp_min_weight([ONE // 2, ONE // 2], floor) == [ONE // 2, ONE // 2]
