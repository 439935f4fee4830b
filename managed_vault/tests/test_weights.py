"""
Tests for gradual weight updates: validation, interpolation, cancellation.
"""
import pytest

from managed_vault.core.custom_types import MAX_TIMESTAMP, TokenValue, WeightWindow
from managed_vault.core.errors import (
    CallerIsNotManager,
    DifferentTokensInPosition,
    SumOfWeightIsNotOne,
    ValueLengthIsNotSame,
    WeightChangeDurationIsBelowMin,
    WeightChangeEndBeforeStart,
    WeightChangeEndTimeIsAboveMax,
    WeightChangeRatioIsAboveMax,
    WeightChangeStartTimeIsAboveMax,
    WeightIsBelowMin,
)
from managed_vault.core.mathutils import ONE, to_fixed
from managed_vault.tests.helpers import HALF, MANAGER, OWNER, T0, TOKEN_A, TOKEN_B, tv
from managed_vault.vault.weights import interpolate

DAY = 86400
TARGET = tv([to_fixed("0.7"), to_fixed("0.3")])


def test_interpolation_endpoints_are_exact():
    window = WeightWindow(start_weights=[HALF, HALF], end_weights=[to_fixed("0.7"), to_fixed("0.3")],
                          start_time=100, end_time=100 + DAY)
    assert interpolate(window, 0) == [HALF, HALF]
    assert interpolate(window, 100) == [HALF, HALF]
    assert interpolate(window, 100 + DAY) == [to_fixed("0.7"), to_fixed("0.3")]
    assert interpolate(window, 10**9) == [to_fixed("0.7"), to_fixed("0.3")]


def test_interpolated_weights_sum_to_one_within_rounding():
    window = WeightWindow(start_weights=[to_fixed("0.2"), to_fixed("0.3"), to_fixed("0.5")],
                          end_weights=[to_fixed("0.45"), to_fixed("0.1"), to_fixed("0.45")],
                          start_time=0, end_time=7 * 3600 + 13)
    for t in range(0, window.end_time + 1, 997):
        assert abs(sum(interpolate(window, t)) - ONE) <= 3


def test_update_moves_weights_halfway(vault, clock):
    vault.update_weights_gradually(MANAGER, TARGET, T0, T0 + DAY)
    clock.advance(DAY // 2)
    w0, w1 = vault.normalized_weights()
    assert w0 == to_fixed("0.6")
    assert w1 == to_fixed("0.4")
    clock.advance(DAY)
    assert vault.normalized_weights() == [to_fixed("0.7"), to_fixed("0.3")]


def test_spot_price_follows_weights_mid_update(vault, clock):
    vault.update_weights_gradually(MANAGER, TARGET, T0, T0 + DAY)
    clock.advance(DAY // 2)
    # 100 A and 100 B at 0.6 / 0.4
    assert vault.spot_price(TOKEN_A, TOKEN_B) == 666666666666666666
    assert [p.value for p in vault.spot_prices(TOKEN_B)] == [15 * ONE // 10, ONE]
    # quoting does not sync the pool
    assert vault.pool.normalized_weights() == [HALF, HALF]


def test_start_in_the_past_is_clamped_to_now(vault, clock):
    clock.advance(1000)
    window = vault.update_weights_gradually(MANAGER, TARGET, T0, T0 + 1000 + DAY)
    assert window.start_time == T0 + 1000
    assert window.start_weights == [HALF, HALF]


def test_only_manager_can_update(vault):
    with pytest.raises(CallerIsNotManager):
        vault.update_weights_gradually(OWNER, TARGET, T0, T0 + DAY)


def test_target_vector_validation(vault):
    with pytest.raises(ValueLengthIsNotSame):
        vault.update_weights_gradually(MANAGER, [TokenValue(TOKEN_A, ONE)], T0, T0 + DAY)
    with pytest.raises(DifferentTokensInPosition):
        vault.update_weights_gradually(MANAGER, [TokenValue(TOKEN_B, HALF), TokenValue(TOKEN_A, HALF)], T0, T0 + DAY)
    with pytest.raises(SumOfWeightIsNotOne):
        vault.update_weights_gradually(MANAGER, tv([HALF, HALF + 10]), T0, T0 + DAY)


def test_time_bounds(vault):
    with pytest.raises(WeightChangeStartTimeIsAboveMax):
        vault.update_weights_gradually(MANAGER, TARGET, MAX_TIMESTAMP + 1, MAX_TIMESTAMP + DAY)
    with pytest.raises(WeightChangeEndTimeIsAboveMax):
        vault.update_weights_gradually(MANAGER, TARGET, T0, MAX_TIMESTAMP + 1)
    with pytest.raises(WeightChangeEndBeforeStart):
        vault.update_weights_gradually(MANAGER, TARGET, T0 + DAY, T0 + DAY)
    with pytest.raises(WeightChangeEndBeforeStart):
        vault.update_weights_gradually(MANAGER, TARGET, T0 - 2 * DAY, T0 - DAY)


def test_duration_must_cover_minimum_from_now(vault, clock):
    with pytest.raises(WeightChangeDurationIsBelowMin):
        vault.update_weights_gradually(MANAGER, TARGET, T0, T0 + 4 * 3600 - 1)
    # nominal window long enough, but most of it already elapsed
    clock.advance(DAY - 3600)
    with pytest.raises(WeightChangeDurationIsBelowMin):
        vault.update_weights_gradually(MANAGER, TARGET, T0, T0 + DAY)


def test_change_ratio_limit(vault):
    # 0.5 -> 0.01 is a 50x change; 4h allows 0.01 * 14400 = 144x
    target = tv([to_fixed("0.99"), to_fixed("0.01")])
    vault.update_weights_gradually(MANAGER, target, T0, T0 + 4 * 3600)


def test_change_ratio_above_max(make_vault, settings):
    settings.weights.max_weight_change_ratio = to_fixed("0.0001")
    v = make_vault()
    v.initial_deposit(OWNER, tv([100 * ONE, 100 * ONE]), tv([HALF, HALF]))
    # 4h window allows 1.44x: 0.5 -> 0.7 (1.4x) passes, 0.5 -> 0.3 (1.67x) does not
    with pytest.raises(WeightChangeRatioIsAboveMax) as exc:
        v.update_weights_gradually(MANAGER, TARGET, T0, T0 + 4 * 3600)
    assert exc.value.params["token"] == TOKEN_B


def test_target_below_min_weight(vault):
    with pytest.raises(WeightIsBelowMin):
        vault.update_weights_gradually(MANAGER, tv([ONE - 10**15, 10**15]), T0, T0 + DAY)


def test_cancel_freezes_weights(vault, clock):
    vault.update_weights_gradually(MANAGER, TARGET, T0, T0 + DAY)
    clock.advance(DAY // 4)
    frozen = vault.cancel_weight_updates(MANAGER)
    assert frozen == [to_fixed("0.55"), to_fixed("0.45")]
    for dt in (0, 1, DAY, 10 * DAY):
        clock.advance(dt)
        assert vault.normalized_weights() == frozen
    assert vault.pool.normalized_weights() == frozen


def test_new_window_replaces_in_flight_one(vault, clock):
    vault.update_weights_gradually(MANAGER, TARGET, T0, T0 + DAY)
    clock.advance(DAY // 2)
    back = tv([to_fixed("0.4"), to_fixed("0.6")])
    window = vault.update_weights_gradually(MANAGER, back, T0 + DAY // 2, T0 + DAY // 2 + DAY)
    assert window.start_weights == [to_fixed("0.6"), to_fixed("0.4")]
    assert window.end_weights == [to_fixed("0.4"), to_fixed("0.6")]


def test_deposit_cancels_in_flight_window(vault, clock):
    vault.update_weights_gradually(MANAGER, TARGET, T0, T0 + DAY)
    clock.advance(DAY // 2)
    vault.deposit_risking_arbitrage(OWNER, tv([0, 0]))
    settled = vault.normalized_weights()
    clock.advance(DAY)
    assert vault.normalized_weights() == settled
    assert vault.state.window.is_static
