"""
Gradual Weight Scheduling

A manager moves the pool from its current weights to a target vector over a
time window. Between the window's endpoints every weight moves linearly and
independently; components are not renormalized because the target was
validated to sum to one.

Guard rails applied when a window is installed:
- the window is long enough (``min_weight_change_duration``),
- no token's weight changes by more than ``max_weight_change_ratio`` per
  second of window (ratio of the larger to the smaller weight),
- no target weight is below the pool's minimum weight.
"""
from typing import List, Sequence

from loguru import logger

from managed_vault.core.custom_types import MAX_TIMESTAMP, TokenValue, WeightWindow
from managed_vault.core.errors import (
    SumOfWeightIsNotOne,
    WeightChangeDurationIsBelowMin,
    WeightChangeEndBeforeStart,
    WeightChangeEndTimeIsAboveMax,
    WeightChangeRatioIsAboveMax,
    WeightChangeStartTimeIsAboveMax,
    WeightIsBelowMin,
)
from managed_vault.core.mathutils import MAX_UINT256, div_down, mul_down, mul_int, weight_sum_is_one
from managed_vault.vault.state import VaultParams, VaultState, ordered_values


def interpolate(window: WeightWindow, now: int) -> List[int]:
    """Weights in force at ``now`` for the given window."""
    if now <= window.start_time:
        return list(window.start_weights)
    if now >= window.end_time:
        return list(window.end_weights)
    pct = div_down(now - window.start_time, window.end_time - window.start_time)
    out = []
    for w0, w1 in zip(window.start_weights, window.end_weights):
        if w1 >= w0:
            out.append(w0 + mul_down(w1 - w0, pct))
        else:
            out.append(w0 - mul_down(w0 - w1, pct))
    return out


class WeightScheduler:
    def __init__(self, params: VaultParams):
        self.params = params

    def current_weights(self, state: VaultState, now: int) -> List[int]:
        return interpolate(state.window, now)

    def check_weights(self, tokens: Sequence[str], weights: Sequence[TokenValue]) -> List[int]:
        """Order, sum and floor checks for a fixed weight vector."""
        values = ordered_values(tokens, weights)
        if not weight_sum_is_one(values, self.params.weight_sum_tolerance):
            raise SumOfWeightIsNotOne(total=sum(values))
        self._check_min_weight(tokens, values)
        return values

    def _check_min_weight(self, tokens: Sequence[str], values: Sequence[int]) -> None:
        for token, w in zip(tokens, values):
            if w < self.params.min_weight:
                raise WeightIsBelowMin(token=token, weight=w, min=self.params.min_weight)

    def begin_update(
        self,
        state: VaultState,
        targets: Sequence[TokenValue],
        start_time: int,
        end_time: int,
        now: int,
    ) -> WeightWindow:
        """
        Validates and installs a new gradual weight window, replacing any in
        flight. The window starts from the weights in force at ``now`` and
        never before ``now``.

        Returns:
            The installed window.
        """
        tokens = state.tokens
        values = ordered_values(tokens, targets)
        if not weight_sum_is_one(values, self.params.weight_sum_tolerance):
            raise SumOfWeightIsNotOne(total=sum(values))
        if start_time > MAX_TIMESTAMP:
            raise WeightChangeStartTimeIsAboveMax(start_time=start_time, max=MAX_TIMESTAMP)
        if end_time > MAX_TIMESTAMP:
            raise WeightChangeEndTimeIsAboveMax(end_time=end_time, max=MAX_TIMESTAMP)

        effective_start = max(now, start_time)
        if end_time <= start_time or end_time < effective_start:
            raise WeightChangeEndBeforeStart(start_time=effective_start, end_time=end_time)
        duration = end_time - effective_start
        if duration < self.params.min_weight_change_duration:
            raise WeightChangeDurationIsBelowMin(duration=duration, min=self.params.min_weight_change_duration)

        start_weights = self.current_weights(state, now)
        max_ratio = mul_int(self.params.max_weight_change_ratio, duration)
        for token, w0, w1 in zip(tokens, start_weights, values):
            lo, hi = min(w0, w1), max(w0, w1)
            ratio = div_down(hi, lo) if lo > 0 else MAX_UINT256
            if ratio > max_ratio:
                raise WeightChangeRatioIsAboveMax(token=token, actual=ratio, max=max_ratio)
        self._check_min_weight(tokens, values)

        state.window = WeightWindow(
            start_weights=start_weights,
            end_weights=values,
            start_time=effective_start,
            end_time=end_time,
        )
        logger.info(f"[Weights] gradual update {start_weights} -> {values} over [{effective_start}, {end_time}]")
        return state.window

    def cancel(self, state: VaultState, now: int) -> List[int]:
        """Freezes the window at the weights in force at ``now``."""
        weights = self.current_weights(state, now)
        state.window = WeightWindow.static(weights, now)
        logger.info(f"[Weights] update cancelled at {now}, frozen at {weights}")
        return weights

    def set_static(self, state: VaultState, weights: Sequence[int], now: int) -> None:
        state.window = WeightWindow.static(list(weights), now)
