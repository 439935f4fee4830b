"""
Tests for oracle validation: staleness, invalid answers, spot divergence.
"""
import pytest

from managed_vault.collaborators import StaticPriceFeed
from managed_vault.core.custom_types import OracleConfig
from managed_vault.core.errors import (
    OracleIsDelayedBeyondMax,
    OraclePriceIsInvalid,
    OraclesAreDisabled,
    OracleSpotPriceDivergenceExceedsMax,
)
from managed_vault.core.mathutils import ONE, to_fixed
from managed_vault.tests.helpers import T0, TOKENS
from managed_vault.vault.oracle_guard import OracleGuard

MAX_DELAY = 5 * 3600
MAX_DIVERGENCE = to_fixed("0.1")


def make_guard(feed):
    return OracleGuard(TOKENS, 0, [None, OracleConfig(feed, MAX_DELAY, MAX_DIVERGENCE)])


def test_price_is_rescaled_to_18_decimals():
    guard = make_guard(StaticPriceFeed(250_000_000, T0, decimals=8))
    assert guard.validate(1, None, T0, True) == to_fixed("2.5")
    guard6 = make_guard(StaticPriceFeed(2_500_000, T0, decimals=6))
    assert guard6.validate(1, None, T0, True) == to_fixed("2.5")


def test_numeraire_is_always_one():
    guard = make_guard(StaticPriceFeed(0, 0))
    assert guard.validate(0, 123, T0 + 10**6, False) == ONE


def test_stale_feed_rejected_regardless_of_price():
    for answer in (100_000_000, 0, -5):
        guard = make_guard(StaticPriceFeed(answer, T0))
        with pytest.raises(OracleIsDelayedBeyondMax) as exc:
            guard.validate(1, ONE, T0 + MAX_DELAY + 1, True)
        assert exc.value.params["max_delay"] == MAX_DELAY
    # exactly at the bound is still fresh
    assert make_guard(StaticPriceFeed(100_000_000, T0)).validate(1, ONE, T0 + MAX_DELAY, True) == ONE


@pytest.mark.parametrize("answer", [0, -1])
def test_non_positive_answer_rejected(answer):
    guard = make_guard(StaticPriceFeed(answer, T0))
    with pytest.raises(OraclePriceIsInvalid):
        guard.validate(1, ONE, T0, True)


@pytest.mark.parametrize("spot", [to_fixed("0.85"), to_fixed("1.2")])
def test_divergence_rejected_in_both_directions(spot):
    guard = make_guard(StaticPriceFeed.from_price("1", T0))
    with pytest.raises(OracleSpotPriceDivergenceExceedsMax):
        guard.validate(1, spot, T0, True)


def test_divergence_within_bound_accepted():
    guard = make_guard(StaticPriceFeed.from_price("1", T0))
    assert guard.validate(1, to_fixed("0.95"), T0, True) == ONE
    assert guard.validate(1, to_fixed("1.05"), T0, True) == ONE


def test_zero_spot_price_always_diverges():
    guard = make_guard(StaticPriceFeed.from_price("1", T0))
    with pytest.raises(OracleSpotPriceDivergenceExceedsMax):
        guard.validate(1, 0, T0, True)


def test_disabled_oracles():
    guard = make_guard(StaticPriceFeed.from_price("1", T0))
    with pytest.raises(OraclesAreDisabled):
        guard.validate(1, ONE, T0, False)
    # the numeraire needs no feed, so it is priced even with oracles off
    assert guard.validate(0, ONE, T0, False) == ONE
    with pytest.raises(OraclesAreDisabled):
        guard.prices(None, T0, False)


def test_staleness_checked_before_price_validity():
    guard = make_guard(StaticPriceFeed(-1, T0))
    with pytest.raises(OracleIsDelayedBeyondMax):
        guard.validate(1, ONE, T0 + MAX_DELAY + 1, True)
