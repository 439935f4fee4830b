"""
Pytest Fixtures for the Managed Vault Test Suite

Shared fixtures build a two-token vault (token A is the numeraire, token B
has a price feed at 1.0) on a manual clock, so tests control time exactly.
"""
import pytest

from managed_vault.collaborators import FixedAllowanceValidator, InMemoryLedger, StaticPriceFeed
from managed_vault.core.config import VaultSettings
from managed_vault.core.mathutils import ONE
from managed_vault.core.timeutils import ManualClock
from managed_vault.tests.helpers import HALF, MANAGER, OWNER, T0, TOKENS, tv
from managed_vault.vault import create_vault


@pytest.fixture
def clock():
    return ManualClock(T0)


@pytest.fixture
def ledger():
    led = InMemoryLedger()
    for token in TOKENS:
        led.mint(token, OWNER, 10_000 * ONE)
    return led


@pytest.fixture
def feed_b():
    return StaticPriceFeed.from_price("1", T0)


@pytest.fixture
def validator():
    return FixedAllowanceValidator(len(TOKENS))


@pytest.fixture
def settings():
    return VaultSettings()


@pytest.fixture
def make_vault(clock, ledger, feed_b, validator, settings):
    """Factory; keyword arguments override ``create_vault`` parameters."""
    def _make(**overrides):
        kwargs = dict(
            tokens=TOKENS,
            weights=[HALF, HALF],
            oracles=[None, feed_b],
            numeraire_index=0,
            owner=OWNER,
            manager=MANAGER,
            validator=validator,
            description="test vault",
            settings=settings,
            ledger=ledger,
            clock=clock,
        )
        kwargs.update(overrides)
        return create_vault(**kwargs)
    return _make


@pytest.fixture
def vault(make_vault):
    """An active vault holding 100 A and 100 B at equal weights."""
    v = make_vault()
    v.initial_deposit(OWNER, tv([100 * ONE, 100 * ONE]), tv([HALF, HALF]))
    return v


@pytest.fixture
def recorded(vault):
    """Events committed by ``vault`` from now on."""
    events = []
    vault.subscribe(events.extend)
    return events
