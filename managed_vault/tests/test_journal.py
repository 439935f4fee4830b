"""
Tests for the SQLite event journal and snapshot replay.
"""
import pytest

from managed_vault.core import events as ev
from managed_vault.core.errors import AmountExceedAvailable
from managed_vault.core.mathutils import ONE, to_fixed
from managed_vault.persist.journal import EventJournal
from managed_vault.persist.migrations import MIGRATIONS, applied_versions, apply_migrations
from managed_vault.persist.replay import ReplayError, fold, rebuild_snapshot
from managed_vault.tests.helpers import HALF, MANAGER, OTHER_MANAGER, OWNER, STRANGER, T0, tv
from managed_vault.vault import Call

DAY = 86400


@pytest.fixture
def journal():
    j = EventJournal(":memory:", snapshot_every=0)
    yield j
    j.close()


def run_history(v, clock, feed_b):
    """Drives a vault through every kind of event."""
    v.initial_deposit(OWNER, tv([100 * ONE, 100 * ONE]), tv([HALF, HALF]))
    clock.advance(60)
    v.deposit(OWNER, tv([5 * ONE, 0]))
    clock.advance(60)
    v.set_swap_fee(MANAGER, to_fixed("0.002"))
    v.update_weights_gradually(MANAGER, tv([to_fixed("0.6"), to_fixed("0.4")]), T0 + 120, T0 + 120 + DAY)
    clock.advance(DAY // 3)
    v.cancel_weight_updates(MANAGER)
    v.disable_trading(MANAGER)
    v.enable_trading_with_weights(OWNER, tv([HALF, HALF]))
    v.disable_trading(OWNER)
    feed_b.update(100_000_000, clock.now())
    v.enable_trading_with_oracle_price(MANAGER)
    v.set_oracles_enabled(OWNER, False)
    v.multicall(OWNER, [
        Call("withdraw", (tv([ONE, ONE]),)),
        Call("set_manager", (OTHER_MANAGER,)),
        Call("transfer_ownership", (STRANGER,)),
    ])
    v.cancel_ownership_transfer(OWNER)
    v.ledger.mint("0x9000000000000000000000000000000000000009", v.address, 3)
    v.sweep(OWNER, "0x9000000000000000000000000000000000000009", 3)
    clock.advance(3600)
    v.claim_manager_fees(MANAGER)
    v.transfer_ownership(OWNER, STRANGER)
    v.accept_ownership(STRANGER)
    clock.advance(10)
    v.finalize(STRANGER)


def test_migrations_are_applied_once(journal):
    assert applied_versions(journal) == {version for version, _ in MIGRATIONS}
    apply_migrations(journal)
    assert len(journal.fetchall("SELECT version FROM migrations")) == len(MIGRATIONS)


def test_events_are_journaled_in_order(make_vault, journal, clock, feed_b):
    v = make_vault()
    journal.attach(v)
    run_history(v, clock, feed_b)

    events = journal.events()
    assert [e.seq for e in events] == list(range(1, len(events) + 1))
    assert journal.last_seq() == v.state.last_seq == len(events)
    types = {e.event_type for e in events}
    assert {"InitialDeposit", "Deposit", "Withdraw", "ManagerFeesCheckpointed", "DistributeManagerFees",
            "UpdateWeightsGradually", "CancelWeightUpdates", "SetSwapEnabled", "SetSwapFee",
            "UpdateWeightsWithOraclePrice", "SetOraclesEnabled", "ManagerChanged",
            "OwnershipTransferOffered", "OwnershipTransferCanceled", "OwnershipTransferred",
            "Sweep", "Finalized"} <= types
    assert isinstance(events[0], ev.InitialDepositEvent)


def test_replay_reproduces_live_snapshot(make_vault, journal, clock, feed_b):
    v = make_vault()
    journal.attach(v)
    run_history(v, clock, feed_b)
    assert rebuild_snapshot(journal) == v.snapshot()


def test_replay_from_periodic_snapshots(make_vault, clock, feed_b):
    j = EventJournal(":memory:", snapshot_every=4)
    v = make_vault()
    j.attach(v)
    run_history(v, clock, feed_b)
    stored = j.fetchall("SELECT last_seq FROM snapshots ORDER BY last_seq")
    assert len(stored) > 2
    assert rebuild_snapshot(j) == v.snapshot()
    j.close()


def test_replay_up_to_a_sequence(make_vault, journal, clock):
    v = make_vault()
    journal.attach(v)
    v.initial_deposit(OWNER, tv([100 * ONE, 100 * ONE]), tv([HALF, HALF]))
    midway = v.snapshot()
    clock.advance(60)
    v.deposit_risking_arbitrage(OWNER, tv([ONE, 0]))
    assert rebuild_snapshot(journal, upto_seq=midway.last_seq) == midway


def test_replay_tracks_fee_exits_as_holdings_changes(make_vault, journal, clock):
    v = make_vault()
    journal.attach(v)
    v.initial_deposit(OWNER, tv([100 * ONE, 100 * ONE]), tv([HALF, HALF]))
    clock.advance(3600)
    v.claim_manager_fees(MANAGER)
    snap = rebuild_snapshot(journal)
    assert snap.last_holdings_change_at == T0 + 3600
    assert snap == v.snapshot()


def test_failed_operations_are_not_journaled(vault, journal):
    journal.attach(vault)
    with pytest.raises(AmountExceedAvailable):
        vault.withdraw(OWNER, tv([1_000 * ONE, 0]))
    assert journal.events() == []


def test_gap_in_log_is_rejected(make_vault, journal, clock):
    v = make_vault()
    journal.attach(v)
    base = journal.latest_snapshot()
    v.initial_deposit(OWNER, tv([100 * ONE, 100 * ONE]), tv([HALF, HALF]))
    events = journal.events()
    with pytest.raises(ReplayError):
        fold(base, events[1:])


def test_meta_roundtrip(journal):
    assert journal.get_meta("description") is None
    journal.set_meta("description", "test vault")
    assert journal.get_meta("description") == "test vault"
