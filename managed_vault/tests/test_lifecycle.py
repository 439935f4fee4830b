"""
Tests for the vault phase machine and finalization.
"""
import pytest

from managed_vault.core.custom_types import VaultPhase
from managed_vault.core.errors import (
    CallerIsNotOwner,
    FinalizationNotInitiated,
    NoticeTimeoutNotElapsed,
    PhaseError,
    VaultIsAlreadyInitialized,
    VaultIsFinalized,
    VaultIsFinalizing,
    VaultNotInitialized,
)
from managed_vault.core.mathutils import ONE
from managed_vault.tests.helpers import HALF, MANAGER, OTHER_MANAGER, OWNER, STRANGER, TOKEN_B, tv
from managed_vault.vault.lifecycle import LEGAL_PHASES

NOTICE = 3600


@pytest.fixture
def noticed_vault(make_vault, settings):
    settings.lifecycle.notice_period = NOTICE
    v = make_vault()
    v.initial_deposit(OWNER, tv([100 * ONE, 100 * ONE]), tv([HALF, HALF]))
    return v


def test_every_phase_error_is_a_phase_error():
    for err in (VaultNotInitialized, VaultIsAlreadyInitialized, VaultIsFinalizing,
                VaultIsFinalized, FinalizationNotInitiated, NoticeTimeoutNotElapsed):
        assert issubclass(err, PhaseError)


def test_uninitialized_vault_rejects_active_operations(make_vault):
    v = make_vault()
    with pytest.raises(VaultNotInitialized):
        v.withdraw(OWNER, tv([ONE, 0]))
    with pytest.raises(VaultNotInitialized):
        v.finalize(OWNER)
    with pytest.raises(VaultNotInitialized):
        v.claim_manager_fees(MANAGER)
    # role and custody management work before initialization
    v.set_manager(OWNER, OTHER_MANAGER)
    v.set_oracles_enabled(OWNER, False)
    assert v.manager == OTHER_MANAGER


def test_initial_deposit_only_once(vault):
    with pytest.raises(VaultIsAlreadyInitialized):
        vault.initial_deposit(OWNER, tv([ONE, ONE]), tv([HALF, HALF]))


def test_role_is_checked_before_phase(make_vault):
    v = make_vault()
    with pytest.raises(CallerIsNotOwner):
        v.withdraw(MANAGER, tv([ONE, 0]))


def test_finalize_without_notice_returns_everything(vault, clock):
    vault.deposit_risking_arbitrage(OWNER, tv([0, 0]))
    returned = vault.finalize(OWNER)
    assert vault.phase == VaultPhase.FINALIZED
    assert vault.holdings() == [0, 0]
    assert not vault.is_swap_enabled()
    # whatever the manager was not paid went back to the owner
    paid = vault.ledger.balance_of(TOKEN_B, MANAGER)
    assert returned[1] + paid == 100 * ONE


def test_finalized_vault_rejects_everything_but_custody(vault):
    vault.finalize(OWNER)
    with pytest.raises(VaultIsFinalized):
        vault.deposit(OWNER, tv([ONE, 0]))
    with pytest.raises(VaultIsFinalized):
        vault.finalize(OWNER)
    with pytest.raises(VaultIsFinalized):
        vault.claim_manager_fees(MANAGER)
    with pytest.raises(VaultIsFinalized):
        vault.set_oracles_enabled(OWNER, True)
    vault.transfer_ownership(OWNER, STRANGER)


def test_notice_period_flow(noticed_vault, clock):
    with pytest.raises(FinalizationNotInitiated):
        noticed_vault.finalize(OWNER)

    clock.advance(100)
    timeout = noticed_vault.initiate_finalization(OWNER)
    assert timeout == clock.now() + NOTICE
    assert noticed_vault.phase == VaultPhase.FINALIZING
    assert not noticed_vault.is_swap_enabled()

    with pytest.raises(VaultIsFinalizing):
        noticed_vault.deposit(OWNER, tv([ONE, 0]))
    with pytest.raises(VaultIsFinalizing):
        noticed_vault.initiate_finalization(OWNER)

    clock.advance(NOTICE - 1)
    with pytest.raises(NoticeTimeoutNotElapsed) as exc:
        noticed_vault.finalize(OWNER)
    assert exc.value.params["notice_timeout_at"] == timeout

    clock.advance(1)
    noticed_vault.finalize(OWNER)
    assert noticed_vault.phase == VaultPhase.FINALIZED


def test_finalizing_vault_still_pays_fees(noticed_vault, clock):
    clock.advance(1000)
    noticed_vault.initiate_finalization(OWNER)
    clock.advance(10)
    claimed = noticed_vault.claim_manager_fees(MANAGER)
    assert all(c > 0 for c in claimed)
    noticed_vault.disable_trading(MANAGER)


def test_legal_phases_cover_every_phase_checked_operation():
    for op, phases in LEGAL_PHASES.items():
        assert phases, op
    assert VaultPhase.FINALIZED not in LEGAL_PHASES["finalize"]
    assert LEGAL_PHASES["initial_deposit"] == frozenset({VaultPhase.UNINITIALIZED})
