"""
Vault Lifecycle
---------------

Phase machine::

    UNINITIALIZED --initial_deposit--> ACTIVE
    ACTIVE --finalize (no notice period)--> FINALIZED
    ACTIVE --initiate_finalization--> FINALIZING --finalize (after notice)--> FINALIZED

``LEGAL_PHASES`` lists, per surface operation, the phases it may run in.
Every operation checks its caller's role first and its phase second.
"""
from typing import Dict, FrozenSet

from loguru import logger

from managed_vault.core.custom_types import VaultPhase
from managed_vault.core.errors import (
    FinalizationNotInitiated,
    NoticeTimeoutNotElapsed,
    VaultIsAlreadyInitialized,
    VaultIsFinalized,
    VaultIsFinalizing,
    VaultNotInitialized,
)
from managed_vault.vault.state import VaultState

U, A, FG, FD = VaultPhase.UNINITIALIZED, VaultPhase.ACTIVE, VaultPhase.FINALIZING, VaultPhase.FINALIZED
ALL_PHASES = frozenset(VaultPhase)

LEGAL_PHASES: Dict[str, FrozenSet[VaultPhase]] = {
    "initial_deposit": frozenset({U}),
    "deposit": frozenset({A}),
    "deposit_if_balance_unchanged": frozenset({A}),
    "deposit_risking_arbitrage": frozenset({A}),
    "deposit_risking_arbitrage_if_balance_unchanged": frozenset({A}),
    "withdraw": frozenset({A}),
    "withdraw_if_balance_unchanged": frozenset({A}),
    "update_weights_gradually": frozenset({A}),
    "cancel_weight_updates": frozenset({A}),
    "enable_trading_with_weights": frozenset({A}),
    "enable_trading_with_oracle_price": frozenset({A}),
    "enable_trading_risking_arbitrage": frozenset({A}),
    "disable_trading": frozenset({A, FG}),
    "set_swap_fee": frozenset({A}),
    "set_oracles_enabled": frozenset({U, A, FG}),
    "claim_manager_fees": frozenset({A, FG}),
    "initiate_finalization": frozenset({A}),
    "finalize": frozenset({A, FG}),
    "set_manager": ALL_PHASES,
    "sweep": ALL_PHASES,
    "transfer_ownership": ALL_PHASES,
    "cancel_ownership_transfer": ALL_PHASES,
    "accept_ownership": ALL_PHASES,
    "renounce_ownership": ALL_PHASES,
}

_PHASE_ERRORS = {
    U: VaultNotInitialized,
    FG: VaultIsFinalizing,
    FD: VaultIsFinalized,
}


class VaultLifecycle:
    def __init__(self, notice_period: int):
        self.notice_period = notice_period

    def require(self, state: VaultState, op: str) -> None:
        allowed = LEGAL_PHASES[op]
        if state.phase in allowed:
            return
        if op == "initial_deposit":
            raise VaultIsAlreadyInitialized()
        error = _PHASE_ERRORS.get(state.phase)
        if error is None:
            raise FinalizationNotInitiated()
        raise error()

    def activate(self, state: VaultState) -> None:
        state.phase = A
        logger.info("[Lifecycle] vault is active")

    def begin_finalization(self, state: VaultState, now: int) -> int:
        state.phase = FG
        state.notice_timeout_at = now + self.notice_period
        logger.info(f"[Lifecycle] finalization initiated, notice ends at {state.notice_timeout_at}")
        return state.notice_timeout_at

    def check_finalize(self, state: VaultState, now: int) -> None:
        """
        Without a notice period an active vault finalizes directly. With one,
        finalization must have been initiated and the notice must have run out.
        """
        self.require(state, "finalize")
        if state.phase == A:
            if self.notice_period > 0:
                raise FinalizationNotInitiated()
            return
        if now < state.notice_timeout_at:
            raise NoticeTimeoutNotElapsed(notice_timeout_at=state.notice_timeout_at)

    def complete(self, state: VaultState) -> None:
        state.phase = FD
        logger.info("[Lifecycle] vault finalized")
