"""
Managed Vault
-------------

The public surface of the vault. Every operation takes the calling address
first, checks the caller's role, checks the lifecycle phase, and then runs
inside a transaction:

- the clock is read once, by the outermost call;
- vault state, pool and ledger are snapshotted on entry and restored if
  anything raises, and the error propagates unchanged;
- events are buffered and only numbered and handed to subscribers once the
  outermost transaction commits.

Component logic lives in sibling modules (weights, fees, oracle guard,
lifecycle, rebalance, ownership, batch); this class wires them to the pool,
ledger and validator collaborators and emits the audit events.
"""
from __future__ import annotations
import copy
from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Optional, Sequence, Tuple

from loguru import logger

from managed_vault.core import events as ev
from managed_vault.core.config import VaultSettings
from managed_vault.core.custom_types import (
    Address,
    OracleConfig,
    PriceType,
    TokenValue,
    VaultPhase,
    WeightWindow,
)
from managed_vault.core.errors import (
    AmountIsZero,
    CannotSetSwapFeeBeforeCooldown,
    CannotSweepPoolToken,
    DescriptionIsEmpty,
    ManagementFeeIsAboveMax,
    MaxOracleDelayIsZero,
    MaxOracleSpotDivergenceIsZero,
    MinFeeDurationIsZero,
    MinReliableVaultValueIsZero,
    MinSignificantDepositValueIsZero,
    NumeraireAssetIndexExceedsTokenLength,
    NumeraireOracleIsNotZeroAddress,
    OracleIsZeroAddress,
    OracleLengthIsNotSame,
    PoolSwapIsAlreadyEnabled,
    SumOfWeightIsNotOne,
    SwapFeeIsAboveMax,
    SwapFeeIsBelowMin,
    SwapFeePercentageChangeIsAboveMax,
    UnsortedTokens,
    ValidatorIsNotMatched,
    ValueLengthIsNotSame,
)
from managed_vault.core.mathutils import weight_sum_is_one
from managed_vault.core.timeutils import Clock, SystemClock
from managed_vault.collaborators.ledger import InMemoryLedger
from managed_vault.collaborators.pool import WeightedPool
from managed_vault.vault import ownership
from managed_vault.vault.batch import Call, run_calls
from managed_vault.vault.fees import FeeAccrual
from managed_vault.vault.lifecycle import VaultLifecycle
from managed_vault.vault.oracle_guard import OracleGuard
from managed_vault.vault.rebalance import RebalanceEngine
from managed_vault.vault.state import (
    FeeState,
    VaultParams,
    VaultSnapshot,
    VaultState,
    ordered_values,
)
from managed_vault.vault.weights import WeightScheduler

Subscriber = Callable[[List[ev.VaultEvent]], None]


class ManagedVault:
    def __init__(
        self,
        params: VaultParams,
        pool,
        ledger,
        validator,
        clock: Clock,
        owner: Address,
        manager: Address,
        oracles_enabled: bool = True,
        address: Address = "vault",
    ):
        self.params = params
        self.pool = pool
        self.ledger = ledger
        self.validator = validator
        self.clock = clock
        self.address = address

        self.scheduler = WeightScheduler(params)
        self.fee_accrual = FeeAccrual(params.management_fee, params.min_fee_duration)
        self.guard = OracleGuard(params.tokens, params.numeraire_index, params.oracles)
        self.lifecycle = VaultLifecycle(params.notice_period)
        self.rebalance = RebalanceEngine(
            params.min_weight, params.min_reliable_vault_value, params.min_significant_deposit_value
        )

        created_at = clock.now()
        n = len(params.tokens)
        self.state = VaultState(
            tokens=list(params.tokens),
            owner=owner,
            manager=manager,
            window=WeightWindow.static(pool.normalized_weights(), created_at),
            fees=FeeState(created_at=created_at, last_checkpoint=created_at, manager_fee_total=[0] * n),
            oracles_enabled=oracles_enabled,
        )

        self._subscribers: List[Subscriber] = []
        self._tx_depth = 0
        self._now: Optional[int] = None
        self._pending: List[ev.VaultEvent] = []
        logger.info(f"[Vault] created '{params.description}' with tokens {params.tokens} at {created_at}")

    # --- Transactions & events ---

    def subscribe(self, callback: Subscriber) -> None:
        """``callback`` receives the list of events of each committed transaction."""
        self._subscribers.append(callback)

    @contextmanager
    def _transaction(self, op: str) -> Iterator[int]:
        if self._tx_depth > 0:
            self._tx_depth += 1
            try:
                yield self._now
            finally:
                self._tx_depth -= 1
            return

        now = self.clock.now()
        saved_state = copy.deepcopy(self.state)
        saved_pool = self.pool.snapshot()
        saved_ledger = self.ledger.snapshot()
        self._tx_depth, self._now, self._pending = 1, now, []
        try:
            yield now
        except Exception as e:
            self.state = saved_state
            self.pool.restore(saved_pool)
            self.ledger.restore(saved_ledger)
            self._pending = []
            logger.warning(f"[Vault] {op} reverted: {e}")
            raise
        finally:
            self._tx_depth = 0
            self._now = None
        self._commit()

    def _commit(self) -> None:
        committed, self._pending = self._pending, []
        for event in committed:
            self.state.last_seq += 1
            event.seq = self.state.last_seq
        if committed:
            for callback in self._subscribers:
                callback(committed)

    def _observe(self) -> Tuple[List[int], List[int]]:
        return self.pool.balances(), self.pool.normalized_weights()

    def _emit(self, event_cls, before: Tuple[List[int], List[int]], **fields: Any) -> None:
        holdings_after, weights_after = self._observe()
        self._pending.append(event_cls(
            timestamp=self._now,
            holdings_before=before[0],
            holdings_after=holdings_after,
            weights_before=before[1],
            weights_after=weights_after,
            **fields,
        ))

    # --- Internal helpers ---

    def _sync_weights(self, now: int) -> None:
        if self.state.phase != VaultPhase.UNINITIALIZED:
            self.pool.set_normalized_weights(self.scheduler.current_weights(self.state, now))

    def _install_weights(self, weights: Sequence[int], now: int) -> None:
        self.scheduler.set_static(self.state, weights, now)
        self.pool.set_normalized_weights(weights)

    def _checkpoint_fees(self, now: int, include_minimum: bool = False) -> List[int]:
        fees = self.state.fees
        before = self._observe()
        previous = fees.last_checkpoint
        amounts, index = self.fee_accrual.checkpoint(
            fees, before[0], now, self.state.manager, include_minimum=include_minimum
        )
        if any(amounts):
            self.pool.exit_pool(self.address, amounts)
            self.state.last_holdings_change_at = now
        if any(amounts) or fees.last_checkpoint != previous:
            self._emit(
                ev.ManagerFeesCheckpointedEvent, before,
                manager=self.state.manager, fees=amounts, fee_index=index,
            )
        return amounts

    def _pay_fees(self, manager: Address) -> List[int]:
        before = self._observe()
        amounts = self.fee_accrual.claim(self.state.fees, manager)
        for token, amount in zip(self.state.tokens, amounts):
            self.ledger.transfer(token, self.address, manager, amount)
        self._emit(ev.DistributeManagerFeesEvent, before, manager=manager, amounts=amounts)
        return amounts

    def _set_swap_enabled(self, enabled: bool, weights: Optional[List[int]] = None) -> None:
        before = self._observe()
        self.pool.set_public_swap(enabled)
        self._emit(ev.SetSwapEnabledEvent, before, enabled=enabled, weights=weights)

    def _balance_unchanged(self, expected_holdings: Optional[Sequence[int]], now: int) -> bool:
        if expected_holdings is not None:
            return list(expected_holdings) == self.pool.balances()
        return self.state.last_holdings_change_at != now

    def _spot_prices_in_numeraire(self) -> List[int]:
        num = self.params.numeraire_index
        return [self.pool.spot_price(num, i) for i in range(len(self.state.tokens))]

    # --- Deposits & withdrawals ---

    def initial_deposit(
        self,
        caller: Address,
        amounts: Sequence[TokenValue],
        weights: Optional[Sequence[TokenValue]] = None,
    ) -> None:
        """
        Seeds the pool and activates the vault. Without ``weights`` the
        initial weights are derived from validated oracle prices so the
        pool opens at the feed prices.
        """
        with self._transaction("initial_deposit") as now:
            ownership.require_owner(self.state, caller)
            self.lifecycle.require(self.state, "initial_deposit")
            tokens = self.state.tokens
            values = ordered_values(tokens, amounts)
            for token, amount in zip(tokens, values):
                if amount == 0:
                    raise AmountIsZero(token=token)
            if weights is None:
                prices = self.guard.prices(None, now, self.state.oracles_enabled)
                new_weights = self.rebalance.oracle_weights(values, prices, self.pool.normalized_weights())
            else:
                new_weights = self.scheduler.check_weights(tokens, weights)

            before = self._observe()
            self.pool.join_pool(self.state.owner, values)
            self._install_weights(new_weights, now)
            self.state.fees.last_checkpoint = now
            self.state.last_holdings_change_at = now
            self.lifecycle.activate(self.state)
            self._emit(ev.InitialDepositEvent, before, caller=caller, amounts=values, weights=new_weights)
            self._set_swap_enabled(True)
            logger.info(f"[Vault] initial deposit {values} with weights {new_weights}")

    def _deposit(self, caller: Address, amounts: Sequence[TokenValue], price_type: PriceType, op: str) -> None:
        with self._transaction(op) as now:
            ownership.require_owner(self.state, caller)
            self.lifecycle.require(self.state, op)
            values = ordered_values(self.state.tokens, amounts)
            self._sync_weights(now)
            prices = None
            if price_type is PriceType.ORACLE:
                prices = self.guard.prices(self._spot_prices_in_numeraire(), now, self.state.oracles_enabled)
            self._checkpoint_fees(now)

            before = self._observe()
            old_holdings, old_weights = before
            self.pool.join_pool(self.state.owner, values)
            new_weights, anchored = self.rebalance.deposit_weights(
                old_weights, old_holdings, self.pool.balances(), values, price_type, prices
            )
            self._install_weights(new_weights, now)
            self.state.last_holdings_change_at = now
            self._emit(ev.DepositEvent, before, caller=caller, amounts=values, price_type=price_type.value)
            logger.info(
                f"[Vault] {op} {values} -> weights {new_weights}"
                f"{' (oracle anchored)' if anchored else ''}"
            )

    def deposit(self, caller: Address, amounts: Sequence[TokenValue]) -> None:
        """Deposit priced by validated oracles."""
        self._deposit(caller, amounts, PriceType.ORACLE, "deposit")

    def deposit_risking_arbitrage(self, caller: Address, amounts: Sequence[TokenValue]) -> None:
        """Deposit at pool spot prices. No oracle validation."""
        self._deposit(caller, amounts, PriceType.SPOT, "deposit_risking_arbitrage")

    def _if_balance_unchanged(self, op: str, caller: Address, expected_holdings, run: Callable[[], None]) -> bool:
        with self._transaction(op) as now:
            ownership.require_owner(self.state, caller)
            self.lifecycle.require(self.state, op)
            if not self._balance_unchanged(expected_holdings, now):
                logger.warning(f"[Vault] {op} skipped: holdings changed")
                return False
            run()
            return True

    def deposit_if_balance_unchanged(
        self, caller: Address, amounts: Sequence[TokenValue], expected_holdings: Optional[Sequence[int]] = None
    ) -> bool:
        return self._if_balance_unchanged(
            "deposit_if_balance_unchanged", caller, expected_holdings, lambda: self.deposit(caller, amounts)
        )

    def deposit_risking_arbitrage_if_balance_unchanged(
        self, caller: Address, amounts: Sequence[TokenValue], expected_holdings: Optional[Sequence[int]] = None
    ) -> bool:
        return self._if_balance_unchanged(
            "deposit_risking_arbitrage_if_balance_unchanged",
            caller,
            expected_holdings,
            lambda: self.deposit_risking_arbitrage(caller, amounts),
        )

    def withdraw(self, caller: Address, amounts: Sequence[TokenValue]) -> None:
        with self._transaction("withdraw") as now:
            ownership.require_owner(self.state, caller)
            self.lifecycle.require(self.state, "withdraw")
            values = ordered_values(self.state.tokens, amounts)
            self._sync_weights(now)
            self._checkpoint_fees(now)

            before = self._observe()
            old_holdings, old_weights = before
            allowances = self.validator.allowance()
            self.rebalance.check_withdraw(self.state.tokens, values, old_holdings, allowances)
            self.pool.exit_pool(self.state.owner, values)
            new_weights = self.rebalance.pro_rata_weights(old_weights, old_holdings, self.pool.balances())
            self._install_weights(new_weights, now)
            self.state.last_holdings_change_at = now
            self._emit(
                ev.WithdrawEvent, before,
                caller=caller, requested=values, amounts=values, allowances=allowances,
            )
            logger.info(f"[Vault] withdraw {values} -> weights {new_weights}")

    def withdraw_if_balance_unchanged(
        self, caller: Address, amounts: Sequence[TokenValue], expected_holdings: Optional[Sequence[int]] = None
    ) -> bool:
        return self._if_balance_unchanged(
            "withdraw_if_balance_unchanged", caller, expected_holdings, lambda: self.withdraw(caller, amounts)
        )

    # --- Weights & trading ---

    def update_weights_gradually(
        self, caller: Address, target_weights: Sequence[TokenValue], start_time: int, end_time: int
    ) -> WeightWindow:
        with self._transaction("update_weights_gradually") as now:
            ownership.require_manager(self.state, caller)
            self.lifecycle.require(self.state, "update_weights_gradually")
            self._sync_weights(now)
            self._checkpoint_fees(now)
            before = self._observe()
            window = self.scheduler.begin_update(self.state, target_weights, start_time, end_time, now)
            self._emit(
                ev.UpdateWeightsGraduallyEvent, before,
                start_weights=window.start_weights,
                target_weights=window.end_weights,
                start_time=window.start_time,
                end_time=window.end_time,
            )
            return window

    def cancel_weight_updates(self, caller: Address) -> List[int]:
        with self._transaction("cancel_weight_updates") as now:
            ownership.require_manager(self.state, caller)
            self.lifecycle.require(self.state, "cancel_weight_updates")
            self._sync_weights(now)
            self._checkpoint_fees(now)
            before = self._observe()
            weights = self.scheduler.cancel(self.state, now)
            self.pool.set_normalized_weights(weights)
            self._emit(ev.CancelWeightUpdatesEvent, before, weights=weights)
            return weights

    def enable_trading_with_weights(self, caller: Address, weights: Sequence[TokenValue]) -> None:
        with self._transaction("enable_trading_with_weights") as now:
            ownership.require_owner(self.state, caller)
            self.lifecycle.require(self.state, "enable_trading_with_weights")
            if self.pool.is_swap_enabled():
                raise PoolSwapIsAlreadyEnabled()
            values = self.scheduler.check_weights(self.state.tokens, weights)
            self._sync_weights(now)
            before = self._observe()
            self._install_weights(values, now)
            self.pool.set_public_swap(True)
            self._emit(ev.SetSwapEnabledEvent, before, enabled=True, weights=values)
            logger.info(f"[Vault] trading enabled with weights {values}")

    def enable_trading_with_oracle_price(self, caller: Address) -> List[int]:
        """
        Re-anchors pool weights to validated oracle prices and enables
        swaps. The divergence check is skipped since moving the pool to the
        feed price is the point.
        """
        with self._transaction("enable_trading_with_oracle_price") as now:
            ownership.require_manager(self.state, caller)
            self.lifecycle.require(self.state, "enable_trading_with_oracle_price")
            prices = self.guard.prices(None, now, self.state.oracles_enabled)
            self._sync_weights(now)
            before = self._observe()
            weights = self.rebalance.oracle_weights(before[0], prices, before[1])
            self._install_weights(weights, now)
            self._emit(ev.UpdateWeightsWithOraclePriceEvent, before, weights=weights, prices=prices)
            self._set_swap_enabled(True)
            logger.info(f"[Vault] trading enabled at oracle prices {prices}, weights {weights}")
            return weights

    def enable_trading_risking_arbitrage(self, caller: Address) -> None:
        with self._transaction("enable_trading_risking_arbitrage") as now:
            ownership.require_owner(self.state, caller)
            self.lifecycle.require(self.state, "enable_trading_risking_arbitrage")
            self._sync_weights(now)
            self._set_swap_enabled(True)
            logger.info("[Vault] trading enabled at current weights (risking arbitrage)")

    def disable_trading(self, caller: Address) -> None:
        with self._transaction("disable_trading") as now:
            ownership.require_owner_or_manager(self.state, caller)
            self.lifecycle.require(self.state, "disable_trading")
            self._sync_weights(now)
            self._set_swap_enabled(False)
            logger.info(f"[Vault] trading disabled by {caller}")

    def set_swap_fee(self, caller: Address, new_swap_fee: int) -> None:
        with self._transaction("set_swap_fee") as now:
            ownership.require_manager(self.state, caller)
            self.lifecycle.require(self.state, "set_swap_fee")
            changed_at = self.state.swap_fee_changed_at
            if changed_at is not None and now < changed_at + self.params.swap_fee_cooldown:
                raise CannotSetSwapFeeBeforeCooldown(until=changed_at + self.params.swap_fee_cooldown)
            change = abs(new_swap_fee - self.pool.swap_fee())
            if change > self.params.max_swap_fee_change:
                raise SwapFeePercentageChangeIsAboveMax(actual=change, max=self.params.max_swap_fee_change)
            self._sync_weights(now)
            before = self._observe()
            self.pool.set_swap_fee(new_swap_fee)
            self.state.swap_fee_changed_at = now
            self._emit(ev.SetSwapFeeEvent, before, swap_fee=new_swap_fee)
            logger.info(f"[Vault] swap fee set to {new_swap_fee}")

    def set_oracles_enabled(self, caller: Address, enabled: bool) -> None:
        with self._transaction("set_oracles_enabled") as now:
            ownership.require_owner_or_manager(self.state, caller)
            self.lifecycle.require(self.state, "set_oracles_enabled")
            self._sync_weights(now)
            before = self._observe()
            self.state.oracles_enabled = bool(enabled)
            self._emit(ev.SetOraclesEnabledEvent, before, enabled=bool(enabled))
            logger.info(f"[Vault] oracles {'enabled' if enabled else 'disabled'} by {caller}")

    # --- Fees & lifecycle ---

    def claim_manager_fees(self, caller: Address) -> List[int]:
        with self._transaction("claim_manager_fees") as now:
            self.lifecycle.require(self.state, "claim_manager_fees")
            self._sync_weights(now)
            self._checkpoint_fees(now)
            return self._pay_fees(caller)

    def initiate_finalization(self, caller: Address) -> int:
        with self._transaction("initiate_finalization") as now:
            ownership.require_owner(self.state, caller)
            self.lifecycle.require(self.state, "initiate_finalization")
            self._sync_weights(now)
            self._checkpoint_fees(now)
            if self.pool.is_swap_enabled():
                self._set_swap_enabled(False)
            before = self._observe()
            timeout = self.lifecycle.begin_finalization(self.state, now)
            self._emit(ev.FinalizationInitiatedEvent, before, notice_timeout_at=timeout)
            return timeout

    def finalize(self, caller: Address) -> List[int]:
        """
        Charges the remaining fees (including any unexpired minimum fee
        period), pays every manager, and returns all holdings to the owner.
        """
        with self._transaction("finalize") as now:
            ownership.require_owner(self.state, caller)
            self.lifecycle.check_finalize(self.state, now)
            self._sync_weights(now)
            self._checkpoint_fees(now, include_minimum=True)
            for manager in list(self.state.fees.fee_per_manager):
                if any(self.state.fees.fee_per_manager[manager]):
                    self._pay_fees(manager)
            if self.pool.is_swap_enabled():
                self._set_swap_enabled(False)

            before = self._observe()
            returned = before[0]
            self.pool.exit_pool(self.state.owner, returned)
            self.scheduler.set_static(self.state, before[1], now)
            self.lifecycle.complete(self.state)
            self._emit(ev.FinalizedEvent, before, caller=caller, amounts=returned)
            logger.info(f"[Vault] finalized, returned {returned} to {self.state.owner}")
            return returned

    # --- Roles & custody ---

    def set_manager(self, caller: Address, new_manager: Address) -> None:
        with self._transaction("set_manager") as now:
            ownership.require_owner(self.state, caller)
            self.lifecycle.require(self.state, "set_manager")
            ownership.check_manager(self.state.owner, new_manager)
            if self.state.phase in (VaultPhase.ACTIVE, VaultPhase.FINALIZING):
                self._sync_weights(now)
                self._checkpoint_fees(now)
            before = self._observe()
            previous, self.state.manager = self.state.manager, new_manager
            self._emit(ev.ManagerChangedEvent, before, previous_manager=previous, new_manager=new_manager)
            logger.info(f"[Vault] manager {previous} -> {new_manager}")

    def sweep(self, caller: Address, token: Address, amount: int) -> None:
        """Recovers a non-pool token sent to the vault by mistake."""
        with self._transaction("sweep"):
            ownership.require_owner(self.state, caller)
            self.lifecycle.require(self.state, "sweep")
            if token in self.state.tokens:
                raise CannotSweepPoolToken(token=token)
            before = self._observe()
            self.ledger.transfer(token, self.address, self.state.owner, amount)
            self._emit(ev.SweepEvent, before, token=token, amount=amount)

    def transfer_ownership(self, caller: Address, new_owner: Address) -> None:
        with self._transaction("transfer_ownership"):
            ownership.require_owner(self.state, caller)
            self.lifecycle.require(self.state, "transfer_ownership")
            before = self._observe()
            ownership.offer(self.state, new_owner)
            self._emit(ev.OwnershipTransferOfferedEvent, before, owner=self.state.owner, pending_owner=new_owner)

    def cancel_ownership_transfer(self, caller: Address) -> None:
        with self._transaction("cancel_ownership_transfer"):
            ownership.require_owner(self.state, caller)
            self.lifecycle.require(self.state, "cancel_ownership_transfer")
            before = self._observe()
            canceled = ownership.cancel_offer(self.state)
            self._emit(ev.OwnershipTransferCanceledEvent, before, owner=self.state.owner, canceled_owner=canceled)

    def accept_ownership(self, caller: Address) -> None:
        with self._transaction("accept_ownership"):
            self.lifecycle.require(self.state, "accept_ownership")
            before = self._observe()
            previous = ownership.accept(self.state, caller)
            self._emit(ev.OwnershipTransferredEvent, before, previous_owner=previous, new_owner=caller)

    def renounce_ownership(self, caller: Address) -> None:
        with self._transaction("renounce_ownership"):
            ownership.require_owner(self.state, caller)
            ownership.renounce()

    def multicall(self, caller: Address, calls: Sequence[Call]) -> List[Any]:
        """Runs ``calls`` as one all-or-nothing transaction."""
        with self._transaction("multicall"):
            return run_calls(self, caller, calls)

    # --- Views ---

    @property
    def tokens(self) -> List[Address]:
        return list(self.state.tokens)

    @property
    def phase(self) -> VaultPhase:
        return self.state.phase

    @property
    def owner(self) -> Address:
        return self.state.owner

    @property
    def pending_owner(self) -> Optional[Address]:
        return self.state.pending_owner

    @property
    def manager(self) -> Address:
        return self.state.manager

    def holdings(self) -> List[int]:
        return self.pool.balances()

    def holding(self, index: int) -> int:
        return self.pool.balances()[index]

    def normalized_weights(self) -> List[int]:
        if self.state.phase == VaultPhase.UNINITIALIZED:
            return self.pool.normalized_weights()
        return self.scheduler.current_weights(self.state, self.clock.now())

    def spot_price(self, token_in: Address, token_out: Address) -> int:
        """
        Units of ``token_in`` per unit of ``token_out``; 0 for unknown tokens.

        Priced at the scheduled weights for the current time, so a quote taken
        mid-update reflects the interpolated weights the pool has not been
        synced to yet.
        """
        tokens = self.state.tokens
        if token_in not in tokens or token_out not in tokens:
            return 0
        return self.pool.spot_price(
            tokens.index(token_in), tokens.index(token_out), weights=self.normalized_weights()
        )

    def spot_prices(self, token_in: Address) -> List[TokenValue]:
        tokens = self.state.tokens
        if token_in not in tokens:
            return [TokenValue(t, 0) for t in tokens]
        weights = self.normalized_weights()
        i = tokens.index(token_in)
        return [TokenValue(t, self.pool.spot_price(i, j, weights=weights)) for j, t in enumerate(tokens)]

    def manager_fee_total(self) -> List[int]:
        return list(self.state.fees.manager_fee_total)

    def claimable_fees(self, manager: Address) -> List[int]:
        return self.fee_accrual.claimable(self.state.fees, manager)

    def swap_fee(self) -> int:
        return self.pool.swap_fee()

    def is_swap_enabled(self) -> bool:
        return self.pool.is_swap_enabled()

    def snapshot(self) -> VaultSnapshot:
        return VaultSnapshot.capture(self.state, self.pool)


def create_vault(
    tokens: Sequence[Address],
    weights: Sequence[int],
    oracles: Sequence[Any],
    numeraire_index: int,
    owner: Address,
    manager: Address,
    validator,
    description: str,
    settings: Optional[VaultSettings] = None,
    ledger=None,
    clock: Optional[Clock] = None,
    address: Address = "vault",
    pool_address: Address = "pool",
) -> ManagedVault:
    """
    Validates construction parameters and builds a vault around a fresh
    ``WeightedPool``.

    ``oracles`` holds one price feed per token, None at the numeraire.
    Governance parameters come from ``settings`` (defaults when None).

    Raises:
        ConstructionError / InvariantError subclasses naming the first
        invalid parameter.
    """
    settings = settings or VaultSettings()
    n = len(tokens)

    if len(weights) != n:
        raise ValueLengthIsNotSame(token_count=n, value_count=len(weights))
    if len(oracles) != n:
        raise OracleLengthIsNotSame(token_count=n, oracle_count=len(oracles))
    if numeraire_index < 0 or numeraire_index >= n:
        raise NumeraireAssetIndexExceedsTokenLength(token_count=n, index=numeraire_index)
    for i, feed in enumerate(oracles):
        if i != numeraire_index and feed is None:
            raise OracleIsZeroAddress(index=i)
    if oracles[numeraire_index] is not None:
        raise NumeraireOracleIsNotZeroAddress(index=numeraire_index)

    fees, oracle_cfg, swap, wcfg = settings.fees, settings.oracle, settings.swap, settings.weights
    if fees.management_fee > fees.max_management_fee:
        raise ManagementFeeIsAboveMax(actual=fees.management_fee, max=fees.max_management_fee)
    if fees.min_fee_duration == 0:
        raise MinFeeDurationIsZero()
    if oracle_cfg.min_reliable_vault_value == 0:
        raise MinReliableVaultValueIsZero()
    if oracle_cfg.min_significant_deposit_value == 0:
        raise MinSignificantDepositValueIsZero()
    if oracle_cfg.max_oracle_spot_divergence == 0:
        raise MaxOracleSpotDivergenceIsZero()
    if oracle_cfg.max_oracle_delay == 0:
        raise MaxOracleDelayIsZero()
    if validator.token_count != n:
        raise ValidatorIsNotMatched(num_tokens=n, num_allowances=validator.token_count)
    for i in range(1, n):
        if tokens[i].lower() <= tokens[i - 1].lower():
            raise UnsortedTokens(index=i)
    if swap.swap_fee < swap.min_swap_fee:
        raise SwapFeeIsBelowMin(fee=swap.swap_fee, min=swap.min_swap_fee)
    if swap.swap_fee > swap.max_swap_fee:
        raise SwapFeeIsAboveMax(fee=swap.swap_fee, max=swap.max_swap_fee)
    if not weight_sum_is_one(weights, wcfg.weight_sum_tolerance):
        raise SumOfWeightIsNotOne(total=sum(weights))
    ownership.check_manager(owner, manager)
    if not description:
        raise DescriptionIsEmpty()

    params = VaultParams(
        tokens=list(tokens),
        numeraire_index=numeraire_index,
        oracles=[
            None if feed is None else OracleConfig(
                feed=feed,
                max_delay=oracle_cfg.max_oracle_delay,
                max_spot_divergence=oracle_cfg.max_oracle_spot_divergence,
            )
            for feed in oracles
        ],
        description=description,
        min_weight=wcfg.min_weight,
        max_weight_change_ratio=wcfg.max_weight_change_ratio,
        min_weight_change_duration=wcfg.min_weight_change_duration,
        weight_sum_tolerance=wcfg.weight_sum_tolerance,
        management_fee=fees.management_fee,
        max_management_fee=fees.max_management_fee,
        min_fee_duration=fees.min_fee_duration,
        max_swap_fee_change=swap.max_swap_fee_change,
        swap_fee_cooldown=swap.swap_fee_cooldown,
        min_reliable_vault_value=oracle_cfg.min_reliable_vault_value,
        min_significant_deposit_value=oracle_cfg.min_significant_deposit_value,
        notice_period=settings.lifecycle.notice_period,
    )
    ledger = ledger if ledger is not None else InMemoryLedger()
    pool = WeightedPool(
        tokens,
        ledger,
        weights,
        swap_fee=swap.swap_fee,
        min_swap_fee=swap.min_swap_fee,
        max_swap_fee=swap.max_swap_fee,
        address=pool_address,
    )
    return ManagedVault(
        params,
        pool,
        ledger,
        validator,
        clock or SystemClock(),
        owner=owner,
        manager=manager,
        oracles_enabled=oracle_cfg.oracles_enabled,
        address=address,
    )
