"""Atomic batching of vault operations."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple

from loguru import logger

from managed_vault.core.errors import UnknownCall

# Surface operations a batch may contain. Each performs its own role check.
BATCHABLE = frozenset({
    "initial_deposit",
    "deposit",
    "deposit_if_balance_unchanged",
    "deposit_risking_arbitrage",
    "deposit_risking_arbitrage_if_balance_unchanged",
    "withdraw",
    "withdraw_if_balance_unchanged",
    "update_weights_gradually",
    "cancel_weight_updates",
    "enable_trading_with_weights",
    "enable_trading_with_oracle_price",
    "enable_trading_risking_arbitrage",
    "disable_trading",
    "set_swap_fee",
    "set_oracles_enabled",
    "claim_manager_fees",
    "initiate_finalization",
    "finalize",
    "set_manager",
    "sweep",
    "transfer_ownership",
    "cancel_ownership_transfer",
    "accept_ownership",
})


@dataclass(frozen=True)
class Call:
    name: str
    args: Tuple[Any, ...] = ()
    kwargs: Dict[str, Any] = field(default_factory=dict)


def run_calls(vault, caller: str, calls: Sequence[Call]) -> List[Any]:
    """
    Runs ``calls`` in order against ``vault``. Must be invoked inside the
    vault's transaction; the first failure propagates and the transaction
    rolls everything back.
    """
    for call in calls:
        if call.name not in BATCHABLE:
            raise UnknownCall(name=call.name)
    results = []
    for i, call in enumerate(calls):
        logger.debug(f"[Batch] {i}: {call.name}")
        results.append(getattr(vault, call.name)(caller, *call.args, **call.kwargs))
    return results
