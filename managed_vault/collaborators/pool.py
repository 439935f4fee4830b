"""Weighted AMM pool interface and an in-memory reference pool.

The vault only needs the pool to hold balances, store normalized weights,
quote spot prices and gate public swaps. Swap math itself is out of scope.

Spot price follows the weighted-pool formula, without fees::

    spot(token_in, token_out) = (B_in / w_in) / (B_out / w_out)

i.e. how many units of ``token_in`` one unit of ``token_out`` is worth.
"""
from __future__ import annotations
from typing import Any, Dict, List, Optional, Protocol, Sequence

from loguru import logger

from managed_vault.core.errors import SwapFeeIsAboveMax, SwapFeeIsBelowMin
from managed_vault.core.mathutils import div_down, sub


class Pool(Protocol):
    address: str
    tokens: List[str]

    def balances(self) -> List[int]: ...
    def normalized_weights(self) -> List[int]: ...
    def set_normalized_weights(self, weights: Sequence[int]) -> None: ...
    def spot_price(self, token_in: int, token_out: int, weights: Optional[Sequence[int]] = None) -> int: ...
    def swap_fee(self) -> int: ...
    def set_swap_fee(self, fee: int) -> None: ...
    def is_swap_enabled(self) -> bool: ...
    def set_public_swap(self, enabled: bool) -> None: ...
    def join_pool(self, source: str, amounts: Sequence[int]) -> None: ...
    def exit_pool(self, recipient: str, amounts: Sequence[int]) -> None: ...
    def snapshot(self) -> Any: ...
    def restore(self, snap: Any) -> None: ...


class WeightedPool:
    """
    Minimal weighted pool backed by a token ledger.

    Balances are tracked locally and mirrored in the ledger under the pool's
    own address, so joins and exits move real ledger balances.
    """

    def __init__(
        self,
        tokens: Sequence[str],
        ledger,
        weights: Sequence[int],
        swap_fee: int,
        min_swap_fee: int,
        max_swap_fee: int,
        address: str = "pool",
    ):
        if len(weights) != len(tokens):
            raise ValueError(f"Expected {len(tokens)} weights, got {len(weights)}")
        self.address = address
        self.tokens = list(tokens)
        self.ledger = ledger
        self.min_swap_fee = min_swap_fee
        self.max_swap_fee = max_swap_fee
        self._check_swap_fee(swap_fee)
        self._balances = [0] * len(tokens)
        self._weights = list(weights)
        self._swap_fee = swap_fee
        self._swap_enabled = False

    def _check_swap_fee(self, fee: int) -> None:
        if fee < self.min_swap_fee:
            raise SwapFeeIsBelowMin(fee=fee, min=self.min_swap_fee)
        if fee > self.max_swap_fee:
            raise SwapFeeIsAboveMax(fee=fee, max=self.max_swap_fee)

    # --- Views ---

    def balances(self) -> List[int]:
        return list(self._balances)

    def normalized_weights(self) -> List[int]:
        return list(self._weights)

    def spot_price(self, token_in: int, token_out: int, weights: Optional[Sequence[int]] = None) -> int:
        """Balancer spot price; ``weights`` overrides the stored weights for the quote only."""
        weights = self._weights if weights is None else weights
        b_out = self._balances[token_out]
        if b_out == 0 or self._balances[token_in] == 0:
            return 0
        value_in = div_down(self._balances[token_in], weights[token_in])
        value_out = div_down(b_out, weights[token_out])
        if value_out == 0:
            return 0
        return div_down(value_in, value_out)

    def swap_fee(self) -> int:
        return self._swap_fee

    def is_swap_enabled(self) -> bool:
        return self._swap_enabled

    # --- Mutations ---

    def set_normalized_weights(self, weights: Sequence[int]) -> None:
        if len(weights) != len(self.tokens):
            raise ValueError(f"Expected {len(self.tokens)} weights, got {len(weights)}")
        self._weights = list(weights)

    def set_swap_fee(self, fee: int) -> None:
        self._check_swap_fee(fee)
        self._swap_fee = fee
        logger.debug(f"[Pool] swap fee -> {fee}")

    def set_public_swap(self, enabled: bool) -> None:
        self._swap_enabled = bool(enabled)

    def join_pool(self, source: str, amounts: Sequence[int]) -> None:
        for i, amount in enumerate(amounts):
            if amount:
                self.ledger.transfer(self.tokens[i], source, self.address, amount)
                self._balances[i] += amount

    def exit_pool(self, recipient: str, amounts: Sequence[int]) -> None:
        for i, amount in enumerate(amounts):
            if amount:
                new_balance = sub(self._balances[i], amount)
                self.ledger.transfer(self.tokens[i], self.address, recipient, amount)
                self._balances[i] = new_balance

    # --- Transaction support ---

    def snapshot(self) -> Dict[str, Any]:
        return {
            "balances": list(self._balances),
            "weights": list(self._weights),
            "swap_fee": self._swap_fee,
            "swap_enabled": self._swap_enabled,
        }

    def restore(self, snap: Optional[Dict[str, Any]]) -> None:
        if not snap:
            return
        self._balances = list(snap["balances"])
        self._weights = list(snap["weights"])
        self._swap_fee = snap["swap_fee"]
        self._swap_enabled = snap["swap_enabled"]
