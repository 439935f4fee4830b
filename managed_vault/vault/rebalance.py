"""
Rebalance Engine
----------------

Weight recomputation for holdings-changing operations.

- Pro-rata: each weight scales with its own holding,
  ``w'[i] = w[i] * new[i] / old[i]``, so the pool's spot prices do not move.
- Oracle-anchored: weights proportional to each holding's numeraire value,
  ``w'[i] ~ new[i] * price[i]``, so every spot price lands on its feed price.

Both results are renormalized to sum to ONE and lifted to the minimum
weight. The oracle deposit path anchors when the vault is too small to have
a reliable price (``vault_value < min_reliable_vault_value``) or the deposit
is large enough to matter (``deposit_value >= min_significant_deposit_value``)
and stays pro-rata otherwise.
"""
from typing import List, Optional, Sequence, Tuple

from loguru import logger

from managed_vault.core.custom_types import PriceType
from managed_vault.core.errors import AmountExceedAvailable
from managed_vault.core.mathutils import add, clamp_min_weight, mul_down, mul_int, normalize


class RebalanceEngine:
    def __init__(self, min_weight: int, min_reliable_vault_value: int, min_significant_deposit_value: int):
        self.min_weight = min_weight
        self.min_reliable_vault_value = min_reliable_vault_value
        self.min_significant_deposit_value = min_significant_deposit_value

    def _finish(self, raw: Sequence[int], fallback: Sequence[int]) -> List[int]:
        if not any(raw):
            return list(fallback)
        return clamp_min_weight(normalize(raw), self.min_weight)

    def pro_rata_weights(self, weights: Sequence[int], old: Sequence[int], new: Sequence[int]) -> List[int]:
        raw = []
        for w, b0, b1 in zip(weights, old, new):
            raw.append(mul_int(w, b1) // b0 if b0 > 0 else w)
        return self._finish(raw, weights)

    def oracle_weights(self, holdings: Sequence[int], prices: Sequence[int], fallback: Sequence[int]) -> List[int]:
        raw = [mul_down(b, p) for b, p in zip(holdings, prices)]
        return self._finish(raw, fallback)

    @staticmethod
    def value_of(amounts: Sequence[int], prices: Sequence[int]) -> int:
        total = 0
        for a, p in zip(amounts, prices):
            total = add(total, mul_down(a, p))
        return total

    def deposit_weights(
        self,
        weights: Sequence[int],
        old: Sequence[int],
        new: Sequence[int],
        amounts: Sequence[int],
        price_type: PriceType,
        prices: Optional[Sequence[int]] = None,
    ) -> Tuple[List[int], bool]:
        """
        Returns (new weights, anchored_to_oracle).
        """
        if price_type is PriceType.ORACLE:
            vault_value = self.value_of(old, prices)
            deposit_value = self.value_of(amounts, prices)
            if vault_value < self.min_reliable_vault_value or deposit_value >= self.min_significant_deposit_value:
                logger.debug(f"[Rebalance] anchoring to oracle (vault={vault_value}, deposit={deposit_value})")
                return self.oracle_weights(new, prices, weights), True
        return self.pro_rata_weights(weights, old, new), False

    @staticmethod
    def check_withdraw(
        tokens: Sequence[str],
        amounts: Sequence[int],
        holdings: Sequence[int],
        allowances: Sequence[int],
    ) -> None:
        for token, amount, holding, allowance in zip(tokens, amounts, holdings, allowances):
            available = min(holding, allowance)
            if amount > available:
                raise AmountExceedAvailable(token=token, amount=amount, available=available)
