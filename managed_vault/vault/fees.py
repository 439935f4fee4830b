"""Management fee accrual and per-manager claims."""
from typing import List, Sequence, Tuple

from loguru import logger

from managed_vault.core.errors import NoAvailableFeeForCaller
from managed_vault.core.mathutils import mul_down, mul_int, sub
from managed_vault.vault.state import FeeState


class FeeAccrual:
    """
    Charges ``management_fee`` per second on every holding since the last
    checkpoint and books it to whoever is manager at checkpoint time.

    ``include_minimum`` adds the unexpired part of the minimum fee period
    (``created_at + min_fee_duration - now``); the vault passes it only when
    finalizing, so early finalization still pays for the full period.
    """

    def __init__(self, management_fee: int, min_fee_duration: int):
        self.management_fee = management_fee
        self.min_fee_duration = min_fee_duration

    def fee_index(self, fees: FeeState, now: int, include_minimum: bool = False) -> int:
        index = max(0, now - fees.last_checkpoint)
        if include_minimum:
            index += max(0, fees.created_at + self.min_fee_duration - now)
        return index

    def compute(self, fees: FeeState, holdings: Sequence[int], now: int, include_minimum: bool = False) -> Tuple[List[int], int]:
        index = self.fee_index(fees, now, include_minimum)
        rate = mul_int(self.management_fee, index)
        return [min(h, mul_down(h, rate)) for h in holdings], index

    def checkpoint(
        self,
        fees: FeeState,
        holdings: Sequence[int],
        now: int,
        manager: str,
        include_minimum: bool = False,
    ) -> Tuple[List[int], int]:
        """
        Accrues fees up to ``now`` and advances the checkpoint.

        Returns:
            (per-token fee amounts, fee index in seconds). The caller is
            responsible for moving the amounts out of the pool.
        """
        amounts, index = self.compute(fees, holdings, now, include_minimum)
        if any(amounts):
            owed = fees.fee_per_manager.setdefault(manager, [0] * len(amounts))
            for i, fee in enumerate(amounts):
                fees.manager_fee_total[i] += fee
                owed[i] += fee
            logger.debug(f"[Fees] checkpoint {amounts} to {manager} (index={index}s)")
        fees.last_checkpoint = max(fees.last_checkpoint, now)
        return amounts, index

    def claimable(self, fees: FeeState, manager: str) -> List[int]:
        return list(fees.fee_per_manager.get(manager, [0] * len(fees.manager_fee_total)))

    def claim(self, fees: FeeState, caller: str) -> List[int]:
        """Removes and returns the caller's accrued fees."""
        owed = fees.fee_per_manager.get(caller)
        if owed is None or not any(owed):
            raise NoAvailableFeeForCaller(caller=caller)
        for i, amount in enumerate(owed):
            fees.manager_fee_total[i] = sub(fees.manager_fee_total[i], amount)
        del fees.fee_per_manager[caller]
        logger.info(f"[Fees] {caller} claimed {owed}")
        return list(owed)
