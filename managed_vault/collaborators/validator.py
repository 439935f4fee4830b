"""Withdrawal validators bound how much of each token may leave the vault."""
from __future__ import annotations
from typing import List, Optional, Protocol, Sequence

from managed_vault.core.mathutils import MAX_UINT256


class WithdrawalValidator(Protocol):
    token_count: int

    def allowance(self) -> List[int]: ...


class FixedAllowanceValidator:
    """Fixed per-token allowances; unlimited when none are given."""

    def __init__(self, token_count: int, allowances: Optional[Sequence[int]] = None):
        if allowances is not None and len(allowances) != token_count:
            raise ValueError(f"Expected {token_count} allowances, got {len(allowances)}")
        self.token_count = token_count
        self._allowances = list(allowances) if allowances is not None else [MAX_UINT256] * token_count

    def allowance(self) -> List[int]:
        return list(self._allowances)

    def set_allowances(self, allowances: Sequence[int]) -> None:
        if len(allowances) != self.token_count:
            raise ValueError(f"Expected {self.token_count} allowances, got {len(allowances)}")
        self._allowances = list(allowances)
