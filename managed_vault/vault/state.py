"""
Vault State
-----------

``VaultState`` is the single mutable record every vault component reads and
writes. There are no module-level globals: the facade owns one instance,
deep-copies it at the start of each transaction and restores the copy if
the transaction fails.

``VaultParams`` holds the immutable governance parameters fixed at
construction, and ``VaultSnapshot`` is the serializable projection used by
the journal and by replay.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel

from managed_vault.core.custom_types import (
    Address,
    OracleConfig,
    TokenValue,
    VaultPhase,
    WeightWindow,
)
from managed_vault.core.errors import DifferentTokensInPosition, ValueLengthIsNotSame


@dataclass(frozen=True)
class VaultParams:
    tokens: List[Address]
    numeraire_index: int
    oracles: List[Optional[OracleConfig]]
    description: str
    min_weight: int
    max_weight_change_ratio: int
    min_weight_change_duration: int
    weight_sum_tolerance: int
    management_fee: int
    max_management_fee: int
    min_fee_duration: int
    max_swap_fee_change: int
    swap_fee_cooldown: int
    min_reliable_vault_value: int
    min_significant_deposit_value: int
    notice_period: int


@dataclass
class FeeState:
    created_at: int
    last_checkpoint: int
    manager_fee_total: List[int]
    fee_per_manager: Dict[Address, List[int]] = field(default_factory=dict)


@dataclass
class VaultState:
    tokens: List[Address]
    owner: Address
    manager: Address
    window: WeightWindow
    fees: FeeState
    phase: VaultPhase = VaultPhase.UNINITIALIZED
    pending_owner: Optional[Address] = None
    oracles_enabled: bool = True
    swap_fee_changed_at: Optional[int] = None
    notice_timeout_at: Optional[int] = None
    last_holdings_change_at: Optional[int] = None
    last_seq: int = 0


class VaultSnapshot(BaseModel):
    """Everything needed to describe a vault at a point in its event history."""
    last_seq: int
    tokens: List[str]
    phase: VaultPhase
    owner: str
    pending_owner: Optional[str] = None
    manager: str
    window: WeightWindow
    created_at: int
    last_checkpoint: int
    manager_fee_total: List[int]
    fee_per_manager: Dict[str, List[int]]
    oracles_enabled: bool
    swap_fee: int
    swap_fee_changed_at: Optional[int] = None
    swap_enabled: bool
    notice_timeout_at: Optional[int] = None
    last_holdings_change_at: Optional[int] = None
    holdings: List[int]

    @classmethod
    def capture(cls, state: VaultState, pool) -> "VaultSnapshot":
        return cls(
            last_seq=state.last_seq,
            tokens=list(state.tokens),
            phase=state.phase,
            owner=state.owner,
            pending_owner=state.pending_owner,
            manager=state.manager,
            window=state.window.model_copy(deep=True),
            created_at=state.fees.created_at,
            last_checkpoint=state.fees.last_checkpoint,
            manager_fee_total=list(state.fees.manager_fee_total),
            fee_per_manager={k: list(v) for k, v in state.fees.fee_per_manager.items()},
            oracles_enabled=state.oracles_enabled,
            swap_fee=pool.swap_fee(),
            swap_fee_changed_at=state.swap_fee_changed_at,
            swap_enabled=pool.is_swap_enabled(),
            notice_timeout_at=state.notice_timeout_at,
            last_holdings_change_at=state.last_holdings_change_at,
            holdings=pool.balances(),
        )


def ordered_values(tokens: Sequence[Address], values: Sequence[TokenValue]) -> List[int]:
    """
    Checks a (token, value) vector against the canonical token order and
    returns the bare values.

    Raises:
        ValueLengthIsNotSame: wrong number of entries.
        DifferentTokensInPosition: a token is out of place.
    """
    if len(values) != len(tokens):
        raise ValueLengthIsNotSame(token_count=len(tokens), value_count=len(values))
    out = []
    for i, tv in enumerate(values):
        if tv.token != tokens[i]:
            raise DifferentTokensInPosition(actual=tv.token, sorted=tokens[i], index=i)
        out.append(tv.value)
    return out
