"""
Custom Type Definitions
-----------------------

Centralized type aliases and small value objects shared across the vault.

- Address: a hex account / token identifier string.
- Fixed: an 18-decimal fixed-point integer (see ``core.mathutils``).
- Timestamp: whole seconds, as read from a ``Clock``.
- TokenValue: a (token, value) pair; every vector handed to the vault is a
  sequence of these in canonical token order.
- WeightWindow: the gradual weight update currently in force.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel

Address = str
Fixed = int
Timestamp = int

ZERO_ADDRESS: Address = "0x" + "0" * 40

# Largest timestamp a weight window may reference (32-bit seconds).
MAX_TIMESTAMP: Timestamp = 2**32 - 1


def is_zero_address(address: Optional[str]) -> bool:
    return not address or address.lower() == ZERO_ADDRESS


class VaultPhase(str, Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    FINALIZING = "finalizing"
    FINALIZED = "finalized"


class PriceType(str, Enum):
    """How a deposit prices the incoming tokens."""
    ORACLE = "oracle"  # validated external feeds
    SPOT = "spot"      # pool spot price only, risking arbitrage


@dataclass(frozen=True)
class TokenValue:
    token: Address
    value: int


def token_values(tokens: List[Address], values: List[int]) -> List[TokenValue]:
    return [TokenValue(t, v) for t, v in zip(tokens, values)]


class WeightWindow(BaseModel):
    """
    Start/end weight vectors and the time span between them.

    A static window (``start_time == end_time`` and equal vectors) represents
    fixed weights.
    """
    start_weights: List[int]
    end_weights: List[int]
    start_time: int
    end_time: int

    @classmethod
    def static(cls, weights: List[int], now: int) -> "WeightWindow":
        return cls(start_weights=list(weights), end_weights=list(weights), start_time=now, end_time=now)

    @property
    def is_static(self) -> bool:
        return self.start_weights == self.end_weights


@dataclass(frozen=True)
class OracleConfig:
    """Per-token oracle settings. ``feed`` is None only for the numeraire."""
    feed: Any
    max_delay: int
    max_spot_divergence: int
