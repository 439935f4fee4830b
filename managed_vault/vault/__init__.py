"""Vault engine: weight scheduling, fee accrual, oracle guarding, lifecycle
and atomic batching, wired together by ``ManagedVault``.
"""
from .batch import Call
from .fees import FeeAccrual
from .lifecycle import LEGAL_PHASES, VaultLifecycle
from .oracle_guard import OracleGuard
from .rebalance import RebalanceEngine
from .state import FeeState, VaultParams, VaultSnapshot, VaultState
from .vault import ManagedVault, create_vault
from .weights import WeightScheduler, interpolate

__all__ = [
    "Call",
    "FeeAccrual",
    "LEGAL_PHASES",
    "VaultLifecycle",
    "OracleGuard",
    "RebalanceEngine",
    "FeeState",
    "VaultParams",
    "VaultSnapshot",
    "VaultState",
    "ManagedVault",
    "create_vault",
    "WeightScheduler",
    "interpolate",
]
