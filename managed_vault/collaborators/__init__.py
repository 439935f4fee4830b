"""External collaborators the vault consumes through narrow interfaces.

Each module pairs a ``Protocol`` with an in-memory reference implementation
used by the CLI simulator and the test-suite.
"""
from .ledger import InMemoryLedger, TokenLedger
from .oracle import PriceFeed, StaticPriceFeed
from .pool import Pool, WeightedPool
from .validator import FixedAllowanceValidator, WithdrawalValidator

__all__ = [
    "InMemoryLedger",
    "TokenLedger",
    "PriceFeed",
    "StaticPriceFeed",
    "Pool",
    "WeightedPool",
    "FixedAllowanceValidator",
    "WithdrawalValidator",
]
