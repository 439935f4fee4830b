"""In-memory token ledger.

Stands in for ERC20-style balances: every account that can hold tokens
(owner, managers, pool, vault) is an address in one shared ledger. The vault
snapshots and restores it around each transaction.
"""
from __future__ import annotations
from typing import Dict, Protocol, Tuple

from loguru import logger

from managed_vault.core.errors import InsufficientBalance


class TokenLedger(Protocol):
    def balance_of(self, token: str, holder: str) -> int: ...
    def transfer(self, token: str, sender: str, recipient: str, amount: int) -> None: ...
    def snapshot(self): ...
    def restore(self, snap) -> None: ...


class InMemoryLedger:
    def __init__(self):
        self._balances: Dict[Tuple[str, str], int] = {}

    def balance_of(self, token: str, holder: str) -> int:
        return self._balances.get((token, holder), 0)

    def mint(self, token: str, holder: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Negative amount {amount} for {token}")
        key = (token, holder)
        self._balances[key] = self._balances.get(key, 0) + amount
        logger.debug(f"[Ledger] mint {amount} {token} -> {holder}")

    def transfer(self, token: str, sender: str, recipient: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Negative amount {amount} for {token}")
        if amount == 0:
            return
        bal = self.balance_of(token, sender)
        if bal < amount:
            raise InsufficientBalance(token=token, holder=sender, balance=bal, amount=amount)
        self._balances[(token, sender)] = bal - amount
        key = (token, recipient)
        self._balances[key] = self._balances.get(key, 0) + amount

    def holders(self, token: str) -> Dict[str, int]:
        return {h: v for (t, h), v in self._balances.items() if t == token and v}

    def snapshot(self) -> Dict[Tuple[str, str], int]:
        return dict(self._balances)

    def restore(self, snap: Dict[Tuple[str, str], int]) -> None:
        self._balances = dict(snap)
