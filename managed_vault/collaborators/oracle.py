"""Price feed interface and a static reference feed.

A feed reports the price of one token in numeraire units as an integer with
a fixed number of decimals (8 by default, like most on-chain USD feeds).
"""
from __future__ import annotations
from decimal import Decimal
from typing import Protocol, Union


class PriceFeed(Protocol):
    decimals: int

    def latest_answer(self) -> int: ...
    def updated_at(self) -> int: ...


class StaticPriceFeed:
    """A feed whose answer only changes when ``update`` is called."""

    def __init__(self, answer: int, updated_at: int, decimals: int = 8):
        if decimals < 0 or decimals > 18:
            raise ValueError(f"Unsupported feed decimals: {decimals}")
        self.decimals = decimals
        self._answer = int(answer)
        self._updated_at = int(updated_at)

    @classmethod
    def from_price(cls, price: Union[str, int, Decimal], updated_at: int, decimals: int = 8) -> "StaticPriceFeed":
        answer = int(Decimal(str(price)) * (Decimal(10) ** decimals))
        return cls(answer, updated_at, decimals)

    def latest_answer(self) -> int:
        return self._answer

    def updated_at(self) -> int:
        return self._updated_at

    def update(self, answer: int, updated_at: int) -> None:
        self._answer = int(answer)
        self._updated_at = int(updated_at)

    def __repr__(self) -> str:
        return f"StaticPriceFeed(answer={self._answer}, updated_at={self._updated_at}, decimals={self.decimals})"
