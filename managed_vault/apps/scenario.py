"""Scenario files for the vault simulator.

A scenario YAML describes the tokens (with the owner's starting balances and
feed prices), the roles, and a list of timed steps. Amounts, weights and fees
are written in human units and converted to 18-decimal integers here.

Example::

    description: Two token demo
    start_time: 1700000000
    owner: "0x00000000000000000000000000000000000000aa"
    manager: "0x00000000000000000000000000000000000000bb"
    numeraire: USDC
    tokens:
      - {symbol: USDC, address: "0x...01", weight: 0.5, balance: 1000}
      - {symbol: WETH, address: "0x...02", weight: 0.5, balance: 10, price: 100}
    steps:
      - {at: 0, caller: owner, op: initial_deposit, args: {amounts: [100, 1]}}
      - {at: 60, caller: manager, op: update_weights_gradually,
         args: {weights: [0.7, 0.3], start: 60, end: 86460}}
"""
from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml
from loguru import logger
from pydantic import BaseModel, Field, ValidationError, field_validator

from managed_vault.core.config import ConfigError, VaultSettings
from managed_vault.core.custom_types import token_values
from managed_vault.core.errors import VaultError
from managed_vault.core.mathutils import to_fixed
from managed_vault.core.timeutils import ManualClock
from managed_vault.collaborators import FixedAllowanceValidator, InMemoryLedger, StaticPriceFeed
from managed_vault.vault import Call, ManagedVault, create_vault

Number = Union[int, float, str]


class ScenarioToken(BaseModel):
    symbol: str
    address: str
    weight: Number
    balance: Number = 0
    price: Optional[Number] = None  # None for the numeraire
    decimals: int = Field(8, ge=0, le=18)


class BatchCall(BaseModel):
    op: str
    args: Dict[str, Any] = Field(default_factory=dict)


class ScenarioStep(BaseModel):
    at: int = Field(0, ge=0)
    caller: str = "owner"
    op: Optional[str] = None
    args: Dict[str, Any] = Field(default_factory=dict)
    batch: Optional[List[BatchCall]] = None
    prices: Dict[str, Number] = Field(default_factory=dict)
    expect_error: Optional[str] = None


class Scenario(BaseModel):
    description: str
    start_time: int = Field(ge=0)
    owner: str
    manager: str
    numeraire: str
    tokens: List[ScenarioToken] = Field(..., min_length=2)
    allowances: Optional[Dict[str, Number]] = None
    steps: List[ScenarioStep] = Field(default_factory=list)

    @field_validator("tokens")
    def tokens_must_include_numeraire(cls, v, values):
        numeraire = values.data.get("numeraire")
        symbols = [t.symbol for t in v]
        if numeraire is not None and numeraire not in symbols:
            raise ValueError(f"numeraire '{numeraire}' is not one of {symbols}")
        for t in v:
            if t.symbol != numeraire and t.price is None:
                raise ValueError(f"token '{t.symbol}' needs a price")
        return v


def load_scenario(path: str) -> Scenario:
    p = Path(path)
    if not p.is_file():
        raise ConfigError(f"Scenario file not found at: {path}")
    try:
        with open(p, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        return Scenario.model_validate(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing scenario {path}: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"Invalid scenario {path}: {e}") from e


def _price_answer(price: Number, decimals: int) -> int:
    return to_fixed(price) // 10 ** (18 - decimals)


class ScenarioRunner:
    """Builds a vault from a scenario and plays its steps on a manual clock."""

    def __init__(self, scenario: Scenario, settings: Optional[VaultSettings] = None):
        self.scenario = scenario
        self.settings = settings or VaultSettings()
        # vectors in steps follow this order; addresses must ascend
        self.tokens = list(scenario.tokens)
        self.by_symbol = {t.symbol: t for t in self.tokens}
        self.clock = ManualClock(scenario.start_time)
        self.ledger = InMemoryLedger()
        self.feeds: Dict[str, StaticPriceFeed] = {}
        for t in self.tokens:
            if t.symbol != scenario.numeraire:
                self.feeds[t.symbol] = StaticPriceFeed(
                    _price_answer(t.price, t.decimals),
                    scenario.start_time,
                    t.decimals,
                )
            self.ledger.mint(t.address, scenario.owner, to_fixed(t.balance))

        allowances = None
        if scenario.allowances is not None:
            allowances = [to_fixed(scenario.allowances[t.symbol]) for t in self.tokens]
        self.validator = FixedAllowanceValidator(len(self.tokens), allowances)
        self.vault: ManagedVault = create_vault(
            tokens=[t.address for t in self.tokens],
            weights=[to_fixed(t.weight) for t in self.tokens],
            oracles=[self.feeds.get(t.symbol) for t in self.tokens],
            numeraire_index=[t.symbol for t in self.tokens].index(scenario.numeraire),
            owner=scenario.owner,
            manager=scenario.manager,
            validator=self.validator,
            description=scenario.description,
            settings=self.settings,
            ledger=self.ledger,
            clock=self.clock,
        )

    # --- argument translation ---

    def _address(self, name: str) -> str:
        if name == "owner":
            return self.scenario.owner
        if name == "manager":
            return self.scenario.manager
        if name in self.by_symbol:
            return self.by_symbol[name].address
        return name

    def _vector(self, value: Any) -> List[int]:
        if isinstance(value, dict):
            return [to_fixed(value.get(t.symbol, 0)) for t in self.tokens]
        if len(value) != len(self.tokens):
            raise ConfigError(f"Expected {len(self.tokens)} values, got {len(value)}")
        return [to_fixed(v) for v in value]

    def _token_values(self, value: Any):
        return token_values([t.address for t in self.tokens], self._vector(value))

    def translate(self, op: str, args: Dict[str, Any]) -> Tuple[tuple, Dict[str, Any]]:
        a = dict(args)
        start = self.scenario.start_time
        if op == "initial_deposit":
            weights = a.get("weights")
            return (self._token_values(a["amounts"]),), {
                "weights": self._token_values(weights) if weights is not None else None
            }
        if op.startswith("deposit") or op.startswith("withdraw"):
            kwargs = {}
            if "expected_holdings" in a:
                kwargs["expected_holdings"] = self._vector(a["expected_holdings"])
            return (self._token_values(a["amounts"]),), kwargs
        if op == "update_weights_gradually":
            return (self._token_values(a["weights"]), start + int(a["start"]), start + int(a["end"])), {}
        if op == "enable_trading_with_weights":
            return (self._token_values(a["weights"]),), {}
        if op == "set_swap_fee":
            return (to_fixed(a["fee"]),), {}
        if op == "set_oracles_enabled":
            return (bool(a["enabled"]),), {}
        if op == "set_manager":
            return (self._address(a["manager"]),), {}
        if op == "transfer_ownership":
            return (self._address(a["new_owner"]),), {}
        if op == "sweep":
            return (self._address(a["token"]), to_fixed(a["amount"])), {}
        return (), {}

    # --- execution ---

    def _apply_prices(self, prices: Dict[str, Number], now: int) -> None:
        for symbol, price in prices.items():
            feed = self.feeds.get(symbol)
            if feed is None:
                raise ConfigError(f"No price feed for '{symbol}'")
            feed.update(_price_answer(price, feed.decimals), now)

    def run_step(self, step: ScenarioStep) -> Any:
        now = self.scenario.start_time + step.at
        if now > self.clock.now():
            self.clock.set(now)
        self._apply_prices(step.prices, self.clock.now())
        caller = self._address(step.caller)
        try:
            if step.batch is not None:
                calls = []
                for c in step.batch:
                    args, kwargs = self.translate(c.op, c.args)
                    calls.append(Call(c.op, args, kwargs))
                result = self.vault.multicall(caller, calls)
            elif step.op is not None:
                args, kwargs = self.translate(step.op, step.args)
                result = getattr(self.vault, step.op)(caller, *args, **kwargs)
            else:
                result = None
        except VaultError as e:
            if step.expect_error == type(e).__name__:
                logger.info(f"[Scenario] step at +{step.at}s failed as expected: {e}")
                return e
            raise
        if step.expect_error:
            raise ConfigError(f"Step at +{step.at}s expected {step.expect_error} but succeeded")
        return result

    def run(self) -> List[Any]:
        results = []
        for i, step in enumerate(self.scenario.steps):
            label = step.op or ("batch" if step.batch else "prices")
            logger.info(f"[Scenario] step {i} at +{step.at}s: {label}")
            results.append(self.run_step(step))
        return results
