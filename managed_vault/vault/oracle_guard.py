"""
Oracle Guard
------------

Decides whether an external price feed can be trusted right now. A feed is
rejected when oracles are switched off, when its last update is older than
``max_delay``, when its answer is not strictly positive, or when it strays
from the pool's own spot price by more than ``max_spot_divergence``:

    |feed - spot| / spot > max_spot_divergence

Accepted prices are rescaled from the feed's decimals to 18 decimals. The
numeraire has no feed; its price is ONE by definition.
"""
from typing import List, Optional, Sequence

from loguru import logger

from managed_vault.core.custom_types import OracleConfig
from managed_vault.core.errors import (
    OracleIsDelayedBeyondMax,
    OraclePriceIsInvalid,
    OraclesAreDisabled,
    OracleSpotPriceDivergenceExceedsMax,
)
from managed_vault.core.mathutils import DECIMALS, ONE, div_down


class OracleGuard:
    def __init__(self, tokens: Sequence[str], numeraire_index: int, oracles: Sequence[Optional[OracleConfig]]):
        self.tokens = list(tokens)
        self.numeraire_index = numeraire_index
        self.oracles = list(oracles)

    def validate(
        self,
        token_index: int,
        pool_spot_price: Optional[int],
        now: int,
        oracles_enabled: bool,
    ) -> int:
        """
        Returns the validated 18-decimal price of ``token_index`` in numeraire.

        ``pool_spot_price`` None skips the divergence check (used when the
        pool has no meaningful price yet, or is about to be re-anchored).
        """
        if token_index == self.numeraire_index:
            return ONE
        if not oracles_enabled:
            raise OraclesAreDisabled()

        config = self.oracles[token_index]
        token = self.tokens[token_index]
        feed = config.feed

        updated_at = feed.updated_at()
        if now - updated_at > config.max_delay:
            raise OracleIsDelayedBeyondMax(token=token, updated_at=updated_at, now=now, max_delay=config.max_delay)

        answer = feed.latest_answer()
        if answer <= 0:
            raise OraclePriceIsInvalid(token=token, answer=answer)
        price = answer * 10 ** (DECIMALS - feed.decimals)

        if pool_spot_price is not None:
            if pool_spot_price == 0:
                raise OracleSpotPriceDivergenceExceedsMax(
                    token=token, oracle_price=price, spot_price=0, divergence=None, max=config.max_spot_divergence
                )
            divergence = div_down(abs(price - pool_spot_price), pool_spot_price)
            if divergence > config.max_spot_divergence:
                raise OracleSpotPriceDivergenceExceedsMax(
                    token=token,
                    oracle_price=price,
                    spot_price=pool_spot_price,
                    divergence=divergence,
                    max=config.max_spot_divergence,
                )
        return price

    def prices(
        self,
        spot_prices: Optional[Sequence[int]],
        now: int,
        oracles_enabled: bool,
    ) -> List[int]:
        """Validates every token; ``spot_prices`` None disables the divergence check."""
        if not oracles_enabled:
            raise OraclesAreDisabled()
        out = []
        for i in range(len(self.tokens)):
            spot = spot_prices[i] if spot_prices is not None else None
            out.append(self.validate(i, spot, now, oracles_enabled))
        logger.debug(f"[Oracle] validated prices {out}")
        return out
