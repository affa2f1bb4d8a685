"""Native-unit price discovery through the anchor whitelist."""

from __future__ import annotations

from decimal import Decimal, localcontext
from typing import List, Optional

from ..datalake.schemas import Pair, Token
from ..datalake.storage import EntityStore
from ..monitoring.logger import get_logger
from ..monitoring.metrics import METRICS
from ..utils.constants import ONE_BD, ZERO_BD, pair_map_key
from .anchors import AnchorRegistry


class PriceOracle:
    """Derives how many native units one unit of a token is worth.

    The search walks the anchors in their declared order and returns on the
    first anchor whose deepest pool with the token clears the liquidity
    threshold. An earlier anchor wins even when a later one has a deeper pool,
    which keeps derived prices stable as new pools appear.
    """

    def __init__(self, registry: AnchorRegistry, store: EntityStore) -> None:
        self._registry = registry
        self._store = store
        self._logger = get_logger(__name__)

    def native_unit_price(self, token: Token) -> Decimal:
        """Return the price of ``token`` in native units, or zero if no route qualifies."""

        registry = self._registry
        if token.id == registry.native_unit_token:
            return ONE_BD

        with localcontext(registry.decimal_context()):
            for position, anchor in enumerate(registry.anchors):
                entry = self._store.load_pair_index(pair_map_key(token.id, anchor))
                if entry is None:
                    continue
                candidates = entry.pair_ids
                if token.id == registry.reference_asset_token:
                    # the reference asset is priced through the canonical pair only
                    candidates = [registry.reference_pair]
                pair = self._deepest_pair(candidates)
                if pair is None:
                    continue
                price = self._price_through(token, pair)
                if price is not None:
                    METRICS.increment("pricing.native_price.resolved")
                    METRICS.observe("pricing.native_price.anchor_index", position)
                    self._logger.debug(
                        "Derived native price",
                        extra={"token": token.id, "anchor": anchor, "pair": pair.id, "price": price},
                    )
                    return price

        METRICS.increment("pricing.native_price.unresolved")
        self._logger.debug("No qualifying anchor route", extra={"token": token.id})
        return ZERO_BD

    def _deepest_pair(self, pair_ids: List[str]) -> Optional[Pair]:
        best: Optional[Pair] = None
        best_reserve = ZERO_BD
        for pair_id in pair_ids:
            pair = self._store.load_pair(pair_id)
            if pair is None:
                continue
            # strict comparison keeps the first of equally deep pools
            if pair.reserve_native_unit > best_reserve:
                best = pair
                best_reserve = pair.reserve_native_unit
        return best

    def _price_through(self, token: Token, pair: Pair) -> Optional[Decimal]:
        if pair.reserve_native_unit <= self._registry.minimum_liquidity_threshold_native:
            self._logger.debug(
                "Pair below native liquidity threshold",
                extra={"token": token.id, "pair": pair.id, "reserve_native_unit": pair.reserve_native_unit},
            )
            return None
        side = pair.side_of(token.id)
        if side == 0:
            counter = self._store.load_token(pair.token1)
            if counter is None:
                return None
            return pair.token1_price * counter.derived_native_unit
        if side == 1:
            counter = self._store.load_token(pair.token0)
            if counter is None:
                return None
            return pair.token0_price * counter.derived_native_unit
        return None


class ReferencePrice:
    """USD value of one native unit, read from the canonical reference pair."""

    def __init__(self, registry: AnchorRegistry, store: EntityStore) -> None:
        self._registry = registry
        self._store = store
        self._logger = get_logger(__name__)

    def reference_asset_usd_price(self) -> Decimal:
        pair = self._store.load_pair(self._registry.reference_pair)
        if pair is None:
            METRICS.increment("pricing.reference_price.missing_pair")
            self._logger.debug("Reference pair not indexed yet", extra={"pair": self._registry.reference_pair})
            return ZERO_BD
        # reference asset is token0, so token0_price is reference units per native unit
        return pair.token0_price


__all__ = ["PriceOracle", "ReferencePrice"]
