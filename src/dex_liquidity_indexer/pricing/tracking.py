"""Whitelist-gated USD attribution of swap volume and liquidity."""

from __future__ import annotations

from decimal import Decimal, localcontext
from typing import Tuple

from ..config.settings import MissingBundlePolicy
from ..datalake.schemas import Pair, Token
from ..datalake.storage import EntityStore
from ..monitoring.logger import get_logger
from ..monitoring.metrics import METRICS
from ..utils.constants import BUNDLE_ID, TWO_BD, ZERO_BD
from .anchors import AnchorRegistry
from .errors import BundleNotInitializedError


class _UsdTracker:
    def __init__(self, registry: AnchorRegistry, store: EntityStore) -> None:
        self._registry = registry
        self._store = store
        self._logger = get_logger(__name__)

    def reference_usd_price(self) -> Decimal:
        """Persisted native-unit USD rate, subject to the missing-bundle policy."""

        bundle = self._store.load_bundle(BUNDLE_ID)
        if bundle is not None:
            return bundle.reference_asset_usd_price
        METRICS.increment("tracking.bundle.missing")
        if self._registry.missing_bundle_policy == MissingBundlePolicy.ZERO:
            self._logger.warning("Bundle not initialised, using zero reference price")
            return ZERO_BD
        self._logger.warning("Bundle not initialised")
        raise BundleNotInitializedError(BUNDLE_ID)

    def _usd_prices(self, token0: Token, token1: Token) -> Tuple[Decimal, Decimal]:
        native_usd = self.reference_usd_price()
        return (
            token0.derived_native_unit * native_usd,
            token1.derived_native_unit * native_usd,
        )


class VolumeTracker(_UsdTracker):
    """Swap volume in USD, counted only through whitelisted sides of the pool.

    Pools with fewer liquidity providers than
    ``minimum_liquidity_providers`` must also hold enough whitelisted reserve
    value before their volume is trusted.
    """

    def tracked_volume_usd(
        self,
        amount0: Decimal,
        token0: Token,
        amount1: Decimal,
        token1: Token,
        pair: Pair,
    ) -> Decimal:
        registry = self._registry
        with localcontext(registry.decimal_context()):
            price0, price1 = self._usd_prices(token0, token1)

            if registry.is_untracked(pair.id):
                METRICS.increment("tracking.volume.untracked_pair")
                return ZERO_BD

            listed0 = registry.is_whitelisted(token0.id)
            listed1 = registry.is_whitelisted(token1.id)

            if pair.liquidity_provider_count < registry.minimum_liquidity_providers:
                reserve0_usd = pair.reserve0 * price0
                reserve1_usd = pair.reserve1 * price1
                if listed0 and listed1:
                    tracked_reserve = reserve0_usd + reserve1_usd
                elif listed0:
                    tracked_reserve = reserve0_usd * TWO_BD
                elif listed1:
                    tracked_reserve = reserve1_usd * TWO_BD
                else:
                    tracked_reserve = None
                if tracked_reserve is not None and tracked_reserve < registry.minimum_usd_threshold_new_pairs:
                    METRICS.increment("tracking.volume.below_new_pair_threshold")
                    self._logger.debug(
                        "New pair below USD reserve threshold",
                        extra={"pair": pair.id, "tracked_reserve_usd": tracked_reserve},
                    )
                    return ZERO_BD

            if listed0 and listed1:
                return (amount0 * price0 + amount1 * price1) / TWO_BD
            if listed0:
                return amount0 * price0
            if listed1:
                return amount1 * price1
            return ZERO_BD


class LiquidityTracker(_UsdTracker):
    """Liquidity in USD; a lone whitelisted side stands in for both halves."""

    def tracked_liquidity_usd(
        self,
        amount0: Decimal,
        token0: Token,
        amount1: Decimal,
        token1: Token,
    ) -> Decimal:
        registry = self._registry
        with localcontext(registry.decimal_context()):
            price0, price1 = self._usd_prices(token0, token1)
            listed0 = registry.is_whitelisted(token0.id)
            listed1 = registry.is_whitelisted(token1.id)
            if listed0 and listed1:
                return amount0 * price0 + amount1 * price1
            if listed0:
                return amount0 * price0 * TWO_BD
            if listed1:
                return amount1 * price1 * TWO_BD
            return ZERO_BD


__all__ = ["VolumeTracker", "LiquidityTracker"]
