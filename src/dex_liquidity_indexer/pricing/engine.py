"""Single owner of the anchor configuration and the store snapshot."""

from __future__ import annotations

from decimal import Decimal, localcontext
from typing import Optional

from ..config.settings import PricingConfig
from ..datalake.schemas import Pair, Token
from ..datalake.storage import EntityStore
from .anchors import AnchorRegistry
from .oracle import PriceOracle, ReferencePrice
from .tracking import LiquidityTracker, VolumeTracker


class PricingEngine:
    """Exposes the pricing operations over one registry and one store.

    Nothing is written back; callers persist the returned values themselves.
    """

    def __init__(
        self,
        store: EntityStore,
        registry: Optional[AnchorRegistry] = None,
        *,
        config: Optional[PricingConfig] = None,
    ) -> None:
        self._registry = registry or AnchorRegistry.from_config(config)
        self._store = store
        self._oracle = PriceOracle(self._registry, store)
        self._reference = ReferencePrice(self._registry, store)
        self._volume = VolumeTracker(self._registry, store)
        self._liquidity = LiquidityTracker(self._registry, store)

    @property
    def registry(self) -> AnchorRegistry:
        return self._registry

    def native_unit_price(self, token: Token) -> Decimal:
        return self._oracle.native_unit_price(token)

    def reference_asset_usd_price(self) -> Decimal:
        return self._reference.reference_asset_usd_price()

    def token_usd_price(self, token: Token) -> Decimal:
        with localcontext(self._registry.decimal_context()):
            return token.derived_native_unit * self._volume.reference_usd_price()

    def tracked_volume_usd(
        self,
        amount0: Decimal,
        token0: Token,
        amount1: Decimal,
        token1: Token,
        pair: Pair,
    ) -> Decimal:
        return self._volume.tracked_volume_usd(amount0, token0, amount1, token1, pair)

    def tracked_liquidity_usd(
        self,
        amount0: Decimal,
        token0: Token,
        amount1: Decimal,
        token1: Token,
    ) -> Decimal:
        return self._liquidity.tracked_liquidity_usd(amount0, token0, amount1, token1)


__all__ = ["PricingEngine"]
