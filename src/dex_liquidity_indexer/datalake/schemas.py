"""Entity records read by the pricing core."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from ..utils.constants import BUNDLE_ID, ZERO_BD


@dataclass(slots=True)
class Token:
    """A token tracked by the indexer."""

    id: str
    derived_native_unit: Decimal = ZERO_BD
    symbol: Optional[str] = None
    decimals: int = 18


@dataclass(slots=True)
class Pair:
    """A liquidity pool between ``token0`` and ``token1``."""

    id: str
    token0: str
    token1: str
    reserve0: Decimal = ZERO_BD
    reserve1: Decimal = ZERO_BD
    reserve_native_unit: Decimal = ZERO_BD
    # token0_price is token0 per token1, token1_price is token1 per token0
    token0_price: Decimal = ZERO_BD
    token1_price: Decimal = ZERO_BD
    liquidity_provider_count: int = 0

    def side_of(self, token_id: str) -> Optional[int]:
        if self.token0 == token_id:
            return 0
        if self.token1 == token_id:
            return 1
        return None


@dataclass(slots=True)
class Bundle:
    """Singleton holding the latest native unit to USD rate."""

    reference_asset_usd_price: Decimal = ZERO_BD
    id: str = BUNDLE_ID


@dataclass(slots=True)
class PairIndexEntry:
    """Pools connecting an unordered pair of tokens, in creation order."""

    id: str
    pair_ids: List[str] = field(default_factory=list)


__all__ = ["Token", "Pair", "Bundle", "PairIndexEntry"]
