"""Pricing core: native-unit prices, reference USD rate and tracked USD figures."""

from __future__ import annotations

from .anchors import AnchorRegistry
from .engine import PricingEngine
from .errors import BundleNotInitializedError, PricingError
from .oracle import PriceOracle, ReferencePrice
from .tracking import LiquidityTracker, VolumeTracker

__all__ = [
    "AnchorRegistry",
    "BundleNotInitializedError",
    "LiquidityTracker",
    "PriceOracle",
    "PricingEngine",
    "PricingError",
    "ReferencePrice",
    "VolumeTracker",
]
