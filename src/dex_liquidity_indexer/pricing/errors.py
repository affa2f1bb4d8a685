"""Exceptions raised by the pricing core."""

from __future__ import annotations


class PricingError(Exception):
    """Base class for pricing failures that cannot degrade to zero."""


class BundleNotInitializedError(PricingError):
    """The Bundle singleton has not been written yet."""

    def __init__(self, bundle_id: str) -> None:
        super().__init__(f"Bundle {bundle_id!r} not found; no reference price has been recorded yet")
        self.bundle_id = bundle_id


__all__ = ["PricingError", "BundleNotInitializedError"]
