"""Immutable anchor-token configuration shared by all pricing operations."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Context, Decimal, DivisionByZero, InvalidOperation, ROUND_HALF_EVEN
from typing import FrozenSet, Iterable, Optional, Tuple

from ..config.settings import MissingBundlePolicy, PricingConfig, get_app_config


def _normalize(address: str) -> str:
    return address.strip().lower()


@dataclass(frozen=True, slots=True)
class AnchorRegistry:
    """Anchor tokens, canonical pair and thresholds, built once at startup.

    ``anchors`` keeps the declared search priority; ``whitelist`` answers
    membership questions.
    """

    anchors: Tuple[str, ...]
    whitelist: FrozenSet[str]
    native_unit_token: str
    reference_asset_token: str
    reference_pair: str
    untracked_pairs: FrozenSet[str]
    minimum_usd_threshold_new_pairs: Decimal
    minimum_liquidity_threshold_native: Decimal
    minimum_liquidity_providers: int
    decimal_precision: int = 34
    missing_bundle_policy: MissingBundlePolicy = MissingBundlePolicy.RAISE

    @classmethod
    def from_config(cls, config: Optional[PricingConfig] = None) -> "AnchorRegistry":
        cfg = config or get_app_config().pricing
        return cls.build(
            cfg.whitelist,
            native_unit_token=cfg.native_unit_token,
            reference_asset_token=cfg.reference_asset_token,
            reference_pair=cfg.reference_pair,
            untracked_pairs=cfg.untracked_pairs,
            minimum_usd_threshold_new_pairs=cfg.minimum_usd_threshold_new_pairs,
            minimum_liquidity_threshold_native=cfg.minimum_liquidity_threshold_native,
            minimum_liquidity_providers=cfg.minimum_liquidity_providers,
            decimal_precision=cfg.decimal_precision,
            missing_bundle_policy=cfg.missing_bundle_policy,
        )

    @classmethod
    def build(
        cls,
        anchors: Iterable[str],
        *,
        native_unit_token: str,
        reference_asset_token: str,
        reference_pair: str,
        untracked_pairs: Iterable[str] = (),
        minimum_usd_threshold_new_pairs: Decimal = Decimal("1"),
        minimum_liquidity_threshold_native: Decimal = Decimal("1"),
        minimum_liquidity_providers: int = 5,
        decimal_precision: int = 34,
        missing_bundle_policy: MissingBundlePolicy = MissingBundlePolicy.RAISE,
    ) -> "AnchorRegistry":
        ordered = tuple(dict.fromkeys(_normalize(anchor) for anchor in anchors))
        return cls(
            anchors=ordered,
            whitelist=frozenset(ordered),
            native_unit_token=_normalize(native_unit_token),
            reference_asset_token=_normalize(reference_asset_token),
            reference_pair=_normalize(reference_pair),
            untracked_pairs=frozenset(_normalize(pair_id) for pair_id in untracked_pairs),
            minimum_usd_threshold_new_pairs=Decimal(minimum_usd_threshold_new_pairs),
            minimum_liquidity_threshold_native=Decimal(minimum_liquidity_threshold_native),
            minimum_liquidity_providers=minimum_liquidity_providers,
            decimal_precision=decimal_precision,
            missing_bundle_policy=missing_bundle_policy,
        )

    def is_whitelisted(self, token_id: str) -> bool:
        return token_id in self.whitelist

    def is_untracked(self, pair_id: str) -> bool:
        return pair_id in self.untracked_pairs

    def decimal_context(self) -> Context:
        """Fresh arithmetic context; every operation evaluates inside one."""

        return Context(
            prec=self.decimal_precision,
            rounding=ROUND_HALF_EVEN,
            traps=[InvalidOperation, DivisionByZero],
        )


__all__ = ["AnchorRegistry"]
