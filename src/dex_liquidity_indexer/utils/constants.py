"""Shared constants for the pricing core."""

from decimal import Decimal

ZERO_BD = Decimal("0")
ONE_BD = Decimal("1")
TWO_BD = Decimal("2")

# Fixed key of the Bundle singleton record.
BUNDLE_ID = "1"

# Canto deployment: wCANTO is the native unit, NOTE the reference asset.
NOTE_ADDRESS = "0x4e71a2e537b7f9d9413d3991d37958c0b5e1e503"
USDC_ADDRESS = "0x80b5a32e4f032b2a058b4f29ec95eefeeb87adcd"
USDT_ADDRESS = "0xd567b3d7b8fe3c79a1ad8da978812cfc4fa05e75"
ATOM_ADDRESS = "0xeceeefcee421d8062ef8d6b4d814efe4dc898265"
ETH_ADDRESS = "0x5fd55a1b9fc24967c4db09c513c3ba0dfa7ff687"
WCANTO_ADDRESS = "0x826551890dc65655a0aceca109ab11abdbd7a07b"

# NOTE is token0 of this pair.
NOTE_WCANTO_PAIR = "0x1d20635535307208919f0b67c3b2065965a85aa9"


def pair_map_key(token_a: str, token_b: str) -> str:
    """Order-independent key of the pair index entry for two tokens."""
    first, second = sorted((token_a.lower(), token_b.lower()))
    return f"{first}-{second}"


__all__ = [
    "ZERO_BD",
    "ONE_BD",
    "TWO_BD",
    "BUNDLE_ID",
    "NOTE_ADDRESS",
    "USDC_ADDRESS",
    "USDT_ADDRESS",
    "ATOM_ADDRESS",
    "ETH_ADDRESS",
    "WCANTO_ADDRESS",
    "NOTE_WCANTO_PAIR",
    "pair_map_key",
]
