"""End-to-end pricing over the default Canto anchor set."""

from __future__ import annotations

from decimal import Decimal

import pytest

from dex_liquidity_indexer.config.settings import MissingBundlePolicy, PricingConfig
from dex_liquidity_indexer.datalake.schemas import Bundle, Pair, Token
from dex_liquidity_indexer.datalake.storage import InMemoryEntityStore
from dex_liquidity_indexer.pricing import BundleNotInitializedError, PricingEngine
from dex_liquidity_indexer.utils.constants import (
    ETH_ADDRESS,
    NOTE_ADDRESS,
    NOTE_WCANTO_PAIR,
    USDC_ADDRESS,
    WCANTO_ADDRESS,
    pair_map_key,
)

MEME = "0x00000000000000000000000000000000000000aa"


def _snapshot() -> InMemoryEntityStore:
    return InMemoryEntityStore(
        tokens=[
            Token(id=WCANTO_ADDRESS, symbol="WCANTO", derived_native_unit=Decimal("1")),
            Token(id=NOTE_ADDRESS, symbol="NOTE"),
            Token(id=USDC_ADDRESS, symbol="USDC", decimals=6),
            Token(id=ETH_ADDRESS, symbol="ETH"),
            Token(id=MEME, symbol="MEME"),
        ],
        pairs=[
            # 0.25 NOTE per CANTO
            Pair(
                id=NOTE_WCANTO_PAIR,
                token0=NOTE_ADDRESS,
                token1=WCANTO_ADDRESS,
                reserve0=Decimal("250000"),
                reserve1=Decimal("1000000"),
                reserve_native_unit=Decimal("2000000"),
                token0_price=Decimal("0.25"),
                token1_price=Decimal("4"),
                liquidity_provider_count=120,
            ),
            Pair(
                id="0xnote-usdc",
                token0=NOTE_ADDRESS,
                token1=USDC_ADDRESS,
                reserve0=Decimal("500000"),
                reserve1=Decimal("500000"),
                reserve_native_unit=Decimal("4000000"),
                token0_price=Decimal("1"),
                token1_price=Decimal("1"),
                liquidity_provider_count=40,
            ),
            Pair(
                id="0xmeme-wcanto",
                token0=MEME,
                token1=WCANTO_ADDRESS,
                reserve0=Decimal("1000"),
                reserve1=Decimal("10"),
                reserve_native_unit=Decimal("20"),
                token0_price=Decimal("100"),
                token1_price=Decimal("0.01"),
                liquidity_provider_count=2,
            ),
        ],
    )


def test_engine_derives_prices_the_caller_persists() -> None:
    store = _snapshot()
    engine = PricingEngine(store, config=PricingConfig())

    reference_usd = engine.reference_asset_usd_price()
    assert reference_usd == Decimal("0.25")
    store.save_bundle(Bundle(reference_asset_usd_price=reference_usd))

    note = store.load_token(NOTE_ADDRESS)
    note.derived_native_unit = engine.native_unit_price(note)
    assert note.derived_native_unit == Decimal("4")

    usdc = store.load_token(USDC_ADDRESS)
    usdc.derived_native_unit = engine.native_unit_price(usdc)
    assert usdc.derived_native_unit == Decimal("4")

    meme = store.load_token(MEME)
    meme.derived_native_unit = engine.native_unit_price(meme)
    assert meme.derived_native_unit == Decimal("0.01")

    assert engine.token_usd_price(note) == Decimal("1.00")
    assert engine.token_usd_price(meme) == Decimal("0.0025")


def test_engine_tracked_figures_over_snapshot() -> None:
    store = _snapshot()
    store.save_bundle(Bundle(reference_asset_usd_price=Decimal("0.25")))
    engine = PricingEngine(store, config=PricingConfig())
    wcanto = store.load_token(WCANTO_ADDRESS)
    meme = Token(id=MEME, derived_native_unit=Decimal("0.01"))
    pair = store.load_pair("0xmeme-wcanto")

    # two providers, only wCANTO listed: 2 * 10 * 0.25 = 5 USD of reserve clears the 1 USD gate
    volume = engine.tracked_volume_usd(Decimal("500"), meme, Decimal("5"), wcanto, pair)
    assert volume == Decimal("1.25")

    liquidity = engine.tracked_liquidity_usd(Decimal("500"), meme, Decimal("5"), wcanto)
    assert liquidity == Decimal("2.50")


def test_engine_honours_missing_bundle_policy() -> None:
    store = _snapshot()
    wcanto = store.load_token(WCANTO_ADDRESS)

    strict = PricingEngine(store, config=PricingConfig())
    with pytest.raises(BundleNotInitializedError):
        strict.token_usd_price(wcanto)

    lenient = PricingEngine(store, config=PricingConfig(missing_bundle_policy=MissingBundlePolicy.ZERO))
    assert lenient.token_usd_price(wcanto) == Decimal("0")
    assert lenient.tracked_liquidity_usd(Decimal("5"), wcanto, Decimal("5"), wcanto) == Decimal("0")


def test_replaying_same_snapshot_gives_identical_results() -> None:
    first = PricingEngine(_snapshot(), config=PricingConfig())
    second = PricingEngine(_snapshot(), config=PricingConfig())
    token = Token(id=MEME)
    assert str(first.native_unit_price(token)) == str(second.native_unit_price(token))
    assert str(first.reference_asset_usd_price()) == str(second.reference_asset_usd_price())


def test_pair_map_key_is_order_and_case_independent() -> None:
    assert pair_map_key("0xAB", "0xcd") == pair_map_key("0xcd", "0xab") == "0xab-0xcd"


def test_index_pair_appends_in_creation_order_without_duplicates() -> None:
    store = InMemoryEntityStore()
    first = Pair(id="0xp1", token0="0xa", token1="0xb")
    second = Pair(id="0xp2", token0="0xb", token1="0xa")
    store.save_pair(first)
    store.save_pair(second)
    store.save_pair(first)

    entry = store.load_pair_index(pair_map_key("0xa", "0xb"))
    assert entry is not None
    assert entry.pair_ids == ["0xp1", "0xp2"]
    assert store.load_pair_index(pair_map_key("0xa", "0xc")) is None
