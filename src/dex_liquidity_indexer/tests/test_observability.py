from __future__ import annotations

import json
import logging
from decimal import Decimal

from dex_liquidity_indexer.config.settings import AppConfig, PricingConfig
from dex_liquidity_indexer.datalake.schemas import Token
from dex_liquidity_indexer.datalake.storage import InMemoryEntityStore
from dex_liquidity_indexer.monitoring import bootstrap_observability
from dex_liquidity_indexer.monitoring.logger import (
    StructuredFormatter,
    _CorrelationFilter,
    correlation_scope,
    current_correlation_id,
)
from dex_liquidity_indexer.monitoring.metrics import METRICS
from dex_liquidity_indexer.pricing import PricingEngine


def _record(message: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("dex_liquidity_indexer.pricing", logging.DEBUG, __file__, 1, message, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_structured_formatter_tags_correlation_and_decimal_extras() -> None:
    formatter = StructuredFormatter()
    record = _record("Derived native price", token="0xfoo", price=Decimal("0.1000"))
    with correlation_scope("0xtxhash"):
        _CorrelationFilter().filter(record)
    payload = json.loads(formatter.format(record))

    assert payload["message"] == "Derived native price"
    assert payload["correlation_id"] == "0xtxhash"
    assert payload["extra"] == {"token": "0xfoo", "price": "0.1000"}


def test_correlation_scope_restores_previous_id() -> None:
    assert current_correlation_id() == "-"
    with correlation_scope("outer"):
        with correlation_scope("inner"):
            assert current_correlation_id() == "inner"
        assert current_correlation_id() == "outer"
    assert current_correlation_id() == "-"


def test_prometheus_export_sanitizes_metric_names() -> None:
    METRICS.reset()
    METRICS.increment("pricing.native_price.unresolved")
    METRICS.increment("tracking.volume.untracked_pair", 2)
    METRICS.observe("pricing.route.hops", 1)
    output = METRICS.export_prometheus()
    lines = [line for line in output.splitlines() if line]
    assert "# TYPE pricing_native_price_unresolved counter" in lines
    assert "tracking_volume_untracked_pair 2.0" in lines
    assert any(line.startswith("pricing_route_hops_count") for line in lines)
    METRICS.reset()


def test_bootstrap_installs_structured_stdout_handler() -> None:
    bootstrap_observability(config=AppConfig())
    handlers = logging.getLogger().handlers
    assert any(isinstance(handler.formatter, StructuredFormatter) for handler in handlers)


def test_pricing_leaves_host_logging_handlers_alone() -> None:
    root = logging.getLogger()
    host_handler = logging.NullHandler()
    root.addHandler(host_handler)
    try:
        engine = PricingEngine(InMemoryEntityStore(), config=PricingConfig())
        assert engine.native_unit_price(Token(id="0xorphan")) == Decimal("0")
        assert host_handler in root.handlers
    finally:
        root.removeHandler(host_handler)
