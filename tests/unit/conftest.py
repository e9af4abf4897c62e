"""Shared fixtures for strategy-builder unit tests."""

import pytest

from strategy_builder.indicators.catalog import DEFAULT_CATALOG, IndicatorCatalog, IndicatorKind
from strategy_builder.logic.chain import IdSource, IndicatorItem, Operator, OperatorItem
from strategy_builder.logic.tree import IndicatorNode, IndicatorRef


@pytest.fixture
def catalog() -> IndicatorCatalog:
    """Full built-in catalog."""
    return DEFAULT_CATALOG


@pytest.fixture
def ids() -> IdSource:
    """Fresh buy-side id source."""
    return IdSource("buy-")


@pytest.fixture
def rsi_oversold() -> IndicatorNode:
    """RSI(14) oversold below 30."""
    return IndicatorNode(
        kind=IndicatorKind.RSI,
        params={"period": 14, "source": "close"},
        condition="oversold",
        threshold=30,
    )


@pytest.fixture
def sma_cross() -> IndicatorNode:
    """SMA(20) crossing above SMA(50)."""
    return IndicatorNode(
        kind=IndicatorKind.SMA,
        params={"period": 20, "source": "close"},
        condition="crossesAbove",
        reference=IndicatorRef(IndicatorKind.SMA, {"period": 50, "source": "close"}),
    )


@pytest.fixture
def macd_negative() -> IndicatorNode:
    """MACD histogram negative."""
    return IndicatorNode(
        kind=IndicatorKind.MACD,
        params={"fastPeriod": 12, "slowPeriod": 26, "signalPeriod": 9},
        condition="histogramNegative",
    )


@pytest.fixture
def leaf_item():
    """Factory: chain tile carrying the same predicate as a leaf node."""

    def _make(item_id: str, node: IndicatorNode) -> IndicatorItem:
        return IndicatorItem(
            id=item_id,
            kind=node.kind,
            params=dict(node.params),
            condition=node.condition,
            threshold=node.threshold,
            reference=node.reference,
        )

    return _make


@pytest.fixture
def op_item():
    """Factory: operator tile."""

    def _make(item_id: str, op: str) -> OperatorItem:
        return OperatorItem(id=item_id, op=Operator(op))

    return _make
