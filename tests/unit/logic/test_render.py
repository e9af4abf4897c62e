"""Tests for tile captions and tree text."""

import pytest

from strategy_builder.indicators.catalog import IndicatorKind
from strategy_builder.logic.chain import IndicatorItem
from strategy_builder.logic.render import item_label, tree_to_text
from strategy_builder.logic.tree import AndNode, NotNode, OrNode


class TestItemLabel:
    """Tests for item_label."""

    def test_indicator_caption(self, catalog, rsi_oversold, leaf_item):
        """Test short name, condition label and params."""
        assert item_label(leaf_item("a", rsi_oversold), catalog) == "RSI Oversold (period: 14, source: close)"

    def test_params_elided_after_two(self, catalog):
        """Test only the first two params are shown."""
        item = IndicatorItem(
            id="a",
            kind=IndicatorKind.MACD,
            params={"fastPeriod": 12, "slowPeriod": 26, "signalPeriod": 9},
            condition="crossesAboveSignal",
        )
        assert item_label(item, catalog) == (
            "MACD Crosses Above Signal (fastPeriod: 12, slowPeriod: 26, ...)"
        )

    def test_no_params(self, catalog):
        """Test tiles without params have no parenthesis."""
        item = IndicatorItem(id="a", kind="vwap", params={}, condition="priceAbove")
        assert item_label(item, catalog) == "VWAP Price Above VWAP"

    @pytest.mark.parametrize("op,text", [("and", "AND"), ("or", "OR"), ("not", "NOT")])
    def test_operator_caption(self, catalog, op_item, op, text):
        """Test operators render upper case."""
        assert item_label(op_item("x", op), catalog) == text

    def test_kind_missing_from_catalog(self, catalog, rsi_oversold, leaf_item):
        """Test a kind outside the catalog falls back to raw names."""
        label = item_label(leaf_item("a", rsi_oversold), catalog.subset("sma"))
        assert label == "rsi oversold (period: 14, source: close)"


class TestTreeToText:
    """Tests for tree_to_text."""

    def test_leaf(self, rsi_oversold):
        assert tree_to_text(rsi_oversold) == "rsi oversold 30"

    def test_nested_groups_parenthesised(self, rsi_oversold, sma_cross, macd_negative):
        """Test inner groups are wrapped, the top level is not."""
        tree = OrNode((AndNode((rsi_oversold, sma_cross)), NotNode(macd_negative)))
        assert tree_to_text(tree) == (
            "(rsi oversold 30 AND sma crossesAbove sma(period=50, source=close)) OR NOT macd histogramNegative"
        )
