"""Tests for tree -> chain flattening."""

import logging

import pytest

from strategy_builder.errors import InvalidConditionError
from strategy_builder.logic.chain import IdSource, IndicatorItem, Operator, OperatorItem
from strategy_builder.logic.flatten import flatten, flatten_stored
from strategy_builder.logic.tree import AndNode, IndicatorNode, NotNode, OrNode


def _shape(chain):
    """Compact view of a chain: indicator kinds and operator names."""
    return [i.kind.value if isinstance(i, IndicatorItem) else i.op.value for i in chain]


class TestFlatten:
    """Tests for flatten."""

    def test_leaf(self, rsi_oversold, ids):
        """Test a leaf becomes one indicator tile."""
        chain = flatten(rsi_oversold, ids)
        assert chain == (
            IndicatorItem(
                id="buy-0",
                kind=rsi_oversold.kind,
                params=rsi_oversold.params,
                condition="oversold",
                threshold=30,
            ),
        )

    def test_and_splices_operators(self, rsi_oversold, sma_cross, macd_negative, ids):
        """Test operators appear between consecutive children only."""
        chain = flatten(AndNode((rsi_oversold, sma_cross, macd_negative)), ids)
        assert _shape(chain) == ["rsi", "and", "sma", "and", "macd"]
        assert [i.id for i in chain] == ["buy-0", "buy-op-1", "buy-2", "buy-op-3", "buy-4"]

    def test_not_leaf(self, rsi_oversold, ids):
        """Test Not(leaf) flattens to [NOT, leaf]."""
        chain = flatten(NotNode(rsi_oversold), ids)
        assert chain[0] == OperatorItem(id="buy-not-0", op=Operator.NOT)
        assert _shape(chain) == ["not", "rsi"]

    def test_reference_preserved(self, sma_cross, ids):
        """Test the reference indicator survives flattening."""
        (item,) = flatten(sma_cross, ids)
        assert item.reference == sma_cross.reference
        assert item.threshold is None

    def test_params_copied(self, rsi_oversold, ids):
        """Test tiles do not share the node's params dict."""
        (item,) = flatten(rsi_oversold, ids)
        assert item.params == rsi_oversold.params
        assert item.params is not rsi_oversold.params

    def test_nested_tree_collapses(self, rsi_oversold, sma_cross, macd_negative, ids):
        """Test nesting is spliced into one flat sequence."""
        tree = OrNode((AndNode((rsi_oversold, sma_cross)), macd_negative))
        assert _shape(flatten(tree, ids)) == ["rsi", "and", "sma", "or", "macd"]

    def test_empty_combinator_yields_nothing(self, ids, caplog):
        """Test a zero-child group yields an empty chain and logs a warning."""
        with caplog.at_level(logging.WARNING):
            assert flatten(AndNode(()), ids) == ()
        assert "no children" in caplog.text

    def test_catalog_checks_conditions(self, catalog, ids):
        """Test an undeclared condition is rejected when a catalog is given."""
        bad = IndicatorNode(kind="rsi", params={}, condition="priceAboveUpper")
        with pytest.raises(InvalidConditionError):
            flatten(bad, ids, catalog)
        assert len(flatten(bad, IdSource())) == 1

    def test_unknown_node_raises(self, ids):
        """Test non-node input is rejected."""
        with pytest.raises(TypeError):
            flatten({"type": "and"}, ids)


class TestFlattenStored:
    """Tests for flatten_stored."""

    def test_none_is_empty(self, ids):
        """Test a missing side loads as an empty chain."""
        assert flatten_stored(None, ids) == ()

    def test_empty_list_is_empty(self, ids):
        """Test an empty legacy list loads as an empty chain."""
        assert flatten_stored([], ids) == ()

    def test_legacy_list_uses_first(self, rsi_oversold, sma_cross, ids, caplog):
        """Test only the first node of a legacy list is loaded."""
        with caplog.at_level(logging.WARNING):
            chain = flatten_stored([rsi_oversold, sma_cross], ids)
        assert _shape(chain) == ["rsi"]
        assert "only the first" in caplog.text

    def test_single_node(self, rsi_oversold, sma_cross, ids):
        """Test a plain node is flattened as usual."""
        chain = flatten_stored(OrNode((rsi_oversold, sma_cross)), ids)
        assert _shape(chain) == ["rsi", "or", "sma"]
