"""Tree -> chain conversion, used when a saved strategy is opened for editing.

Each combinator contributes its own operator between consecutive
flattened children. Nested groups are spliced into the same flat
sequence, so trees more than one combinator level deep do not survive a
flatten/parse round trip.
"""

import logging
from typing import Optional, Union

from strategy_builder.indicators.catalog import IndicatorCatalog
from strategy_builder.logic.chain import (
    Chain,
    IdSource,
    IndicatorItem,
    Operator,
    OperatorItem,
)
from strategy_builder.logic.tree import AndNode, IndicatorNode, Node, NotNode, OrNode, depth

logger = logging.getLogger(__name__)


def flatten(node: Node, ids: IdSource, catalog: Optional[IndicatorCatalog] = None) -> Chain:
    """Flatten a logic tree into a chain.

    Args:
        node: Root of the tree
        ids: Id source for the produced items
        catalog: If given, every leaf's condition is checked against it

    Returns:
        Ordered chain. A combinator with no children yields an empty chain.

    Raises:
        InvalidConditionError: If a catalog is given and a leaf's condition
            is not declared for its kind
        TypeError: On an unknown node variant
    """
    if depth(node) > 1:
        logger.debug("Flattening nested tree (depth=%d), grouping will not round-trip", depth(node))
    return tuple(_flatten(node, ids, catalog))


def _flatten(node: Node, ids: IdSource, catalog: Optional[IndicatorCatalog]) -> list:
    if isinstance(node, IndicatorNode):
        if catalog is not None:
            catalog.check_condition(node.kind, node.condition)
        return [
            IndicatorItem(
                id=ids.next_id(),
                kind=node.kind,
                params=dict(node.params),
                condition=node.condition,
                threshold=node.threshold,
                reference=node.reference,
            )
        ]

    if isinstance(node, (AndNode, OrNode)):
        op = Operator.AND if isinstance(node, AndNode) else Operator.OR
        if not node.children:
            logger.warning("Flattening %s node with no children", op.value.upper())
        items: list = []
        for index, child in enumerate(node.children):
            if index > 0:
                items.append(OperatorItem(id=ids.for_operator(op), op=op))
            items.extend(_flatten(child, ids, catalog))
        return items

    if isinstance(node, NotNode):
        return [
            OperatorItem(id=ids.for_operator(Operator.NOT), op=Operator.NOT),
            *_flatten(node.child, ids, catalog),
        ]

    raise TypeError(f"Unknown node type: {type(node).__name__}")


def flatten_stored(
    stored: Union[Node, list, tuple, None],
    ids: IdSource,
    catalog: Optional[IndicatorCatalog] = None,
) -> Chain:
    """Flatten one side of a stored strategy.

    Older records keep a side as a list of nodes; only the first node is
    loaded into the editor. ``None`` or an empty list gives an empty chain.
    """
    if stored is None:
        return ()
    if isinstance(stored, (list, tuple)):
        if not stored:
            return ()
        if len(stored) > 1:
            logger.warning("Stored conditions hold %d nodes, loading only the first", len(stored))
        stored = stored[0]
    return flatten(stored, ids, catalog)
