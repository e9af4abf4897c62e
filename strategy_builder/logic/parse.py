"""Chain -> tree conversion, used when a rule is saved or validated.

Parsing runs in two passes:

1. NOT binding. Each NOT tile takes the indicator tile right after it and
   becomes a NotNode. A NOT with no indicator after it is dropped.
2. Grouping. AND binds tighter than OR: operands joined by AND (or simply
   adjacent, with no operator between them) form one group, and OR tiles
   separate groups. One group is returned as is; several are joined under
   an OrNode. So ``A AND B OR C`` parses to ``Or(And(A, B), C)``.

An empty chain parses to DEFAULT_PLACEHOLDER rather than raising.
"""

import logging
from typing import Optional, Union

from strategy_builder.indicators.catalog import IndicatorCatalog
from strategy_builder.logic.chain import Chain, IndicatorItem, Operator, OperatorItem
from strategy_builder.logic.tree import (
    DEFAULT_PLACEHOLDER,
    AndNode,
    IndicatorNode,
    Node,
    NotNode,
    OrNode,
)

logger = logging.getLogger(__name__)

# Intermediate stream token: a bound operand or a binary operator.
_Token = Union[Node, Operator]


def parse(chain: Chain, catalog: Optional[IndicatorCatalog] = None) -> Node:
    """Parse a chain into a logic tree.

    Args:
        chain: Ordered chain items, possibly empty
        catalog: If given, every leaf's condition is checked against it

    Returns:
        Root node. A single indicator tile is returned unwrapped.

    Raises:
        InvalidConditionError: If a catalog is given and a leaf's condition
            is not declared for its kind
        TypeError: On an unknown chain item variant
    """
    if not chain:
        logger.debug("Empty chain, using placeholder condition")
        return DEFAULT_PLACEHOLDER

    if len(chain) == 1:
        item = chain[0]
        if isinstance(item, IndicatorItem):
            return item_to_node(item, catalog)
        if isinstance(item, OperatorItem):
            logger.warning("Chain holds only a %s operator, using placeholder condition", item.op.value.upper())
            return DEFAULT_PLACEHOLDER
        raise TypeError(f"Unknown chain item type: {type(item).__name__}")

    return _group(_bind_not(chain, catalog))


def item_to_node(item: IndicatorItem, catalog: Optional[IndicatorCatalog] = None) -> IndicatorNode:
    """Convert an indicator tile into a leaf node (dropping its id)."""
    if catalog is not None:
        catalog.check_condition(item.kind, item.condition)
    return IndicatorNode(
        kind=item.kind,
        params=dict(item.params),
        condition=item.condition,
        threshold=item.threshold,
        reference=item.reference,
    )


def _bind_not(chain: Chain, catalog: Optional[IndicatorCatalog]) -> list[_Token]:
    """First pass: fold each ``NOT, indicator`` pair into a NotNode."""
    stream: list[_Token] = []
    i = 0
    while i < len(chain):
        item = chain[i]
        if isinstance(item, IndicatorItem):
            stream.append(item_to_node(item, catalog))
            i += 1
        elif isinstance(item, OperatorItem):
            if item.op != Operator.NOT:
                stream.append(item.op)
                i += 1
                continue
            operand = chain[i + 1] if i + 1 < len(chain) else None
            if isinstance(operand, IndicatorItem):
                stream.append(NotNode(child=item_to_node(operand, catalog)))
                i += 2
            else:
                logger.warning("Dropping NOT at position %d with no indicator to negate", i)
                i += 1
        else:
            raise TypeError(f"Unknown chain item type: {type(item).__name__}")
    return stream


def _group(stream: list[_Token]) -> Node:
    """Second pass: AND-groups separated by OR."""
    groups: list[list[Node]] = [[]]
    previous_was_operand = False

    for token in stream:
        if token is Operator.OR:
            groups.append([])
            previous_was_operand = False
        elif token is Operator.AND:
            previous_was_operand = False
        else:
            if previous_was_operand:
                logger.warning("Adjacent conditions without an operator, joining with AND")
            groups[-1].append(token)
            previous_was_operand = True

    children: list[Node] = [
        group[0] if len(group) == 1 else AndNode(children=tuple(group))
        for group in groups
        if group
    ]

    if not children:
        logger.warning("Chain has operators but no conditions, using placeholder condition")
        return DEFAULT_PLACEHOLDER
    if len(children) == 1:
        return children[0]
    return OrNode(children=tuple(children))
