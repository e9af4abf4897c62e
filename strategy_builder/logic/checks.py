"""Local structural checks run before a rule leaves the editor.

These catch problems that make a rule unsendable, without a network call.
Logical soundness (conflicting buy/sell rules and the like) is left to the
validation service.
"""

import logging
from typing import Optional

from strategy_builder.errors import StructuralError
from strategy_builder.indicators.catalog import IndicatorCatalog
from strategy_builder.logic.chain import Chain, IndicatorItem, Operator, is_operator
from strategy_builder.logic.tree import AndNode, IndicatorNode, Node, NotNode, OrNode

logger = logging.getLogger(__name__)


def chain_issues(chain: Chain, side: str = "buy") -> list[str]:
    """List structural problems in a chain.

    Args:
        chain: Chain to check
        side: "buy" or "sell", used in messages

    Returns:
        List of user-actionable messages. Empty list means sendable.
    """
    if not any(isinstance(item, IndicatorItem) for item in chain):
        return [f"Please add at least one {side} condition"]

    issues: list[str] = []
    for i, item in enumerate(chain):
        if not is_operator(item, Operator.NOT):
            continue
        operand = chain[i + 1] if i + 1 < len(chain) else None
        if not isinstance(operand, IndicatorItem):
            issues.append(f"{side.capitalize()} conditions: NOT at position {i + 1} has no indicator to negate")
    return issues


def ensure_chain(chain: Chain, side: str = "buy") -> None:
    """Raise StructuralError if ``chain`` has structural problems."""
    issues = chain_issues(chain, side)
    if issues:
        logger.info("Chain rejected locally", extra={"side": side, "issues": issues})
        raise StructuralError(issues)


def tree_issues(
    node: Optional[Node],
    catalog: Optional[IndicatorCatalog] = None,
    path: str = "conditions",
) -> list[str]:
    """List structural problems in a logic tree.

    Args:
        node: Root node (None counts as missing)
        catalog: If given, leaf kinds and conditions are checked against it
        path: Path prefix for messages

    Returns:
        List of error strings. Empty list means valid.
    """
    if node is None:
        return [f"{path}: conditions are required"]

    if isinstance(node, IndicatorNode):
        if catalog is None:
            return []
        if node.kind not in catalog:
            return [f"{path}: unknown indicator '{node.kind.value}'"]
        if not catalog.is_condition_supported(node.kind, node.condition):
            return [f"{path}: condition '{node.condition}' is not supported by '{node.kind.value}'"]
        return []

    if isinstance(node, (AndNode, OrNode)):
        op = "AND" if isinstance(node, AndNode) else "OR"
        if not node.children:
            return [f"{path}: {op} group has no conditions"]
        errors: list[str] = []
        for i, child in enumerate(node.children):
            errors.extend(tree_issues(child, catalog, f"{path}.children[{i}]"))
        return errors

    if isinstance(node, NotNode):
        child = node.child
        if isinstance(child, (AndNode, OrNode)) and not child.children:
            return [f"{path}: NOT must wrap a condition, got an empty group"]
        return tree_issues(child, catalog, f"{path}.child")

    raise TypeError(f"Unknown node type: {type(node).__name__}")


def ensure_tree(node: Optional[Node], side: str = "buy", catalog: Optional[IndicatorCatalog] = None) -> None:
    """Raise StructuralError if the tree for ``side`` has structural problems."""
    issues = tree_issues(node, catalog, path=side)
    if issues:
        logger.info("Tree rejected locally", extra={"side": side, "issues": issues})
        raise StructuralError(issues)
