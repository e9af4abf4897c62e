"""Human-readable text for tiles and trees (tile captions, log lines)."""

from strategy_builder.errors import UnknownIndicatorError
from strategy_builder.indicators.catalog import IndicatorCatalog
from strategy_builder.logic.chain import ChainItem, IndicatorItem, OperatorItem
from strategy_builder.logic.tree import AndNode, IndicatorNode, IndicatorRef, Node, NotNode, OrNode

# Params shown on a tile before eliding the rest.
_TILE_PARAMS = 2


def item_label(item: ChainItem, catalog: IndicatorCatalog) -> str:
    """Caption for a chain tile.

    Indicator tiles show the short name, condition label and the first two
    params, e.g. ``RSI Oversold (period: 14, source: close)``. Operator
    tiles show the operator in upper case.
    """
    if isinstance(item, OperatorItem):
        return item.op.value.upper()
    if not isinstance(item, IndicatorItem):
        raise TypeError(f"Unknown chain item type: {type(item).__name__}")

    try:
        descriptor = catalog.describe(item.kind)
    except UnknownIndicatorError:
        name, condition_label = item.kind.value, item.condition
    else:
        spec = descriptor.condition(item.condition)
        name, condition_label = descriptor.name, spec.label if spec else item.condition

    label = f"{name} {condition_label}"
    if item.params:
        shown = list(item.params.items())[:_TILE_PARAMS]
        text = ", ".join(f"{key}: {value}" for key, value in shown)
        if len(item.params) > _TILE_PARAMS:
            text += ", ..."
        label += f" ({text})"
    return label


def tree_to_text(node: Node) -> str:
    """Infix text for a tree, parenthesising nested groups."""
    return _render(node, top=True)


def _render(node: Node, top: bool) -> str:
    if isinstance(node, IndicatorNode):
        text = f"{node.kind.value} {node.condition}"
        if node.reference is not None:
            text += f" {_render_ref(node.reference)}"
        elif node.threshold is not None:
            text += f" {node.threshold}"
        return text
    if isinstance(node, (AndNode, OrNode)):
        op = " AND " if isinstance(node, AndNode) else " OR "
        body = op.join(_render(c, top=False) for c in node.children)
        return body if top or len(node.children) < 2 else f"({body})"
    if isinstance(node, NotNode):
        return f"NOT {_render(node.child, top=False)}"
    raise TypeError(f"Unknown node type: {type(node).__name__}")


def _render_ref(ref: IndicatorRef) -> str:
    params = ", ".join(f"{k}={v}" for k, v in ref.params.items())
    return f"{ref.kind.value}({params})"
