"""JSON wire format for logic trees and chain items.

Tree nodes (persistence and validation/test request bodies)::

    {"type": "indicator", "indicator": {"type": "rsi", "params": {...},
        "condition": "oversold", "value": 30,
        "refIndicator": {"type": "sma", "params": {...}}}}
    {"type": "and" | "or", "children": [node, ...]}
    {"type": "not", "children": [node]}

Chain items (editor tiles)::

    {"id": "buy-0", "type": "indicator", "data": {"indicatorType": "rsi",
        "params": {...}, "condition": "oversold", "value": 30}}
    {"id": "buy-op-1", "type": "operator", "data": {"operator": "and"}}

``value`` and ``refIndicator`` are omitted when absent.
"""

import logging
from typing import Any, Iterable, Union

from strategy_builder.errors import WireFormatError
from strategy_builder.indicators.catalog import IndicatorKind
from strategy_builder.logic.chain import Chain, ChainItem, IndicatorItem, Operator, OperatorItem
from strategy_builder.logic.tree import (
    AndNode,
    IndicatorNode,
    IndicatorRef,
    Node,
    NotNode,
    OrNode,
)

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Tree nodes
# -----------------------------------------------------------------------------

def node_to_dict(node: Node) -> dict:
    """Serialize a logic tree to its wire shape."""
    if isinstance(node, IndicatorNode):
        return {
            "type": "indicator",
            "indicator": _indicator_payload(
                node.kind, node.params, node.condition, node.threshold, node.reference
            ),
        }
    if isinstance(node, AndNode):
        return {"type": "and", "children": [node_to_dict(c) for c in node.children]}
    if isinstance(node, OrNode):
        return {"type": "or", "children": [node_to_dict(c) for c in node.children]}
    if isinstance(node, NotNode):
        return {"type": "not", "children": [node_to_dict(node.child)]}
    raise TypeError(f"Unknown node type: {type(node).__name__}")


def node_from_dict(data: Any, path: str = "conditions") -> Node:
    """Deserialize a logic tree from its wire shape.

    Args:
        data: Parsed JSON value
        path: Location used in error messages

    Returns:
        Root node

    Raises:
        WireFormatError: If the value is not a well-formed node
    """
    if not isinstance(data, dict):
        raise WireFormatError(f"{path}: must be an object, got {type(data).__name__}")

    node_type = data.get("type")
    if node_type == "indicator":
        indicator = data.get("indicator")
        if not isinstance(indicator, dict):
            raise WireFormatError(f"{path}: indicator node must have an 'indicator' object")
        kind, params, condition, threshold, reference = _parse_indicator_payload(indicator, f"{path}.indicator")
        return IndicatorNode(
            kind=kind, params=params, condition=condition, threshold=threshold, reference=reference
        )

    if node_type in ("and", "or", "not"):
        children = data.get("children")
        if not isinstance(children, list):
            raise WireFormatError(f"{path}: '{node_type}' node must have a 'children' list")
        nodes = tuple(node_from_dict(c, f"{path}.children[{i}]") for i, c in enumerate(children))
        if node_type == "not":
            if len(nodes) != 1:
                raise WireFormatError(f"{path}: NOT node must have exactly 1 child, got {len(nodes)}")
            return NotNode(child=nodes[0])
        return AndNode(children=nodes) if node_type == "and" else OrNode(children=nodes)

    raise WireFormatError(f"{path}: unknown node type {node_type!r}")


def stored_from_wire(data: Any, path: str = "conditions") -> Union[Node, list[Node], None]:
    """Deserialize one stored side, which may be a node or a legacy list of nodes."""
    if data is None:
        return None
    if isinstance(data, list):
        return [node_from_dict(d, f"{path}[{i}]") for i, d in enumerate(data)]
    return node_from_dict(data, path)


# -----------------------------------------------------------------------------
# Chain items
# -----------------------------------------------------------------------------

def item_to_dict(item: ChainItem) -> dict:
    """Serialize a chain item to the editor tile shape."""
    if isinstance(item, IndicatorItem):
        payload = _indicator_payload(item.kind, item.params, item.condition, item.threshold, item.reference)
        data = {
            "indicatorType": payload.pop("type"),
            **payload,
        }
        return {"id": item.id, "type": "indicator", "data": data}
    if isinstance(item, OperatorItem):
        return {"id": item.id, "type": "operator", "data": {"operator": item.op.value}}
    raise TypeError(f"Unknown chain item type: {type(item).__name__}")


def item_from_dict(data: Any, path: str = "chain") -> ChainItem:
    """Deserialize an editor tile.

    Raises:
        WireFormatError: If the value is not a well-formed tile
    """
    if not isinstance(data, dict):
        raise WireFormatError(f"{path}: must be an object, got {type(data).__name__}")
    item_id = data.get("id")
    if not isinstance(item_id, str) or not item_id:
        raise WireFormatError(f"{path}: missing 'id'")
    body = data.get("data") or {}
    if not isinstance(body, dict):
        raise WireFormatError(f"{path}: 'data' must be an object")

    item_type = data.get("type")
    if item_type == "operator":
        try:
            op = Operator(body.get("operator"))
        except ValueError:
            raise WireFormatError(f"{path}: unknown operator {body.get('operator')!r}") from None
        return OperatorItem(id=item_id, op=op)

    if item_type == "indicator":
        payload = {k: v for k, v in body.items() if k != "indicatorType"}
        payload["type"] = body.get("indicatorType")
        kind, params, condition, threshold, reference = _parse_indicator_payload(payload, f"{path}.data")
        return IndicatorItem(
            id=item_id,
            kind=kind,
            params=params,
            condition=condition,
            threshold=threshold,
            reference=reference,
        )

    raise WireFormatError(f"{path}: unknown item type {item_type!r}")


def chain_to_dicts(chain: Chain) -> list[dict]:
    return [item_to_dict(item) for item in chain]


def chain_from_dicts(items: Iterable[Any]) -> Chain:
    return tuple(item_from_dict(item, f"chain[{i}]") for i, item in enumerate(items))


# -----------------------------------------------------------------------------
# Internal helpers
# -----------------------------------------------------------------------------

def _indicator_payload(kind, params, condition, threshold, reference) -> dict:
    payload: dict[str, Any] = {
        "type": IndicatorKind(kind).value,
        "params": dict(params),
        "condition": condition,
    }
    if threshold is not None:
        payload["value"] = threshold
    if reference is not None:
        payload["refIndicator"] = {"type": reference.kind.value, "params": dict(reference.params)}
    return payload


def _parse_kind(value: Any, path: str) -> IndicatorKind:
    try:
        return IndicatorKind(value)
    except ValueError:
        raise WireFormatError(f"{path}: unknown indicator type {value!r}") from None


def _parse_indicator_payload(payload: dict, path: str):
    kind = _parse_kind(payload.get("type"), f"{path}.type")

    params = payload.get("params") or {}
    if not isinstance(params, dict):
        raise WireFormatError(f"{path}.params: must be an object")

    condition = payload.get("condition")
    if not isinstance(condition, str) or not condition:
        raise WireFormatError(f"{path}: indicator must have a condition")

    threshold = payload.get("value")
    if threshold is not None and (isinstance(threshold, bool) or not isinstance(threshold, (int, float, str))):
        raise WireFormatError(f"{path}.value: must be a number or string")

    reference = None
    ref = payload.get("refIndicator")
    if ref is not None:
        if not isinstance(ref, dict):
            raise WireFormatError(f"{path}.refIndicator: must be an object")
        ref_params = ref.get("params") or {}
        if not isinstance(ref_params, dict):
            raise WireFormatError(f"{path}.refIndicator.params: must be an object")
        reference = IndicatorRef(kind=_parse_kind(ref.get("type"), f"{path}.refIndicator.type"), params=dict(ref_params))

    return kind, dict(params), condition, threshold, reference
