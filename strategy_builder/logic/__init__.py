"""Logic tree and chain models plus the conversions between them.

Quick Start:
    >>> from strategy_builder.logic import IdSource, flatten, parse
    >>> chain = flatten(tree, IdSource("buy-"))
    >>> parse(chain) == tree   # for single-level AND/OR trees
    True
"""

from .chain import (
    Chain,
    ChainItem,
    IdSource,
    IndicatorItem,
    Operator,
    OperatorItem,
    append,
    index_of,
    insert,
    is_operator,
    move,
    new_indicator_item,
    new_operator_item,
    new_reference,
    remove,
    replace_item,
    set_operator,
)
from .checks import chain_issues, ensure_chain, ensure_tree, tree_issues
from .flatten import flatten, flatten_stored
from .parse import item_to_node, parse
from .render import item_label, tree_to_text
from .serialization import (
    chain_from_dicts,
    chain_to_dicts,
    item_from_dict,
    item_to_dict,
    node_from_dict,
    node_to_dict,
    stored_from_wire,
)
from .tree import (
    DEFAULT_PLACEHOLDER,
    AndNode,
    IndicatorNode,
    IndicatorRef,
    Node,
    NotNode,
    OrNode,
    depth,
    is_combinator,
    iter_leaves,
)

__all__ = [
    # Tree
    "DEFAULT_PLACEHOLDER",
    "AndNode",
    "IndicatorNode",
    "IndicatorRef",
    "Node",
    "NotNode",
    "OrNode",
    "depth",
    "is_combinator",
    "iter_leaves",
    # Chain
    "Chain",
    "ChainItem",
    "IdSource",
    "IndicatorItem",
    "Operator",
    "OperatorItem",
    "append",
    "index_of",
    "insert",
    "is_operator",
    "move",
    "new_indicator_item",
    "new_operator_item",
    "new_reference",
    "remove",
    "replace_item",
    "set_operator",
    # Conversions
    "flatten",
    "flatten_stored",
    "item_to_node",
    "parse",
    # Checks
    "chain_issues",
    "ensure_chain",
    "ensure_tree",
    "tree_issues",
    # Wire format
    "chain_from_dicts",
    "chain_to_dicts",
    "item_from_dict",
    "item_to_dict",
    "node_from_dict",
    "node_to_dict",
    "stored_from_wire",
    # Rendering
    "item_label",
    "tree_to_text",
]
