"""Logic tree: the canonical, persisted form of a strategy rule.

A rule is a closed union of four node variants:

- IndicatorNode: leaf predicate on one indicator
- AndNode / OrNode: ordered combinators (two or more children is meaningful,
  a single child is tolerated as a pass-through)
- NotNode: negation of exactly one child

All nodes are frozen; children are stored as tuples.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from strategy_builder.indicators.catalog import IndicatorKind

logger = logging.getLogger(__name__)

Threshold = Union[float, int, str]


@dataclass(frozen=True)
class IndicatorRef:
    """Reference indicator a leaf is compared against."""

    kind: IndicatorKind
    params: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "kind", IndicatorKind(self.kind))


@dataclass(frozen=True)
class IndicatorNode:
    """Leaf predicate: ``kind(params) condition [threshold | reference]``.

    Attributes:
        kind: Indicator kind
        params: Indicator parameters
        condition: Condition kind, declared by the kind's catalog entry
        threshold: Numeric (or string) threshold, if the condition takes one
        reference: Reference indicator, if the condition takes one
    """

    kind: IndicatorKind
    params: dict[str, Any]
    condition: str
    threshold: Optional[Threshold] = None
    reference: Optional[IndicatorRef] = None

    def __post_init__(self):
        object.__setattr__(self, "kind", IndicatorKind(self.kind))


@dataclass(frozen=True)
class AndNode:
    """All children must hold."""

    children: tuple["Node", ...]

    def __post_init__(self):
        object.__setattr__(self, "children", tuple(self.children))


@dataclass(frozen=True)
class OrNode:
    """At least one child must hold."""

    children: tuple["Node", ...]

    def __post_init__(self):
        object.__setattr__(self, "children", tuple(self.children))


@dataclass(frozen=True)
class NotNode:
    """The child must not hold."""

    child: "Node"


Node = Union[IndicatorNode, AndNode, OrNode, NotNode]
Combinator = Union[AndNode, OrNode]

# Returned for an empty chain.
DEFAULT_PLACEHOLDER = IndicatorNode(
    kind=IndicatorKind.SMA,
    params={"period": 20, "source": "close"},
    condition="above",
    threshold=0,
)


def is_combinator(node: Node) -> bool:
    return isinstance(node, (AndNode, OrNode))


def iter_leaves(node: Node):
    """Yield indicator leaves depth-first, left to right."""
    if isinstance(node, IndicatorNode):
        yield node
    elif isinstance(node, (AndNode, OrNode)):
        for child in node.children:
            yield from iter_leaves(child)
    elif isinstance(node, NotNode):
        yield from iter_leaves(node.child)
    else:
        raise TypeError(f"Unknown node type: {type(node).__name__}")


def depth(node: Node) -> int:
    """Number of combinator levels (And/Or) on the deepest path."""
    if isinstance(node, IndicatorNode):
        return 0
    if isinstance(node, (AndNode, OrNode)):
        return 1 + max((depth(c) for c in node.children), default=0)
    if isinstance(node, NotNode):
        return depth(node.child)
    raise TypeError(f"Unknown node type: {type(node).__name__}")
