"""Chain: the flat, order-preserving list of tiles a user edits.

A chain is a tuple of IndicatorItem and OperatorItem values. Every edit
returns a new tuple; nothing is mutated in place.

Ids come from an IdSource passed in by the caller, so two sessions (or two
tests) never share a counter.
"""

import itertools
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional, Union

from strategy_builder.indicators.catalog import IndicatorCatalog, IndicatorKind
from strategy_builder.logic.tree import IndicatorRef, Threshold

logger = logging.getLogger(__name__)


class Operator(str, Enum):
    """Logical operator tiles."""

    AND = "and"
    OR = "or"
    NOT = "not"


@dataclass(frozen=True)
class IndicatorItem:
    """Indicator tile."""

    id: str
    kind: IndicatorKind
    params: dict[str, Any]
    condition: str
    threshold: Optional[Threshold] = None
    reference: Optional[IndicatorRef] = None

    def __post_init__(self):
        object.__setattr__(self, "kind", IndicatorKind(self.kind))


@dataclass(frozen=True)
class OperatorItem:
    """Operator tile (AND, OR or NOT)."""

    id: str
    op: Operator

    def __post_init__(self):
        object.__setattr__(self, "op", Operator(self.op))


ChainItem = Union[IndicatorItem, OperatorItem]
Chain = tuple[ChainItem, ...]


@dataclass
class IdSource:
    """Monotonic id counter for chain items.

    Ids are ``{prefix}{tag}{n}``: ``buy-0`` for indicators, ``buy-op-1``
    for AND/OR and ``buy-not-2`` for NOT.
    """

    prefix: str = ""
    start: int = 0
    _counter: Any = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        self._counter = itertools.count(self.start)

    def next_id(self, tag: str = "") -> str:
        return f"{self.prefix}{tag}{next(self._counter)}"

    def for_operator(self, op: Operator) -> str:
        return self.next_id("not-" if op == Operator.NOT else "op-")


def is_operator(item: ChainItem, *ops: Operator) -> bool:
    """True if ``item`` is an operator tile (optionally one of ``ops``)."""
    if not isinstance(item, OperatorItem):
        return False
    return not ops or item.op in ops


# -----------------------------------------------------------------------------
# Item factories
# -----------------------------------------------------------------------------

def new_indicator_item(
    catalog: IndicatorCatalog,
    kind: Union[IndicatorKind, str],
    ids: IdSource,
) -> IndicatorItem:
    """Create an indicator tile pre-filled from the catalog.

    Args:
        catalog: Catalog supplying default params and condition
        kind: Indicator kind
        ids: Id source for the new tile

    Returns:
        IndicatorItem with default params and the kind's first condition

    Raises:
        UnknownIndicatorError: If the kind is not in the catalog
    """
    descriptor = catalog.describe(kind)
    return IndicatorItem(
        id=ids.next_id(),
        kind=descriptor.kind,
        params=catalog.default_params(descriptor.kind),
        condition=catalog.default_condition(descriptor.kind),
    )


def new_operator_item(op: Union[Operator, str], ids: IdSource) -> OperatorItem:
    op = Operator(op)
    return OperatorItem(id=ids.for_operator(op), op=op)


def new_reference(catalog: IndicatorCatalog, kind: Union[IndicatorKind, str]) -> IndicatorRef:
    """Reference indicator pre-filled with the kind's default params."""
    descriptor = catalog.describe(kind)
    return IndicatorRef(kind=descriptor.kind, params=catalog.default_params(descriptor.kind))


# -----------------------------------------------------------------------------
# Chain edits
# -----------------------------------------------------------------------------

def append(chain: Chain, item: ChainItem) -> Chain:
    return (*chain, item)


def insert(chain: Chain, index: int, item: ChainItem) -> Chain:
    """Insert ``item`` before position ``index`` (clamped to the chain)."""
    index = max(0, min(index, len(chain)))
    return (*chain[:index], item, *chain[index:])


def remove(chain: Chain, index: int) -> Chain:
    """Remove the item at ``index``.

    Raises:
        IndexError: If ``index`` is out of range
    """
    if not 0 <= index < len(chain):
        raise IndexError(f"Chain index {index} out of range (length {len(chain)})")
    return (*chain[:index], *chain[index + 1:])


def move(chain: Chain, source: int, target: int) -> Chain:
    """Move the item at ``source`` so it lands at ``target``.

    The item is taken out first and then inserted at ``target`` in the
    shortened chain, the way a drag-and-drop splice works.
    """
    item = chain[source] if 0 <= source < len(chain) else None
    if item is None:
        raise IndexError(f"Chain index {source} out of range (length {len(chain)})")
    return insert(remove(chain, source), target, item)


def index_of(chain: Chain, item_id: str) -> int:
    """Position of the item with ``item_id``, or -1."""
    for i, item in enumerate(chain):
        if item.id == item_id:
            return i
    return -1


def replace_item(chain: Chain, updated: ChainItem) -> Chain:
    """Replace the item sharing ``updated.id``.

    Raises:
        KeyError: If no item has that id
    """
    index = index_of(chain, updated.id)
    if index < 0:
        raise KeyError(f"No chain item with id '{updated.id}'")
    return (*chain[:index], updated, *chain[index + 1:])


def set_operator(chain: Chain, item_id: str, op: Union[Operator, str]) -> Chain:
    """Change the operator of an operator tile, keeping its id."""
    index = index_of(chain, item_id)
    if index < 0:
        raise KeyError(f"No chain item with id '{item_id}'")
    item = chain[index]
    if not isinstance(item, OperatorItem):
        raise TypeError(f"Chain item '{item_id}' is not an operator")
    return replace_item(chain, replace(item, op=Operator(op)))
