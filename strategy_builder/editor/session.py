"""Editing session for one strategy's buy and sell chains.

The session owns both chains and their id sources, applies edits as
whole-chain replacements and tracks the latest validation outcome.

Validation is last write wins: each request takes a sequence number and a
response is only applied if no newer request has been made since. Edits
are never blocked by an in-flight request.
"""

from dataclasses import dataclass, field
from typing import Literal, Optional, Union

from strategy_builder.errors import (
    InvalidConditionError,
    StructuralError,
    TransportError,
    UnknownIndicatorError,
)
from strategy_builder.gateway.client import ValidationGateway
from strategy_builder.gateway.models import StrategyRecord, ValidationResult
from strategy_builder.indicators.catalog import DEFAULT_CATALOG, IndicatorCatalog, IndicatorKind
from strategy_builder.logic import chain as chain_ops
from strategy_builder.logic.chain import Chain, ChainItem, IdSource, IndicatorItem, Operator
from strategy_builder.logic.flatten import flatten_stored
from strategy_builder.logic.parse import parse
from strategy_builder.logic.serialization import stored_from_wire
from strategy_builder.logic.tree import Node
from strategy_builder.utils.logging import EditorEventLogger

events = EditorEventLogger(__name__)

Side = Literal["buy", "sell"]
ValidationStatus = Literal["idle", "pending", "valid", "invalid", "structural_error", "transport_error"]


@dataclass(frozen=True)
class ValidationState:
    """Latest validation outcome shown next to the editor."""

    status: ValidationStatus = "idle"
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @classmethod
    def from_result(cls, result: ValidationResult) -> "ValidationState":
        return cls(
            status="valid" if result.valid else "invalid",
            errors=tuple(result.errors),
            warnings=tuple(result.warnings),
        )


@dataclass
class _SideState:
    ids: IdSource
    chain: Chain = field(default=())


class EditorSession:
    """Buy/sell chain editor with last-write-wins validation.

    Example:
        >>> session = EditorSession(DEFAULT_CATALOG, gateway)
        >>> session.open()
        >>> session.add_indicator("buy", "rsi")
        >>> await session.request_validation()
    """

    def __init__(
        self,
        catalog: IndicatorCatalog = DEFAULT_CATALOG,
        gateway: Optional[ValidationGateway] = None,
        buy_prefix: str = "buy-",
        sell_prefix: str = "sell-",
    ):
        """Initialize the session.

        Args:
            catalog: Indicator catalog used for defaults and checks
            gateway: Validation gateway; without one, validation is unavailable
            buy_prefix: Id prefix for buy chain items
            sell_prefix: Id prefix for sell chain items
        """
        self.catalog = catalog
        self.gateway = gateway
        self._prefixes = {"buy": buy_prefix, "sell": sell_prefix}
        self._sides: dict[str, _SideState] = {}
        self._seq = 0
        self.record: Optional[StrategyRecord] = None
        self.validation = ValidationState()
        self.open()

    @classmethod
    def from_settings(
        cls,
        settings=None,
        catalog: IndicatorCatalog = DEFAULT_CATALOG,
        gateway: Optional[ValidationGateway] = None,
    ) -> "EditorSession":
        from config.settings import get_settings

        cfg = (settings or get_settings()).editor
        return cls(catalog, gateway, buy_prefix=cfg.buy_id_prefix, sell_prefix=cfg.sell_id_prefix)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def open(self, record: Optional[StrategyRecord] = None) -> None:
        """Load a stored strategy (or start a blank one).

        Stored sides are decoded and flattened with fresh id sources. Any
        pending validation result becomes stale.

        Raises:
            WireFormatError: If a stored side is malformed
            InvalidConditionError: If a stored leaf uses an unsupported condition
        """
        sides = {side: _SideState(ids=IdSource(prefix)) for side, prefix in self._prefixes.items()}
        if record is not None:
            for side, stored in (("buy", record.buy_conditions), ("sell", record.sell_conditions)):
                state = sides[side]
                nodes = stored_from_wire(stored, path=f"{side}_conditions")
                state.chain = flatten_stored(nodes, state.ids, self.catalog)

        # Nothing is replaced unless both sides loaded
        self.record = record
        self._sides = sides

        self._seq += 1
        self.validation = ValidationState()
        events.strategy_opened(
            record.name if record else None,
            buy_items=len(self._sides["buy"].chain),
            sell_items=len(self._sides["sell"].chain),
        )

    # ------------------------------------------------------------------
    # Chains and trees
    # ------------------------------------------------------------------

    def chain(self, side: Side) -> Chain:
        return self._side(side).chain

    @property
    def buy_chain(self) -> Chain:
        return self.chain("buy")

    @property
    def sell_chain(self) -> Chain:
        return self.chain("sell")

    def buy_tree(self) -> Node:
        return parse(self.buy_chain, self.catalog)

    def sell_tree(self) -> Node:
        return parse(self.sell_chain, self.catalog)

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def add_indicator(self, side: Side, kind: Union[IndicatorKind, str]) -> ChainItem:
        """Append an indicator tile with catalog defaults.

        Raises:
            UnknownIndicatorError: If the kind is not in the catalog
        """
        state = self._side(side)
        item = chain_ops.new_indicator_item(self.catalog, kind, state.ids)
        state.chain = chain_ops.append(state.chain, item)
        events.item_added(side, item.id, item.kind.value)
        return item

    def add_operator(self, side: Side, op: Union[Operator, str]) -> ChainItem:
        state = self._side(side)
        item = chain_ops.new_operator_item(op, state.ids)
        state.chain = chain_ops.append(state.chain, item)
        events.item_added(side, item.id, item.op.value)
        return item

    def insert(self, side: Side, index: int, item: ChainItem) -> None:
        state = self._side(side)
        state.chain = chain_ops.insert(state.chain, index, item)

    def remove(self, side: Side, index: int) -> ChainItem:
        state = self._side(side)
        item = state.chain[index] if 0 <= index < len(state.chain) else None
        state.chain = chain_ops.remove(state.chain, index)
        events.item_removed(side, item.id)
        return item

    def move(self, side: Side, source: int, target: int) -> None:
        state = self._side(side)
        state.chain = chain_ops.move(state.chain, source, target)

    def update_item(self, side: Side, item: ChainItem) -> None:
        """Replace the tile sharing ``item.id`` (params, condition, operand).

        Raises:
            UnknownIndicatorError: If an indicator tile's kind is not in the catalog
            InvalidConditionError: If the condition is not declared for the kind
            InvalidParamError: If a parameter is outside its declared bounds
            KeyError: If no tile has ``item.id``
        """
        state = self._side(side)
        if isinstance(item, IndicatorItem):
            self.catalog.check_condition(item.kind, item.condition)
            self.catalog.check_params(item.kind, item.params)
        state.chain = chain_ops.replace_item(state.chain, item)

    def set_operator(self, side: Side, item_id: str, op: Union[Operator, str]) -> None:
        state = self._side(side)
        state.chain = chain_ops.set_operator(state.chain, item_id, op)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    async def request_validation(self) -> Optional[ValidationState]:
        """Validate the current chains and apply the outcome if still current.

        Structural problems, and tiles the catalog rejects, are reported as
        ``structural_error`` without calling the gateway.
        Transport failures are recorded as ``transport_error`` and do not
        raise.

        Returns:
            The applied ValidationState, or None if a newer request (or a
            reload) superseded this one before it completed
        """
        if self.gateway is None:
            raise RuntimeError("EditorSession has no validation gateway")

        self._seq += 1
        seq = self._seq
        buy, sell = self.buy_chain, self.sell_chain
        events.validation_requested(seq)
        self.validation = ValidationState(status="pending")

        try:
            result = await self.gateway.validate_chains(buy, sell)
        except StructuralError as exc:
            outcome = ValidationState(status="structural_error", errors=tuple(exc.issues))
        except TransportError as exc:
            events.error("Validation transport failure", seq=seq, status_code=exc.status_code)
            outcome = ValidationState(status="transport_error", errors=(str(exc),))
        except (UnknownIndicatorError, InvalidConditionError) as exc:
            outcome = ValidationState(status="structural_error", errors=(str(exc),))
        else:
            outcome = ValidationState.from_result(result)

        if seq != self._seq:
            events.validation_discarded(seq, self._seq)
            return None

        self.validation = outcome
        events.validation_applied(seq, outcome.status, len(outcome.errors), len(outcome.warnings))
        return outcome

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _side(self, side: str) -> _SideState:
        try:
            return self._sides[side]
        except KeyError:
            raise ValueError(f"Unknown side '{side}', expected 'buy' or 'sell'") from None
