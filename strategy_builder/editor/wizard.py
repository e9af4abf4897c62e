"""Three-step strategy wizard: buy conditions, sell conditions, details."""

import logging
from typing import Awaitable, Callable, Optional

from strategy_builder.editor.session import EditorSession
from strategy_builder.errors import StrategyValidationError, StructuralError, TransportError
from strategy_builder.gateway.models import StrategyRecord, ValidationResult
from strategy_builder.logic.chain import Chain, IndicatorItem
from strategy_builder.logic.checks import chain_issues
from strategy_builder.logic.parse import parse
from strategy_builder.logic.serialization import node_to_dict
from strategy_builder.utils.logging import EditorEventLogger

logger = logging.getLogger(__name__)
events = EditorEventLogger(__name__)

STEPS = ("Buy Conditions", "Sell Conditions", "Strategy Details")

SaveCallback = Callable[[StrategyRecord], Awaitable[None]]


def _has_condition(chain: Chain) -> bool:
    return any(isinstance(item, IndicatorItem) for item in chain)


class StrategyWizard:
    """Step-by-step flow around an EditorSession.

    Progression is gated locally (each side needs at least one condition);
    the validation service is only consulted on save.
    """

    def __init__(self, session: EditorSession, on_save: SaveCallback):
        """Initialize the wizard.

        Args:
            session: Session holding the chains being edited
            on_save: Coroutine function that persists the finished record
        """
        self.session = session
        self.on_save = on_save
        self.step = 0

    @property
    def step_name(self) -> str:
        return STEPS[self.step]

    @property
    def is_last_step(self) -> bool:
        return self.step == len(STEPS) - 1

    def next_step(self) -> int:
        """Advance one step.

        Returns:
            The new step index

        Raises:
            StructuralError: If the side being left has no conditions
        """
        if self.step == 0 and not _has_condition(self.session.buy_chain):
            raise StructuralError(["Please add at least one buy condition before continuing"])
        if self.step == 1 and not _has_condition(self.session.sell_chain):
            raise StructuralError(["Please add at least one sell condition before continuing"])
        self.step = min(self.step + 1, len(STEPS) - 1)
        return self.step

    def back(self) -> int:
        self.step = max(self.step - 1, 0)
        return self.step

    async def save(
        self,
        name: str,
        description: str = "",
        is_public: bool = False,
        proceed_on_errors: bool = False,
        skip_validation: bool = False,
    ) -> StrategyRecord:
        """Validate and persist the strategy.

        Args:
            name: Strategy name (required, non-blank)
            description: Optional description
            is_public: Share the strategy with other users
            proceed_on_errors: Save even if the service reports logical errors
            skip_validation: Save even if the service cannot be reached

        Returns:
            The record handed to ``on_save``

        Raises:
            StructuralError: If the name is blank or a chain is structurally unsound
            StrategyValidationError: If the rule is logically unsound and
                ``proceed_on_errors`` is False
            TransportError: If validation fails to complete and
                ``skip_validation`` is False
        """
        name = name.strip()
        # Validate and persist the same chains, even if edits land meanwhile
        buy, sell = self.session.buy_chain, self.session.sell_chain
        previous = self.session.record
        issues = [] if name else ["Please enter a strategy name"]
        issues += chain_issues(buy, "buy") + chain_issues(sell, "sell")
        if issues:
            raise StructuralError(issues)

        result: Optional[ValidationResult] = None
        try:
            if self.session.gateway is None:
                raise TransportError("No validation service configured")
            result = await self.session.gateway.validate_chains(buy, sell)
        except TransportError:
            if not skip_validation:
                raise
            logger.warning("Saving '%s' without validation", name)

        if result is not None and not result.valid:
            if not proceed_on_errors:
                raise StrategyValidationError(result.errors, result.warnings)
            logger.warning(
                "Saving '%s' despite validation errors",
                name, extra={"errors": result.errors},
            )

        record = StrategyRecord(
            id=previous.id if previous else None,
            name=name,
            description=description or None,
            is_public=is_public,
            buy_conditions=node_to_dict(parse(buy, self.session.catalog)),
            sell_conditions=node_to_dict(parse(sell, self.session.catalog)),
        )
        await self.on_save(record)
        events.strategy_saved(name, result.valid if result else None)
        return record
