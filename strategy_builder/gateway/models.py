"""Request/response models for the strategy validation and test endpoints."""

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field

from strategy_builder.logic.serialization import node_to_dict
from strategy_builder.logic.tree import Node


class StrategyConditionsRequest(BaseModel):
    """Body shared by the validation and test endpoints."""

    buy_conditions: dict[str, Any]
    sell_conditions: dict[str, Any]

    @classmethod
    def from_trees(cls, buy: Node, sell: Node) -> "StrategyConditionsRequest":
        return cls(buy_conditions=node_to_dict(buy), sell_conditions=node_to_dict(sell))


class ValidationResult(BaseModel):
    """Verdict from the validation service."""

    valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def from_payload(cls, body: Any) -> Optional["ValidationResult"]:
        """Extract a verdict from a response body.

        Accepts ``{"data": {valid, errors, warnings}}`` envelopes as well as
        flat bodies. A missing ``valid`` means "valid if there are no
        errors"; non-list ``errors``/``warnings`` are treated as empty.

        Returns:
            ValidationResult, or None if the body carries no verdict
        """
        if not isinstance(body, dict):
            return None
        data = body.get("data") if isinstance(body.get("data"), dict) else body
        if not any(key in data for key in ("valid", "errors", "warnings")):
            return None

        errors = data.get("errors")
        warnings = data.get("warnings")
        errors = [str(e) for e in errors] if isinstance(errors, list) else []
        warnings = [str(w) for w in warnings] if isinstance(warnings, list) else []
        valid = data.get("valid")
        if not isinstance(valid, bool):
            valid = not errors
        return cls(valid=valid, errors=errors, warnings=warnings)


class SignalPoint(BaseModel):
    """One step of a test run."""

    timestamp: str
    signal: Optional[Literal["BUY", "SELL"]] = None


class StrategyRecord(BaseModel):
    """Persisted custom strategy, as handed to the storage collaborator.

    ``buy_conditions``/``sell_conditions`` hold wire-format nodes. Older
    records may keep a side as a list of nodes.
    """

    id: Optional[int] = None
    name: str
    description: Optional[str] = None
    is_public: bool = False
    buy_conditions: Union[dict[str, Any], list[dict[str, Any]], None] = None
    sell_conditions: Union[dict[str, Any], list[dict[str, Any]], None] = None
