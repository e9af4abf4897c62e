"""Strategy Builder - visual buy/sell rule editing for custom strategies.

Users compose rules as a flat chain of indicator and operator tiles; the
canonical, persisted form is a logic tree of AND/OR/NOT groups over
indicator conditions.

Core Modules:
- indicators: Indicator catalog (params, defaults, supported conditions)
- logic: Tree and chain models, flatten/parse, local checks, wire format
- gateway: Validation and test service client
- editor: Editing session and three-step wizard
"""

from strategy_builder.errors import (
    StrategyBuilderError,
    StructuralError,
    StrategyValidationError,
    TransportError,
    UnknownIndicatorError,
    InvalidConditionError,
    InvalidParamError,
    WireFormatError,
)
from strategy_builder.indicators import DEFAULT_CATALOG, IndicatorCatalog, IndicatorKind
from strategy_builder.logic import (
    AndNode,
    IndicatorNode,
    IndicatorRef,
    NotNode,
    OrNode,
    IdSource,
    IndicatorItem,
    Operator,
    OperatorItem,
    flatten,
    parse,
    node_from_dict,
    node_to_dict,
)
from strategy_builder.gateway import SignalPoint, StrategyRecord, ValidationGateway, ValidationResult
from strategy_builder.editor import EditorSession, StrategyWizard, ValidationState

__all__ = [
    # Errors
    "StrategyBuilderError",
    "StructuralError",
    "StrategyValidationError",
    "TransportError",
    "UnknownIndicatorError",
    "InvalidConditionError",
    "InvalidParamError",
    "WireFormatError",
    # Catalog
    "DEFAULT_CATALOG",
    "IndicatorCatalog",
    "IndicatorKind",
    # Logic
    "AndNode",
    "IndicatorNode",
    "IndicatorRef",
    "NotNode",
    "OrNode",
    "IdSource",
    "IndicatorItem",
    "Operator",
    "OperatorItem",
    "flatten",
    "parse",
    "node_from_dict",
    "node_to_dict",
    # Gateway
    "SignalPoint",
    "StrategyRecord",
    "ValidationGateway",
    "ValidationResult",
    # Editor
    "EditorSession",
    "StrategyWizard",
    "ValidationState",
]
