"""Indicator catalog: kinds, parameter schemas and supported conditions."""

from .catalog import (
    DEFAULT_CATALOG,
    ConditionOperand,
    ConditionSpec,
    IndicatorCatalog,
    IndicatorDescriptor,
    IndicatorKind,
    ParamSpec,
)

__all__ = [
    "DEFAULT_CATALOG",
    "ConditionOperand",
    "ConditionSpec",
    "IndicatorCatalog",
    "IndicatorDescriptor",
    "IndicatorKind",
    "ParamSpec",
]
