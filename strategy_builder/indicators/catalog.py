"""Indicator catalog: the indicator kinds a rule can reference.

Each descriptor declares the indicator's parameter schema and the
conditions it supports. The catalog is a plain read-only value; callers
receive it as an argument so tests can pass a reduced one.

Example:
    >>> catalog = DEFAULT_CATALOG
    >>> catalog.default_params(IndicatorKind.RSI)
    {'period': 14, 'source': 'close'}
    >>> catalog.default_condition("rsi")
    'above'
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator, Literal, Mapping, Optional, Union

from strategy_builder.errors import InvalidConditionError, InvalidParamError, UnknownIndicatorError

logger = logging.getLogger(__name__)


class IndicatorKind(str, Enum):
    """Indicator kinds, valued by their wire name."""

    SMA = "sma"
    EMA = "ema"
    RSI = "rsi"
    MACD = "macd"
    BOLLINGER_BANDS = "bollingerBands"
    VWAP = "vwap"


class ConditionOperand(str, Enum):
    """What a condition compares the indicator against."""

    NONE = "none"
    THRESHOLD = "threshold"
    REFERENCE = "reference"
    EITHER = "either"  # threshold or reference indicator


@dataclass(frozen=True)
class ParamSpec:
    """Schema for one indicator parameter.

    Attributes:
        name: Parameter key used in ``params`` dicts
        label: Short display label
        description: Help text
        type: Semantic type, ``number`` or ``enum``
        default: Default value (None for optional params without one)
        minimum: Lower bound for numbers
        maximum: Upper bound for numbers
        step: Input step for numbers
        options: Allowed values for enums
        optional: Whether the parameter may be omitted
    """

    name: str
    label: str
    description: str
    type: Literal["number", "enum"]
    default: Optional[Union[float, str]] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    step: Optional[float] = None
    options: tuple[str, ...] = ()
    optional: bool = False

    def accepts(self, value: Any) -> bool:
        """Check whether a value satisfies this parameter's type and bounds."""
        if value is None:
            return self.optional
        if self.type == "enum":
            return value in self.options
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        if self.minimum is not None and value < self.minimum:
            return False
        if self.maximum is not None and value > self.maximum:
            return False
        return True


@dataclass(frozen=True)
class ConditionSpec:
    """A condition an indicator supports."""

    value: str
    label: str
    description: str
    operand: ConditionOperand = ConditionOperand.NONE

    @property
    def accepts_threshold(self) -> bool:
        return self.operand in (ConditionOperand.THRESHOLD, ConditionOperand.EITHER)

    @property
    def accepts_reference(self) -> bool:
        return self.operand in (ConditionOperand.REFERENCE, ConditionOperand.EITHER)


@dataclass(frozen=True)
class IndicatorDescriptor:
    """Catalog entry for one indicator kind.

    Attributes:
        kind: Indicator kind
        name: Short name shown on tiles (e.g. "RSI")
        full_name: Long name
        description: Help text
        params: Ordered, read-only mapping of parameter name to ParamSpec
        conditions: Ordered supported conditions; the first is the default
    """

    kind: IndicatorKind
    name: str
    full_name: str
    description: str
    params: Mapping[str, ParamSpec]
    conditions: tuple[ConditionSpec, ...]

    @property
    def condition_values(self) -> list[str]:
        return [c.value for c in self.conditions]

    def condition(self, value: str) -> Optional[ConditionSpec]:
        for spec in self.conditions:
            if spec.value == value:
                return spec
        return None


def _descriptor(
    kind: IndicatorKind,
    name: str,
    full_name: str,
    description: str,
    params: list[ParamSpec],
    conditions: list[ConditionSpec],
) -> IndicatorDescriptor:
    return IndicatorDescriptor(
        kind=kind,
        name=name,
        full_name=full_name,
        description=description,
        params=MappingProxyType({p.name: p for p in params}),
        conditions=tuple(conditions),
    )


@dataclass(frozen=True)
class IndicatorCatalog:
    """Read-only table of indicator descriptors keyed by kind."""

    entries: Mapping[IndicatorKind, IndicatorDescriptor] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @classmethod
    def from_descriptors(cls, descriptors: list[IndicatorDescriptor]) -> "IndicatorCatalog":
        return cls(entries=MappingProxyType({d.kind: d for d in descriptors}))

    def __contains__(self, kind: object) -> bool:
        try:
            return IndicatorKind(kind) in self.entries
        except ValueError:
            return False

    def __iter__(self) -> Iterator[IndicatorDescriptor]:
        return iter(self.entries.values())

    def __len__(self) -> int:
        return len(self.entries)

    def kinds(self) -> list[IndicatorKind]:
        """List catalog kinds in declaration order."""
        return list(self.entries.keys())

    def describe(self, kind: Union[IndicatorKind, str]) -> IndicatorDescriptor:
        """Look up the descriptor for an indicator kind.

        Args:
            kind: Indicator kind or its wire name

        Returns:
            The kind's descriptor

        Raises:
            UnknownIndicatorError: If the kind is not in this catalog
        """
        available = [k.value for k in self.entries]
        try:
            key = IndicatorKind(kind)
        except ValueError:
            raise UnknownIndicatorError(str(kind), available) from None
        if key not in self.entries:
            raise UnknownIndicatorError(key.value, available)
        return self.entries[key]

    def default_params(self, kind: Union[IndicatorKind, str]) -> dict[str, Any]:
        """Default parameter values for a new indicator item.

        Optional parameters without a default are left out.
        """
        descriptor = self.describe(kind)
        return {
            name: spec.default
            for name, spec in descriptor.params.items()
            if spec.default is not None
        }

    def default_condition(self, kind: Union[IndicatorKind, str]) -> str:
        return self.describe(kind).conditions[0].value

    def condition_spec(self, kind: Union[IndicatorKind, str], condition: str) -> Optional[ConditionSpec]:
        return self.describe(kind).condition(condition)

    def is_condition_supported(self, kind: Union[IndicatorKind, str], condition: str) -> bool:
        return self.condition_spec(kind, condition) is not None

    def check_condition(self, kind: Union[IndicatorKind, str], condition: str) -> None:
        """Raise if ``condition`` is not declared for ``kind``.

        Raises:
            UnknownIndicatorError: If the kind is not in this catalog
            InvalidConditionError: If the condition is not supported
        """
        descriptor = self.describe(kind)
        if descriptor.condition(condition) is None:
            raise InvalidConditionError(
                descriptor.kind.value, condition, descriptor.condition_values
            )

    def check_params(self, kind: Union[IndicatorKind, str], params: Mapping[str, Any]) -> None:
        """Raise if any value in ``params`` falls outside its declared schema.

        Names the kind does not declare are ignored; omitted optional
        parameters are fine.

        Raises:
            UnknownIndicatorError: If the kind is not in this catalog
            InvalidParamError: If a value has the wrong type or is out of bounds
        """
        descriptor = self.describe(kind)
        for name, spec in descriptor.params.items():
            if name not in params and spec.optional:
                continue
            value = params.get(name)
            if not spec.accepts(value):
                raise InvalidParamError(descriptor.kind.value, name, value)

    def subset(self, *kinds: Union[IndicatorKind, str]) -> "IndicatorCatalog":
        """Build a reduced catalog holding only the given kinds."""
        return IndicatorCatalog.from_descriptors([self.describe(k) for k in kinds])


# -----------------------------------------------------------------------------
# Built-in descriptors
# -----------------------------------------------------------------------------

_PRICE_SOURCES = ("close", "open", "high", "low")


def _source_param() -> ParamSpec:
    return ParamSpec(
        name="source",
        label="Price Source",
        description="Which price to use: close, open, high, or low",
        type="enum",
        default="close",
        options=_PRICE_SOURCES,
    )


def _period_param(default: int, minimum: int, maximum: int, description: str) -> ParamSpec:
    return ParamSpec(
        name="period",
        label="Period",
        description=description,
        type="number",
        default=default,
        minimum=minimum,
        maximum=maximum,
        step=1,
    )


def _moving_average_conditions(name: str, others: str) -> list[ConditionSpec]:
    return [
        ConditionSpec("above", "Above Value", f"{name} is above a specific number", ConditionOperand.THRESHOLD),
        ConditionSpec("below", "Below Value", f"{name} is below a specific number", ConditionOperand.THRESHOLD),
        ConditionSpec(
            "aboveIndicator", f"Above Another {others}",
            f"{name} is above another {others} indicator", ConditionOperand.REFERENCE,
        ),
        ConditionSpec(
            "belowIndicator", f"Below Another {others}",
            f"{name} is below another {others} indicator", ConditionOperand.REFERENCE,
        ),
        ConditionSpec(
            "crossesAbove", "Crosses Above",
            f"{name} crosses above another {others} or value", ConditionOperand.EITHER,
        ),
        ConditionSpec(
            "crossesBelow", "Crosses Below",
            f"{name} crosses below another {others} or value", ConditionOperand.EITHER,
        ),
    ]


SMA = _descriptor(
    IndicatorKind.SMA,
    "SMA",
    "Simple Moving Average",
    "The average price over a specified number of periods. Smooths out price "
    "fluctuations to identify trends.",
    [
        _period_param(20, 1, 500, "Number of periods to average (e.g., 20, 50, 200)"),
        _source_param(),
    ],
    _moving_average_conditions("SMA", "SMA"),
)

EMA = _descriptor(
    IndicatorKind.EMA,
    "EMA",
    "Exponential Moving Average",
    "A moving average that gives more weight to recent prices, making it more "
    "responsive to price changes than SMA.",
    [
        _period_param(20, 1, 500, "Number of periods to average (e.g., 12, 26, 50)"),
        _source_param(),
    ],
    _moving_average_conditions("EMA", "EMA/SMA"),
)

RSI = _descriptor(
    IndicatorKind.RSI,
    "RSI",
    "Relative Strength Index",
    "A momentum oscillator ranging from 0 to 100. Above 70 is typically "
    "overbought, below 30 is oversold.",
    [
        _period_param(14, 2, 100, "Number of periods for RSI calculation (typically 14)"),
        _source_param(),
    ],
    [
        ConditionSpec("above", "Above Value", "RSI is above a specific number (0-100)", ConditionOperand.THRESHOLD),
        ConditionSpec("below", "Below Value", "RSI is below a specific number (0-100)", ConditionOperand.THRESHOLD),
        ConditionSpec("overbought", "Overbought", "RSI is overbought (default: above 70)", ConditionOperand.THRESHOLD),
        ConditionSpec("oversold", "Oversold", "RSI is oversold (default: below 30)", ConditionOperand.THRESHOLD),
        ConditionSpec("crossesAbove", "Crosses Above", "RSI crosses above a threshold", ConditionOperand.EITHER),
        ConditionSpec("crossesBelow", "Crosses Below", "RSI crosses below a threshold", ConditionOperand.EITHER),
    ],
)

MACD = _descriptor(
    IndicatorKind.MACD,
    "MACD",
    "Moving Average Convergence Divergence",
    "A trend-following momentum indicator built from two moving averages: "
    "MACD line, signal line and histogram.",
    [
        ParamSpec("fastPeriod", "Fast Period", "Period for fast EMA (typically 12)", "number", 12, 1, 100, 1),
        ParamSpec("slowPeriod", "Slow Period", "Period for slow EMA (typically 26)", "number", 26, 1, 200, 1),
        ParamSpec("signalPeriod", "Signal Period", "Period for signal line EMA (typically 9)", "number", 9, 1, 50, 1),
    ],
    [
        ConditionSpec("signalAbove", "Signal Above", "MACD line is above signal line"),
        ConditionSpec("signalBelow", "Signal Below", "MACD line is below signal line"),
        ConditionSpec("crossesAboveSignal", "Crosses Above Signal", "MACD line crosses above signal line (bullish)"),
        ConditionSpec("crossesBelowSignal", "Crosses Below Signal", "MACD line crosses below signal line (bearish)"),
        ConditionSpec("histogramPositive", "Histogram Positive", "MACD histogram is positive"),
        ConditionSpec("histogramNegative", "Histogram Negative", "MACD histogram is negative"),
    ],
)

BOLLINGER_BANDS = _descriptor(
    IndicatorKind.BOLLINGER_BANDS,
    "BB",
    "Bollinger Bands",
    "A volatility indicator: a middle SMA band and two outer bands a number "
    "of standard deviations away.",
    [
        _period_param(20, 1, 200, "Number of periods for SMA calculation (typically 20)"),
        ParamSpec(
            "multiplier", "Multiplier",
            "Number of standard deviations for bands (typically 2)",
            "number", 2, 0.1, 5, 0.1,
        ),
        _source_param(),
    ],
    [
        ConditionSpec("priceAboveUpper", "Price Above Upper Band", "Current price is above upper Bollinger Band"),
        ConditionSpec("priceBelowLower", "Price Below Lower Band", "Current price is below lower Bollinger Band"),
    ],
)

VWAP = _descriptor(
    IndicatorKind.VWAP,
    "VWAP",
    "Volume Weighted Average Price",
    "The average price traded over the session, weighted by volume. Often "
    "used as a trading benchmark.",
    [
        ParamSpec(
            "period", "Period",
            "Number of periods (optional, uses all data if not specified)",
            "number", None, 1, 1000, 1, optional=True,
        ),
    ],
    [
        ConditionSpec("priceAbove", "Price Above VWAP", "Current price is above VWAP"),
        ConditionSpec("priceBelow", "Price Below VWAP", "Current price is below VWAP"),
        ConditionSpec("above", "VWAP Above Value", "VWAP is above a specific number", ConditionOperand.THRESHOLD),
        ConditionSpec("below", "VWAP Below Value", "VWAP is below a specific number", ConditionOperand.THRESHOLD),
    ],
)

DEFAULT_CATALOG = IndicatorCatalog.from_descriptors([SMA, EMA, RSI, MACD, BOLLINGER_BANDS, VWAP])
