"""Tests for the indicator catalog."""

import pytest

from strategy_builder.errors import InvalidConditionError, InvalidParamError, UnknownIndicatorError
from strategy_builder.indicators.catalog import (
    DEFAULT_CATALOG,
    ConditionOperand,
    IndicatorKind,
)


class TestDescribe:
    """Tests for descriptor lookup."""

    def test_all_kinds_present(self):
        """Test the built-in catalog holds every kind in declaration order."""
        assert DEFAULT_CATALOG.kinds() == [
            IndicatorKind.SMA,
            IndicatorKind.EMA,
            IndicatorKind.RSI,
            IndicatorKind.MACD,
            IndicatorKind.BOLLINGER_BANDS,
            IndicatorKind.VWAP,
        ]
        assert len(DEFAULT_CATALOG) == 6

    def test_describe_by_wire_name(self):
        """Test lookup accepts the wire name."""
        descriptor = DEFAULT_CATALOG.describe("bollingerBands")
        assert descriptor.kind is IndicatorKind.BOLLINGER_BANDS
        assert descriptor.name == "BB"
        assert list(descriptor.params) == ["period", "multiplier", "source"]

    def test_unknown_kind_raises(self):
        """Test an unknown kind is an input error listing available kinds."""
        with pytest.raises(UnknownIndicatorError) as exc_info:
            DEFAULT_CATALOG.describe("stochastic")
        assert exc_info.value.kind == "stochastic"
        assert "rsi" in exc_info.value.available
        assert isinstance(exc_info.value, KeyError)

    def test_subset_excludes_other_kinds(self):
        """Test a reduced catalog only knows its kinds."""
        reduced = DEFAULT_CATALOG.subset("rsi", IndicatorKind.SMA)
        assert reduced.kinds() == [IndicatorKind.RSI, IndicatorKind.SMA]
        assert "macd" not in reduced
        with pytest.raises(UnknownIndicatorError):
            reduced.describe(IndicatorKind.MACD)

    def test_contains_ignores_garbage(self):
        """Test membership of an unknown name is False, not an error."""
        assert "rsi" in DEFAULT_CATALOG
        assert "nope" not in DEFAULT_CATALOG

    def test_params_are_read_only(self):
        """Test the param schema cannot be mutated."""
        descriptor = DEFAULT_CATALOG.describe("rsi")
        with pytest.raises(TypeError):
            descriptor.params["period"] = None


class TestDefaults:
    """Tests for defaults used when a tile is added."""

    @pytest.mark.parametrize(
        "kind,expected",
        [
            ("sma", {"period": 20, "source": "close"}),
            ("ema", {"period": 20, "source": "close"}),
            ("rsi", {"period": 14, "source": "close"}),
            ("macd", {"fastPeriod": 12, "slowPeriod": 26, "signalPeriod": 9}),
            ("bollingerBands", {"period": 20, "multiplier": 2, "source": "close"}),
        ],
    )
    def test_default_params(self, kind, expected):
        """Test default params per kind."""
        assert DEFAULT_CATALOG.default_params(kind) == expected

    def test_optional_param_without_default_omitted(self):
        """Test VWAP's optional period is left out of defaults."""
        assert DEFAULT_CATALOG.default_params("vwap") == {}
        assert DEFAULT_CATALOG.describe("vwap").params["period"].optional

    def test_default_condition_is_first_declared(self):
        """Test the default condition is the first in declaration order."""
        assert DEFAULT_CATALOG.default_condition("rsi") == "above"
        assert DEFAULT_CATALOG.default_condition("macd") == "signalAbove"
        assert DEFAULT_CATALOG.default_condition("bollingerBands") == "priceAboveUpper"
        assert DEFAULT_CATALOG.default_condition("vwap") == "priceAbove"


class TestConditions:
    """Tests for condition support checks."""

    def test_supported_condition(self):
        """Test conditions declared for a kind are supported."""
        assert DEFAULT_CATALOG.is_condition_supported("rsi", "oversold")
        assert DEFAULT_CATALOG.is_condition_supported("sma", "aboveIndicator")

    def test_unsupported_condition(self):
        """Test conditions from another kind are not supported."""
        assert not DEFAULT_CATALOG.is_condition_supported("rsi", "histogramPositive")
        with pytest.raises(InvalidConditionError) as exc_info:
            DEFAULT_CATALOG.check_condition("rsi", "histogramPositive")
        assert exc_info.value.kind == "rsi"
        assert "oversold" in exc_info.value.supported

    def test_check_condition_unknown_kind(self):
        """Test checking a condition on an unknown kind raises UnknownIndicatorError."""
        with pytest.raises(UnknownIndicatorError):
            DEFAULT_CATALOG.subset("rsi").check_condition("sma", "above")

    def test_operand_rules(self):
        """Test which operand each moving-average condition takes."""
        sma = DEFAULT_CATALOG.describe("sma")
        assert sma.condition("above").operand is ConditionOperand.THRESHOLD
        assert sma.condition("aboveIndicator").accepts_reference
        assert not sma.condition("aboveIndicator").accepts_threshold
        crosses = sma.condition("crossesAbove")
        assert crosses.accepts_threshold and crosses.accepts_reference

    def test_macd_conditions_take_no_operand(self):
        """Test MACD conditions compare internal lines only."""
        macd = DEFAULT_CATALOG.describe("macd")
        assert all(c.operand is ConditionOperand.NONE for c in macd.conditions)


class TestParamSpec:
    """Tests for ParamSpec.accepts."""

    def test_number_bounds(self):
        """Test numeric bounds are enforced."""
        period = DEFAULT_CATALOG.describe("rsi").params["period"]
        assert period.accepts(14)
        assert not period.accepts(1)
        assert not period.accepts(101)
        assert not period.accepts(True)

    def test_enum_options(self):
        """Test enum params only accept listed options."""
        source = DEFAULT_CATALOG.describe("sma").params["source"]
        assert source.accepts("high")
        assert not source.accepts("volume")

    def test_optional_accepts_none(self):
        """Test None is only valid for optional params."""
        assert DEFAULT_CATALOG.describe("vwap").params["period"].accepts(None)
        assert not DEFAULT_CATALOG.describe("sma").params["period"].accepts(None)


class TestCheckParams:
    """Tests for IndicatorCatalog.check_params."""

    def test_defaults_pass(self):
        """Test every kind accepts its own defaults."""
        for kind in DEFAULT_CATALOG.kinds():
            DEFAULT_CATALOG.check_params(kind, DEFAULT_CATALOG.default_params(kind))

    def test_out_of_bounds(self):
        """Test a period outside its bounds is rejected with its name."""
        with pytest.raises(InvalidParamError) as exc_info:
            DEFAULT_CATALOG.check_params("rsi", {"period": 500, "source": "close"})
        assert exc_info.value.name == "period"
        assert exc_info.value.value == 500

    def test_missing_required(self):
        """Test a required parameter cannot be left out."""
        with pytest.raises(InvalidParamError, match="'source'"):
            DEFAULT_CATALOG.check_params("sma", {"period": 20})

    def test_optional_may_be_omitted(self):
        """Test optional parameters may be absent."""
        DEFAULT_CATALOG.check_params("vwap", {})
