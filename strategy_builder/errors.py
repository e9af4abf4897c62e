"""Exception taxonomy for the strategy builder.

- StructuralError: the rule cannot be sent anywhere (empty chain, NOT
  without operand, empty combinator). Raised locally, never transmitted.
- StrategyValidationError: the validation service judged the rule
  logically unsound. Non-fatal, the caller may proceed after acknowledging.
- TransportError: the validation service could not be reached or answered
  with something unusable.
- UnknownIndicatorError / InvalidConditionError / InvalidParamError /
  WireFormatError: bad input.
"""

from typing import Any, Optional


class StrategyBuilderError(Exception):
    """Base class for all strategy builder errors."""


class StructuralError(StrategyBuilderError):
    """A chain or tree is not structurally sound.

    Attributes:
        issues: User-actionable messages, one per problem found
    """

    def __init__(self, issues: list[str]):
        self.issues = list(issues)
        super().__init__("; ".join(self.issues) or "Invalid rule structure")


class StrategyValidationError(StrategyBuilderError):
    """The validation service reported logical errors."""

    def __init__(self, errors: list[str], warnings: Optional[list[str]] = None):
        self.errors = list(errors)
        self.warnings = list(warnings or [])
        message = "Validation failed:\n" + "\n".join(self.errors) if self.errors else (
            "Strategy validation failed. Please review your conditions."
        )
        super().__init__(message)


class TransportError(StrategyBuilderError):
    """The validation service call failed before producing a verdict."""

    def __init__(self, message: str = "Failed to validate strategy", status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    def __str__(self) -> str:
        if self.status_code:
            return f"{self.message} (HTTP {self.status_code})"
        return self.message


class UnknownIndicatorError(StrategyBuilderError, KeyError):
    """Indicator kind is not in the catalog."""

    def __init__(self, kind: str, available: list[str]):
        self.kind = kind
        self.available = available
        super().__init__(f"Indicator '{kind}' not found. Available: {available}")

    def __str__(self) -> str:
        return self.args[0]


class InvalidConditionError(StrategyBuilderError, ValueError):
    """Condition is not declared for the indicator kind."""

    def __init__(self, kind: str, condition: str, supported: list[str]):
        self.kind = kind
        self.condition = condition
        self.supported = supported
        super().__init__(
            f"Condition '{condition}' is not supported by '{kind}'. Supported: {supported}"
        )


class InvalidParamError(StrategyBuilderError, ValueError):
    """A parameter value is outside its declared type or bounds."""

    def __init__(self, kind: str, name: str, value: Any):
        self.kind = kind
        self.name = name
        self.value = value
        super().__init__(f"Parameter '{name}' of '{kind}' does not accept {value!r}")


class WireFormatError(StrategyBuilderError, ValueError):
    """A serialized node or chain item is malformed."""
