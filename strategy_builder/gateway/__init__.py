"""Client for the external strategy validation/test service."""

from .client import ValidationGateway
from .models import SignalPoint, StrategyConditionsRequest, StrategyRecord, ValidationResult

__all__ = [
    "ValidationGateway",
    "SignalPoint",
    "StrategyConditionsRequest",
    "StrategyRecord",
    "ValidationResult",
]
