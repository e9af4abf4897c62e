"""Editing session and step-by-step wizard for custom strategies."""

from .session import EditorSession, ValidationState
from .wizard import STEPS, StrategyWizard

__all__ = [
    "EditorSession",
    "ValidationState",
    "STEPS",
    "StrategyWizard",
]
