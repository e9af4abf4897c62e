"""Configuration module for strategy-builder.

Provides centralized configuration management using:
- Environment variables for secrets
- YAML files for overrides
- Pydantic for validation
"""

from config.settings import (
    Settings,
    get_settings,
    EditorConfig,
    LoggingConfig,
    ValidationServiceConfig,
)

__all__ = [
    "Settings",
    "get_settings",
    "EditorConfig",
    "LoggingConfig",
    "ValidationServiceConfig",
]
