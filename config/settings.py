"""Pydantic settings for configuration management."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import yaml


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO", description="Log level")
    format: Literal["json", "text"] = Field(
        default="json",
        description="Log format",
    )
    file: Path | None = Field(
        default=None,
        description="Log file path (None for stdout only)",
    )
    rotate_size_mb: int = Field(
        default=10,
        description="Log file rotation size in MB",
    )
    retain_count: int = Field(
        default=5,
        description="Number of rotated log files to retain",
    )


class ValidationServiceConfig(BaseSettings):
    """External strategy validation/test service."""

    model_config = SettingsConfigDict(env_prefix="VALIDATION_")

    base_url: str = Field(
        default="http://localhost:3001/api",
        description="Base URL of the strategy API",
    )
    validate_path: str = Field(
        default="/custom-strategies/validate",
        description="Path of the validation endpoint",
    )
    test_path: str = Field(
        default="/custom-strategies/test",
        description="Path of the test (signal preview) endpoint",
    )
    timeout: float = Field(default=15.0, description="HTTP request timeout in seconds")
    auth_token: str = Field(default="", description="Bearer token sent with each request")

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URL so paths can be appended directly."""
        return v.rstrip("/")


class EditorConfig(BaseSettings):
    """Strategy editor configuration."""

    model_config = SettingsConfigDict(env_prefix="EDITOR_")

    buy_id_prefix: str = Field(default="buy-", description="Id prefix for buy chain items")
    sell_id_prefix: str = Field(default="sell-", description="Id prefix for sell chain items")


class Settings(BaseSettings):
    """Main settings class combining all configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: Literal["development", "production"] = Field(
        default="development",
        description="Environment type",
    )

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    validation: ValidationServiceConfig = Field(default_factory=ValidationServiceConfig)
    editor: EditorConfig = Field(default_factory=EditorConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Settings instance (defaults if the file does not exist)
        """
        path = Path(path)
        if not path.exists():
            return cls()

        with open(path) as f:
            config_dict = yaml.safe_load(f) or {}

        return cls(**config_dict)

    def to_yaml(self, path: str | Path) -> None:
        """Save settings to YAML file.

        Args:
            path: Path to save configuration
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        # Convert to dict, excluding secrets
        config_dict = self.model_dump(
            mode="json",
            exclude={"validation": {"auth_token"}},
        )

        with open(path, "w") as f:
            yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings instance
    """
    # Try to load from config file first
    config_path = Path("config/strategy_builder.yaml")
    if config_path.exists():
        return Settings.from_yaml(config_path)

    return Settings()
