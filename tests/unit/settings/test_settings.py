"""Tests for settings loading."""

import pytest
import yaml
from pydantic import ValidationError

from config.settings import Settings, ValidationServiceConfig


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self):
        """Test default values."""
        settings = Settings()
        assert settings.validation.validate_path == "/custom-strategies/validate"
        assert settings.validation.test_path == "/custom-strategies/test"
        assert settings.editor.buy_id_prefix == "buy-"
        assert settings.logging.file is None

    def test_environment_choices(self):
        """Test only development and production environments are accepted."""
        assert Settings(environment="production").environment == "production"
        with pytest.raises(ValidationError):
            Settings(environment="paper")

    def test_env_override(self, monkeypatch):
        """Test environment variables override defaults."""
        monkeypatch.setenv("VALIDATION_BASE_URL", "https://api.example.test/")
        monkeypatch.setenv("VALIDATION_TIMEOUT", "2.5")
        cfg = ValidationServiceConfig()
        assert cfg.base_url == "https://api.example.test"
        assert cfg.timeout == 2.5

    def test_from_yaml(self, tmp_path):
        """Test loading nested sections from YAML."""
        path = tmp_path / "settings.yaml"
        path.write_text(yaml.safe_dump({
            "environment": "production",
            "validation": {"base_url": "http://svc:3001/api", "timeout": 5},
            "logging": {"level": "DEBUG", "format": "text"},
        }))
        settings = Settings.from_yaml(path)
        assert settings.environment == "production"
        assert settings.validation.base_url == "http://svc:3001/api"
        assert settings.validation.timeout == 5.0
        assert settings.logging.format == "text"

    def test_from_missing_yaml(self, tmp_path):
        """Test a missing file yields defaults."""
        assert Settings.from_yaml(tmp_path / "absent.yaml") == Settings()

    def test_to_yaml_excludes_token(self, tmp_path):
        """Test the bearer token is never written out."""
        settings = Settings(validation=ValidationServiceConfig(auth_token="s3cret"))
        path = tmp_path / "out" / "settings.yaml"
        settings.to_yaml(path)
        data = yaml.safe_load(path.read_text())
        assert "auth_token" not in data["validation"]
        assert data["editor"]["sell_id_prefix"] == "sell-"
