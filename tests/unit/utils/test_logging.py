"""Tests for structured logging setup."""

import json
import logging

import pytest

from config.settings import LoggingConfig, Settings
from strategy_builder.utils.logging import (
    EditorEventLogger,
    JSONFormatter,
    TextFormatter,
    setup_logging,
    setup_logging_from_settings,
)


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way the test found it."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="strategy_builder.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg="Validation applied: seq=%d",
        args=(3,),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestFormatters:
    """Tests for JSON and text formatters."""

    def test_json_fields(self):
        """Test the JSON payload carries message, level and context."""
        data = json.loads(JSONFormatter().format(_record(event="validation_applied", seq=3)))
        assert data["message"] == "Validation applied: seq=3"
        assert data["level"] == "INFO"
        assert data["logger"] == "strategy_builder.test"
        assert data["context"] == {"event": "validation_applied", "seq": 3}
        assert data["timestamp"].endswith("Z")

    def test_json_unserializable_extra(self):
        """Test non-JSON extras are stringified."""
        data = json.loads(JSONFormatter().format(_record(issues={"a"})))
        assert data["context"]["issues"] == "{'a'}"

    def test_json_without_extras(self):
        """Test extras can be switched off."""
        data = json.loads(JSONFormatter(include_extras=False).format(_record(seq=3)))
        assert "context" not in data

    def test_text_appends_context(self):
        """Test text lines end with key=value context."""
        line = TextFormatter().format(_record(side="buy"))
        assert "| INFO     | strategy_builder.test | Validation applied: seq=3" in line
        assert line.endswith("| side=buy")


class TestSetup:
    """Tests for setup_logging."""

    def test_console_and_file(self, tmp_path, restore_root_logger):
        """Test handlers are installed and the file is created."""
        log_file = tmp_path / "logs" / "builder.log"
        setup_logging(level="debug", format="text", file=log_file)
        root = restore_root_logger
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 2
        assert isinstance(root.handlers[0].formatter, TextFormatter)
        logging.getLogger("strategy_builder.x").info("hello")
        root.handlers[1].flush()
        assert "hello" in log_file.read_text()

    def test_from_settings(self, restore_root_logger):
        """Test logging is configured from Settings."""
        setup_logging_from_settings(Settings(logging=LoggingConfig(level="WARNING", format="json")))
        root = restore_root_logger
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, JSONFormatter)


class TestEditorEventLogger:
    """Tests for EditorEventLogger."""

    def test_discarded_is_warning(self, caplog):
        """Test stale validation results log a warning with context."""
        events = EditorEventLogger("strategy_builder.editor.test")
        with caplog.at_level(logging.WARNING):
            events.validation_discarded(2, 3)
        (record,) = caplog.records
        assert record.event == "validation_discarded"
        assert record.latest == 3

    def test_saved_is_info(self, caplog):
        """Test saves are logged at INFO."""
        events = EditorEventLogger("strategy_builder.editor.test")
        with caplog.at_level(logging.INFO):
            events.strategy_saved("Dip buyer", valid=True)
        assert caplog.records[0].strategy == "Dip buyer"
