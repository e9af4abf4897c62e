"""Structured logging for strategy-builder.

Provides JSON-formatted logging with context support for
rule editing, validation round trips and debugging.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

# LogRecord attributes that are not user-supplied context
_RECORD_ATTRS = frozenset((
    "name", "msg", "args", "created", "filename",
    "funcName", "levelname", "levelno", "lineno",
    "module", "msecs", "pathname", "process",
    "processName", "relativeCreated", "stack_info",
    "thread", "threadName", "exc_info", "exc_text",
    "message", "asctime", "taskName",
))


def _record_extras(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def __init__(self, include_extras: bool = True):
        """Initialize JSON formatter.

        Args:
            include_extras: Include extra fields in output
        """
        super().__init__()
        self._include_extras = include_extras

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted string
        """
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add location info
        if record.pathname:
            log_data["location"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add extra fields
        if self._include_extras:
            extras = {}
            for key, value in _record_extras(record).items():
                try:
                    json.dumps(value)  # Check if serializable
                    extras[key] = value
                except (TypeError, ValueError):
                    extras[key] = str(value)

            if extras:
                log_data["context"] = extras

        return json.dumps(log_data)


class TextFormatter(logging.Formatter):
    """Text formatter with context support."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as text, appending ``key=value`` context."""
        base = super().format(record)

        extras = [f"{key}={value}" for key, value in _record_extras(record).items()]
        if extras:
            return f"{base} | {' '.join(extras)}"

        return base


class EditorEventLogger:
    """Specialized logger for strategy editing events.

    Provides methods for logging the rule editing lifecycle
    with structured context.

    Example:
        >>> events = EditorEventLogger("strategy_builder.editor")
        >>> events.item_added(side="buy", item_id="buy-0", kind="rsi")
    """

    def __init__(self, name: str):
        self._logger = logging.getLogger(name)

    def strategy_opened(self, name: str | None, buy_items: int, sell_items: int, **context: Any) -> None:
        """Log a strategy (or a blank one) being loaded into the editor.

        Args:
            name: Strategy name, None for a new strategy
            buy_items: Number of tiles in the buy chain
            sell_items: Number of tiles in the sell chain
            **context: Additional context
        """
        self._logger.info(
            f"Strategy opened: {name or '<new>'}",
            extra={
                "event": "strategy_opened",
                "strategy": name,
                "buy_items": buy_items,
                "sell_items": sell_items,
                **context,
            },
        )

    def item_added(self, side: str, item_id: str, kind: str, **context: Any) -> None:
        self._logger.debug(
            f"Item added: {side} {item_id} ({kind})",
            extra={"event": "item_added", "side": side, "item_id": item_id, "kind": kind, **context},
        )

    def item_removed(self, side: str, item_id: str, **context: Any) -> None:
        self._logger.debug(
            f"Item removed: {side} {item_id}",
            extra={"event": "item_removed", "side": side, "item_id": item_id, **context},
        )

    def validation_requested(self, seq: int, **context: Any) -> None:
        self._logger.debug(
            f"Validation requested: seq={seq}",
            extra={"event": "validation_requested", "seq": seq, **context},
        )

    def validation_applied(self, seq: int, status: str, errors: int, warnings: int, **context: Any) -> None:
        """Log a validation outcome being applied to the session.

        Args:
            seq: Sequence number of the request
            status: Resulting validation status
            errors: Number of errors reported
            warnings: Number of warnings reported
            **context: Additional context
        """
        self._logger.info(
            f"Validation applied: seq={seq} status={status}",
            extra={
                "event": "validation_applied",
                "seq": seq,
                "status": status,
                "errors": errors,
                "warnings": warnings,
                **context,
            },
        )

    def validation_discarded(self, seq: int, latest: int, **context: Any) -> None:
        """Log a stale validation response being dropped.

        Args:
            seq: Sequence number of the stale response
            latest: Sequence number of the newest request
            **context: Additional context
        """
        self._logger.warning(
            f"Stale validation discarded: seq={seq} latest={latest}",
            extra={"event": "validation_discarded", "seq": seq, "latest": latest, **context},
        )

    def strategy_saved(self, name: str, valid: bool | None, **context: Any) -> None:
        """Log a strategy being handed to storage.

        Args:
            name: Strategy name
            valid: Validation verdict, None if validation was skipped
            **context: Additional context
        """
        self._logger.info(
            f"Strategy saved: {name}",
            extra={"event": "strategy_saved", "strategy": name, "valid": valid, **context},
        )

    def error(self, message: str, **context: Any) -> None:
        self._logger.error(message, extra={"event": "error", **context})


def setup_logging(
    level: str = "INFO",
    format: str = "json",
    file: str | Path | None = None,
    rotate_size_mb: int = 10,
    retain_count: int = 5,
) -> None:
    """Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        format: Log format ('json' or 'text')
        file: Log file path (None for stdout only)
        rotate_size_mb: Log rotation size in MB
        retain_count: Number of rotated files to retain
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    # Remove existing handlers
    root_logger.handlers.clear()

    if format == "json":
        formatter = JSONFormatter()
    else:
        formatter = TextFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if file:
        file_path = Path(file)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            file_path,
            maxBytes=rotate_size_mb * 1024 * 1024,
            backupCount=retain_count,
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(logging.WARNING, root_logger.level))


def setup_logging_from_settings(settings=None) -> None:
    """Configure logging from ``Settings.logging``.

    Args:
        settings: Settings instance (defaults to ``get_settings()``)
    """
    from config.settings import get_settings

    cfg = (settings or get_settings()).logging
    setup_logging(
        level=cfg.level,
        format=cfg.format,
        file=cfg.file,
        rotate_size_mb=cfg.rotate_size_mb,
        retain_count=cfg.retain_count,
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
