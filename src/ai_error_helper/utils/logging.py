"""Structured logging for the AI Error Helper.

Every entry is rendered by structlog as JSON or coloured console output and
passes through the same :class:`SecretRedactor` used for outgoing prompts,
so the Gemini ``key=`` query parameter, Murf ``api-key`` header values and
Anthropic keys never reach a log sink.

Output always goes to stderr; stdout belongs to the stdio webview bridge.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator, MutableMapping
from contextlib import contextmanager
from enum import StrEnum
from functools import cache
from pathlib import Path
from typing import Any

import structlog

from ai_error_helper.utils.security import SecretRedactor

SERVICE_NAME = "ai-error-helper"


class LogFormat(StrEnum):
    """Log output format options."""

    JSON = "json"
    CONSOLE = "console"


class LogLevel(StrEnum):
    """Log level options."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@cache
def _log_redactor() -> SecretRedactor:
    return SecretRedactor()


def sanitize_log_value(value: Any) -> Any:
    """Redact secrets from a log value, descending into dicts, lists and tuples."""
    if isinstance(value, str):
        return _log_redactor().redact(value)
    if isinstance(value, dict):
        return {key: sanitize_log_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(sanitize_log_value(item) for item in value)
    return value


def secret_sanitizer(
    logger: Any,
    method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Structlog processor redacting every value of the event."""
    return {key: sanitize_log_value(value) for key, value in event_dict.items()}


def add_context_processor(
    logger: Any,
    method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Stamp entries with the service name and package version."""
    event_dict.setdefault("service", SERVICE_NAME)

    try:
        from ai_error_helper._version import __version__
    except (ImportError, RuntimeError):
        return event_dict

    event_dict.setdefault("version", __version__)
    return event_dict


def _renderer(log_format: LogFormat) -> Any:
    if log_format == LogFormat.JSON:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=sys.stderr.isatty(), exception_formatter=structlog.dev.plain_traceback
    )


def _file_handler(file_path: Path) -> logging.Handler:
    file_path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(file_path)


def configure_logging(
    level: LogLevel | str = LogLevel.INFO,
    log_format: LogFormat | str = LogFormat.JSON,
    file_path: Path | str | None = None,
    file_enabled: bool = False,
) -> None:
    """Configure structlog and the stdlib root logger.

    Safe to call more than once: the CLI configures logging from its flags
    first and again once the configuration file has been read.

    Args:
        level: Log level name (case-insensitive)
        log_format: ``json`` or ``console``
        file_path: Optional log file, created with its parent directories
        file_enabled: Whether ``file_path`` is used
    """
    level = LogLevel(str(level).upper())
    log_format = LogFormat(str(log_format).lower())
    numeric_level = getattr(logging, level.value)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_context_processor,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            secret_sanitizer,
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            _renderer(log_format),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    file_error: OSError | None = None
    if file_enabled and file_path:
        try:
            handlers.append(_file_handler(Path(file_path).expanduser()))
        except OSError as e:
            file_error = e

    for handler in handlers:
        handler.setLevel(numeric_level)
    logging.basicConfig(format="%(message)s", level=numeric_level, handlers=handlers, force=True)

    if file_error is not None:
        # Continue with stderr only
        structlog.get_logger(__name__).warning(
            "log_file_unavailable", path=str(file_path), error=str(file_error)
        )


@contextmanager
def panel_context(panel_id: str, **extra: Any) -> Iterator[None]:
    """Attach ``panel`` (and any extra fields) to entries logged inside the block.

    Tasks created inside the block inherit the binding, so every message
    handled for a panel carries its id.
    """
    with structlog.contextvars.bound_contextvars(panel=panel_id, **extra):
        yield
