"""Utility functions and helpers.

- async_helpers: error taxonomy, background task tracking
- logging: Structured logging with secret sanitization
- security: Secret redaction for prompts and logs
"""

from ai_error_helper.utils.async_helpers import (
    BackgroundTasks,
    EmptyInput,
    HelperError,
    MalformedResponse,
    NetworkFailure,
    ServiceError,
    StaleTarget,
)
from ai_error_helper.utils.logging import (
    LogFormat,
    LogLevel,
    configure_logging,
    panel_context,
)
from ai_error_helper.utils.security import (
    RedactionError,
    SecretRedactor,
    SecurityError,
    redact_prompt,
)

__all__ = [
    # Errors
    "BackgroundTasks",
    "EmptyInput",
    "HelperError",
    "MalformedResponse",
    "NetworkFailure",
    "ServiceError",
    "StaleTarget",
    # Logging
    "LogFormat",
    "LogLevel",
    "configure_logging",
    "panel_context",
    # Security
    "RedactionError",
    "SecretRedactor",
    "SecurityError",
    "redact_prompt",
]
