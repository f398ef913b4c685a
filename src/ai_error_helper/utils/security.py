"""Secret redaction for outgoing prompts and log output.

Prompts carry the text of the line an error sits on, which can hold a
credential pasted into source. Every prompt is redacted before it leaves the
process and every log entry passes through the same patterns. Redaction fails
closed: a pattern that cannot compile or run blocks the operation.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, NamedTuple

import structlog

if TYPE_CHECKING:
    from collections.abc import Iterable

log = structlog.get_logger()


class SecurityError(Exception):
    """Base exception for security-related errors."""


class RedactionError(SecurityError):
    """Raised when secret redaction fails."""


class SecretPattern(NamedTuple):
    """A named regular expression for one kind of credential."""

    regex: str
    name: str


DEFAULT_PATTERNS: tuple[SecretPattern, ...] = (
    # Assignments in source lines and config files
    SecretPattern(
        r"(?i)(api[_-]?key|secret|token|password|credential)\s*[=:]\s*[\"']?[\w-]{16,}",
        "Generic secret",
    ),
    # Gemini takes its key as a query parameter
    SecretPattern(r"(?i)([?&]key=)[\w-]{16,}", "URL key parameter"),
    SecretPattern(r"AIza[0-9A-Za-z\-_]{35}", "Google API key"),
    SecretPattern(r"ya29\.[0-9A-Za-z\-_]+", "Google OAuth access token"),
    SecretPattern(r"sk-ant-[\w-]{40,}", "Anthropic API key"),
    SecretPattern(r"sk-[a-zA-Z0-9]{48}", "OpenAI legacy API key"),
    SecretPattern(r"sk-proj-[a-zA-Z0-9]{20,}", "OpenAI project API key"),
    SecretPattern(r"ghp_[a-zA-Z0-9]{36}", "GitHub PAT"),
    SecretPattern(r"github_pat_[a-zA-Z0-9_]{22,}", "GitHub fine-grained PAT"),
    SecretPattern(r"AKIA[0-9A-Z]{16}", "AWS access key ID"),
    SecretPattern(
        r"(?i)(postgres(?:ql)?|mysql|mongodb(?:\+srv)?|redis|amqp)://[^:]+:[^@]+@[^\s]+",
        "Database connection string",
    ),
    SecretPattern(r"-----BEGIN (?:RSA |EC |DSA |OPENSSH )?PRIVATE KEY-----", "Private key header"),
    SecretPattern(r"eyJ[a-zA-Z0-9_-]*\.eyJ[a-zA-Z0-9_-]*\.[a-zA-Z0-9_-]*", "JWT token"),
)

_SENSITIVE_KEY_WORDS = ("key", "token", "secret", "password", "credential")


class SecretRedactor:
    """Detects and redacts secrets from text.

    Usage:
        redactor = SecretRedactor()
        safe_prompt = redactor.redact(prompt)

    Args:
        placeholder: Replacement for each detected secret.
        custom_patterns: Extra ``(regex, name)`` pairs checked after the defaults.

    Raises:
        RedactionError: If any pattern fails to compile.
    """

    def __init__(
        self,
        placeholder: str = "[REDACTED]",
        custom_patterns: Iterable[tuple[str, str]] | None = None,
    ) -> None:
        self.placeholder = placeholder
        self._compiled: list[tuple[str, re.Pattern[str]]] = []

        for regex, name in (*DEFAULT_PATTERNS, *(custom_patterns or ())):
            try:
                self._compiled.append((name, re.compile(regex)))
            except re.error as e:
                log.error("pattern_compilation_failed", pattern_name=name, error=str(e))
                raise RedactionError(f"Failed to compile secret pattern {name!r}: {e}") from e

    def redact(self, text: str) -> str:
        """Return ``text`` with every detected secret replaced.

        Raises:
            RedactionError: If a pattern fails while scanning.
        """
        if not text:
            return text
        try:
            for _, pattern in self._compiled:
                text = pattern.sub(self.placeholder, text)
        except Exception as e:
            log.error("redaction_failed", error=str(e))
            raise RedactionError(f"Redaction failed: {e}") from e
        return text

    def findings(self, text: str) -> list[str]:
        """Names of the patterns that match ``text``, in pattern order.

        Raises:
            RedactionError: If a pattern fails while scanning.
        """
        if not text:
            return []
        try:
            return [name for name, pattern in self._compiled if pattern.search(text)]
        except Exception as e:
            log.error("secret_scan_failed", error=str(e))
            raise RedactionError(f"Secret scan failed: {e}") from e

    def has_secrets(self, text: str) -> bool:
        return bool(self.findings(text))


def redact_prompt(redactor: SecretRedactor, prompt: str, provider: str) -> str:
    """Redact a prompt before it is sent to a text backend.

    Raises:
        SecurityError: If redaction fails; nothing is sent in that case.
    """
    try:
        found = redactor.findings(prompt)
        if not found:
            return prompt
        log.warning("secrets_redacted_from_prompt", provider=provider, kinds=found)
        return redactor.redact(prompt)
    except RedactionError as e:
        log.error("redaction_failed_blocking_llm_call", provider=provider, error=str(e))
        raise SecurityError(f"Cannot send to {provider}: redaction failed: {e}") from e


def mask_config_value(key: str, value: str) -> str:
    """Mask ``value`` for display when ``key`` names a credential.

    Values longer than eight characters keep their last four.
    """
    if not value or not any(word in key.lower() for word in _SENSITIVE_KEY_WORDS):
        return value
    return f"****{value[-4:]}" if len(value) > 8 else "****"
