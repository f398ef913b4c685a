"""Data models for editor diagnostics."""

from dataclasses import dataclass
from enum import IntEnum


class Severity(IntEnum):
    """Diagnostic severity, ordered from most to least severe."""

    ERROR = 0
    WARNING = 1
    INFORMATION = 2
    HINT = 3


@dataclass(frozen=True)
class Diagnostic:
    """An editor-reported issue for a source document."""

    message: str
    start_line: int  # 0-based, as reported by the editor
    severity: Severity = Severity.ERROR
    start_character: int = 0
    end_line: int | None = None
    end_character: int | None = None
    source: str | None = None  # e.g. "ts", "pylance"

    @property
    def display_line(self) -> int:
        """1-based line number for display."""
        return self.start_line + 1


@dataclass(frozen=True)
class Fingerprint:
    """Stable identity of a diagnostic, used as the cache key.

    Two diagnostics with identical message and starting line map to the
    same fingerprint and are treated as the same logical error.
    """

    message: str
    line: int

    def __str__(self) -> str:
        return f"{self.message}|{self.line}"
