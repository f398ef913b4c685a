"""Data models for AI solutions attached to diagnostics."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from .diagnostic import Diagnostic, Fingerprint

if TYPE_CHECKING:
    from ..interfaces.editor import TextDocument


@dataclass(frozen=True)
class Unrequested:
    """No explanation has been asked for yet."""


@dataclass(frozen=True)
class Pending:
    """An explanation request is in flight."""

    placeholder: str
    request_id: int


@dataclass(frozen=True)
class Ready:
    """A sanitized explanation is available."""

    text: str


@dataclass(frozen=True)
class Failed:
    """The last explanation request failed."""

    reason: str


SolutionState = Unrequested | Pending | Ready | Failed

UNREQUESTED = Unrequested()


def has_solution(state: SolutionState) -> bool:
    """Return True if the state carries something worth keeping on refresh."""
    return not isinstance(state, Unrequested)


def solution_text(state: SolutionState) -> str | None:
    """Text to render for a state, or None when nothing was requested."""
    match state:
        case Pending(placeholder=placeholder):
            return placeholder
        case Ready(text=text):
            return text
        case Failed(reason=reason):
            return reason
    return None


@dataclass(frozen=True)
class ErrorRecord:
    """A currently visible error and its solution state.

    The document is a read-only reference owned by the editor.
    """

    fingerprint: Fingerprint
    diagnostic: Diagnostic
    document: TextDocument
    state: SolutionState = UNREQUESTED

    def with_state(self, state: SolutionState) -> ErrorRecord:
        """Return a copy of this record in a new state."""
        return replace(self, state=state)
