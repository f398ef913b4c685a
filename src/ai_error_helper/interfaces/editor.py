"""Abstract interfaces for the editor collaborators.

The helper never renders anything itself. Everything it needs from the
editor (diagnostics, document text, webviews, notifications) is reached
through these protocols.
"""

from collections.abc import Sequence
from typing import Any, Protocol

from ..models.chat import ChatMessage
from ..models.diagnostic import Diagnostic
from ..models.solution import ErrorRecord


class TextDocument(Protocol):
    """Read-only view of an open source document."""

    @property
    def uri(self) -> str:
        """Document identifier."""
        ...

    def line_text(self, line: int) -> str:
        """
        Return the text of a 0-based line.

        Raises:
            IndexError: If the line does not exist
        """
        ...


class DiagnosticsSource(Protocol):
    """Supplies the active document and its diagnostics."""

    def active_document(self) -> TextDocument | None:
        """Return the document in the active editor, if any."""
        ...

    def diagnostics_for(self, document: TextDocument) -> Sequence[Diagnostic]:
        """Return all diagnostics currently reported for a document."""
        ...


class ErrorListView(Protocol):
    """Tree/list rendering of the current error records."""

    def render(self, records: Sequence[ErrorRecord]) -> None:
        """Redraw the list from a snapshot of records."""
        ...


class ChatListView(Protocol):
    """Sidebar list of the conversation, one row per message."""

    def append(self, message: ChatMessage) -> None:
        """Show a newly appended message."""
        ...


class RenderingSurface(Protocol):
    """An isolated webview that only talks to the host through messages."""

    def post_message(self, message: dict[str, Any]) -> None:
        """Deliver a message to the webview script."""
        ...


class Notifier(Protocol):
    """User-visible notifications (toasts, status bar)."""

    def show_error(self, text: str) -> None:
        """Show an error notification."""
        ...

    def show_info(self, text: str) -> None:
        """Show an informational notification."""
        ...


class SolutionPresenter(Protocol):
    """Opens the detail view for a ready explanation."""

    def show_solution(self, text: str, error_message: str | None = None) -> None:
        """Present sanitized explanation text, titled after the error."""
        ...


class AudioPlayer(Protocol):
    """Plays an audio URL outside any webview."""

    def open(self, url: str) -> None:
        """Hand the URL to the system player."""
        ...


class PdfExporter(Protocol):
    """Exports text to a PDF document."""

    async def export(self, text: str) -> str:
        """
        Export text to PDF.

        Returns:
            Path or URI of the written file
        """
        ...
