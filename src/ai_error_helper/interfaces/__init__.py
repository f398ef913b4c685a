"""Protocol definitions for pluggable adapters and editor collaborators."""

from .editor import (
    AudioPlayer,
    ChatListView,
    DiagnosticsSource,
    ErrorListView,
    Notifier,
    PdfExporter,
    RenderingSurface,
    SolutionPresenter,
    TextDocument,
)
from .explanation import TextExplanationService
from .speech import SpeechSynthesisService

__all__ = [
    "AudioPlayer",
    "ChatListView",
    "DiagnosticsSource",
    "ErrorListView",
    "Notifier",
    "PdfExporter",
    "RenderingSurface",
    "SolutionPresenter",
    "SpeechSynthesisService",
    "TextDocument",
    "TextExplanationService",
]
