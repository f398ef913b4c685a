"""Concrete implementations of provider interfaces."""

from .llm.anthropic import AnthropicAdapter
from .llm.gemini import GeminiAdapter
from .local import (
    FileDocument,
    LogNotifier,
    StaticDiagnosticsSource,
    StreamPresenter,
    StreamSurface,
)
from .speech.murf import MurfAdapter

__all__ = [
    "AnthropicAdapter",
    "FileDocument",
    "GeminiAdapter",
    "LogNotifier",
    "MurfAdapter",
    "StaticDiagnosticsSource",
    "StreamPresenter",
    "StreamSurface",
]
