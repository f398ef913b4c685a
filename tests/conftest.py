"""Shared test fixtures for AI Error Helper."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from ai_error_helper.config.schema import (
    ExplanationConfig,
    GeminiConfig,
    HelperConfig,
    MurfConfig,
    SpeechConfig,
)
from ai_error_helper.core.solution_cache import SolutionCache
from ai_error_helper.models.diagnostic import Diagnostic, Severity


class FakeDocument:
    """In-memory TextDocument."""

    def __init__(self, lines: Sequence[str], uri: str = "file:///app/main.ts") -> None:
        self._lines = list(lines)
        self._uri = uri

    @property
    def uri(self) -> str:
        return self._uri

    def line_text(self, line: int) -> str:
        if line < 0:
            raise IndexError(line)
        return self._lines[line]


class FakeDiagnosticsSource:
    """DiagnosticsSource whose document and diagnostics tests can swap."""

    def __init__(
        self, document: FakeDocument | None, diagnostics: Sequence[Diagnostic] = ()
    ) -> None:
        self.document = document
        self.diagnostics = list(diagnostics)

    def active_document(self) -> FakeDocument | None:
        return self.document

    def diagnostics_for(self, document: Any) -> list[Diagnostic]:
        return list(self.diagnostics)


class RecordingSurface:
    """RenderingSurface that keeps every posted message."""

    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []

    def post_message(self, message: dict[str, Any]) -> None:
        self.messages.append(message)

    @property
    def commands(self) -> list[str]:
        return [m["command"] for m in self.messages]


@pytest.fixture
def document() -> FakeDocument:
    """A small TypeScript document."""
    return FakeDocument(
        [
            "const total = add(1, 2);",
            "let name: string = 42;",
            "console.log(total);",
        ]
    )


@pytest.fixture
def type_error() -> Diagnostic:
    """An error-severity diagnostic on line 1."""
    return Diagnostic(
        message="Type 'number' is not assignable to type 'string'.",
        start_line=1,
        severity=Severity.ERROR,
        source="ts",
    )


@pytest.fixture
def name_error() -> Diagnostic:
    """An error-severity diagnostic on line 0."""
    return Diagnostic(message="Cannot find name 'add'.", start_line=0, source="ts")


@pytest.fixture
def source(
    document: FakeDocument, type_error: Diagnostic, name_error: Diagnostic
) -> FakeDiagnosticsSource:
    """Diagnostics source reporting both errors."""
    return FakeDiagnosticsSource(document, [name_error, type_error])


@pytest.fixture
def cache() -> SolutionCache:
    """An empty solution cache."""
    return SolutionCache()


@pytest.fixture
def mock_explainer() -> AsyncMock:
    """Text explanation service returning a Markdown reply."""
    service = AsyncMock()
    service.model_name = "test-model"
    service.generate.return_value = "**Fix** it with `String(42)`."
    return service


@pytest.fixture
def mock_speech() -> AsyncMock:
    """Speech service returning an audio URL."""
    service = AsyncMock()
    service.synthesize.return_value = "https://cdn.example.com/audio.mp3"
    return service


@pytest.fixture
def notifier() -> MagicMock:
    """Notifier recording show_error / show_info calls."""
    return MagicMock()


@pytest.fixture
def surface() -> RecordingSurface:
    """Webview surface recording posted messages."""
    return RecordingSurface()


@pytest.fixture
def speech_config() -> SpeechConfig:
    """Speech configuration with Murf enabled."""
    return SpeechConfig(murf=MurfConfig(api_key="murf-test-key"))


@pytest.fixture
def helper_config(speech_config: SpeechConfig) -> HelperConfig:
    """Minimal valid helper configuration."""
    return HelperConfig(
        explanation=ExplanationConfig(
            provider="gemini",
            gemini=GeminiConfig(api_key="gemini-test-key"),
        ),
        speech=speech_config,
    )


@pytest.fixture
def make_document() -> type[FakeDocument]:
    """Factory for documents with custom lines."""
    return FakeDocument


@pytest.fixture
def make_source() -> type[FakeDiagnosticsSource]:
    """Factory for diagnostics sources."""
    return FakeDiagnosticsSource
