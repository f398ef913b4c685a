"""Editor collaborators for running outside an editor.

These back the command line: a document read from disk, a fixed list of
diagnostics, a webview whose messages are JSON lines on a stream, and
notifications written to the log.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import IO, Any

import structlog

from ..models.diagnostic import Diagnostic

log = structlog.get_logger()


class FileDocument:
    """TextDocument backed by a file, read once on construction."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._lines = path.read_text(encoding="utf-8").splitlines()

    @property
    def uri(self) -> str:
        return self._path.resolve().as_uri()

    def line_text(self, line: int) -> str:
        if line < 0:
            raise IndexError(f"Line {line} out of range")
        return self._lines[line]


class StaticDiagnosticsSource:
    """DiagnosticsSource with a fixed active document and diagnostics."""

    def __init__(self, document: FileDocument | None, diagnostics: Sequence[Diagnostic]) -> None:
        self._document = document
        self._diagnostics = list(diagnostics)

    def active_document(self) -> FileDocument | None:
        return self._document

    def diagnostics_for(self, document: Any) -> Sequence[Diagnostic]:
        return list(self._diagnostics) if document is self._document else []


class StreamSurface:
    """RenderingSurface writing one JSON message per line."""

    def __init__(self, stream: IO[str] | None = None) -> None:
        self._stream = stream or sys.stdout

    def post_message(self, message: dict[str, Any]) -> None:
        self._stream.write(json.dumps(message, ensure_ascii=False) + "\n")
        self._stream.flush()


class LogNotifier:
    """Notifier that reports through the structured log (stderr)."""

    def show_error(self, text: str) -> None:
        log.error("user_notification", text=text)

    def show_info(self, text: str) -> None:
        log.info("user_notification", text=text)


class StreamPresenter:
    """SolutionPresenter printing the explanation to a stream."""

    def __init__(self, stream: IO[str] | None = None) -> None:
        self._stream = stream or sys.stdout

    def show_solution(self, text: str, error_message: str | None = None) -> None:
        if error_message:
            self._stream.write(f"Error: {error_message[:50]}\n\n")
        self._stream.write(text + "\n")
        self._stream.flush()
