"""Markdown stripping for model output.

Model replies are rendered as plain text and read aloud, so Markdown
markers are removed by an ordered list of named stages. The order
matters: later patterns can match text produced by earlier ones.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

# Fence language tags that leak into prose after the fence is removed
LANGUAGE_TAGS: tuple[str, ...] = (
    "c++",
    "cpp",
    "c#",
    "csharp",
    "javascript",
    "typescript",
    "python",
    "py",
    "js",
    "jsx",
    "ts",
    "tsx",
    "json",
    "bash",
    "sh",
    "html",
    "css",
)

_FENCED_BLOCK = re.compile(r"```[^\n`]*\n(.*?)```", re.DOTALL)
_BOLD = re.compile(r"\*\*(.*?)\*\*")
_UNDERLINE = re.compile(r"__(.*?)__")
_INLINE_CODE = re.compile(r"`([^`]*)`")
_TAG_ALTERNATION = "|".join(re.escape(tag) for tag in LANGUAGE_TAGS)
_LANGUAGE_TAG = re.compile(
    r"(?<![\w+#./-])(?:" + _TAG_ALTERNATION + r")(?![\w+#/-]|\.\w)",
    re.IGNORECASE,
)
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class SanitizeStage:
    """A named text transformation."""

    name: str
    apply: Callable[[str], str]

    def __call__(self, text: str) -> str:
        return self.apply(text)


def _until_stable(transform: Callable[[str], str], text: str) -> str:
    # Every effective pass removes characters, so this terminates
    while True:
        result = transform(text)
        if result == text:
            return result
        text = result


def strip_code_fences(text: str) -> str:
    """Replace fenced code blocks with their inner text, whatever the tag."""
    return _until_stable(lambda t: _FENCED_BLOCK.sub(r"\1", t), text)


def strip_emphasis(text: str) -> str:
    """Unwrap ``**bold**`` and ``__underline__`` markers."""
    return _until_stable(lambda t: _UNDERLINE.sub(r"\1", _BOLD.sub(r"\1", t)), text)


def strip_inline_code(text: str) -> str:
    """Unwrap single-backtick code spans."""
    return _until_stable(lambda t: _INLINE_CODE.sub(r"\1", t), text)


def strip_language_tags(text: str) -> str:
    """Drop standalone language names such as ``js`` or ``C++``."""
    return _until_stable(lambda t: _LANGUAGE_TAG.sub("", t), text)


def collapse_whitespace(text: str) -> str:
    """Collapse whitespace runs, newlines included, to single spaces and trim."""
    return _WHITESPACE.sub(" ", text).strip()


PIPELINE: tuple[SanitizeStage, ...] = (
    SanitizeStage("code_fences", strip_code_fences),
    SanitizeStage("emphasis", strip_emphasis),
    SanitizeStage("inline_code", strip_inline_code),
    SanitizeStage("language_tags", strip_language_tags),
    SanitizeStage("whitespace", collapse_whitespace),
)


def sanitize(text: str, stages: Sequence[SanitizeStage] = PIPELINE) -> str:
    """Run the stages in order until the text no longer changes.

    Repeating whole passes makes ``sanitize(sanitize(x)) == sanitize(x)``
    hold even when a later stage exposes a marker for an earlier one.
    """

    def run_once(value: str) -> str:
        for stage in stages:
            value = stage(value)
        return value

    return _until_stable(run_once, text)
