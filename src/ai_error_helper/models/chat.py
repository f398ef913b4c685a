"""Data models for the AI chat panel."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import StrEnum


class ChatRole(StrEnum):
    """Author of a chat message."""

    USER = "user"
    AI = "ai"


@dataclass(frozen=True)
class ChatMessage:
    """A single message in a chat session."""

    role: ChatRole
    text: str
    sequence_index: int


class ChatSession:
    """Append-only, ordered sequence of chat messages.

    Insertion order is display order. Messages are never reordered,
    deduplicated or removed.
    """

    def __init__(self) -> None:
        self._messages: list[ChatMessage] = []

    def append(self, role: ChatRole, text: str) -> ChatMessage:
        """Append a message and return it with its sequence index."""
        message = ChatMessage(role=role, text=text, sequence_index=len(self._messages))
        self._messages.append(message)
        return message

    @property
    def messages(self) -> tuple[ChatMessage, ...]:
        """Snapshot of the messages in display order."""
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[ChatMessage]:
        return iter(tuple(self._messages))
