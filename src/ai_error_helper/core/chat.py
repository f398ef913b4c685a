"""Chat panel conversation flow."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

import structlog

from ai_error_helper.models.chat import ChatMessage, ChatRole, ChatSession
from ai_error_helper.utils.async_helpers import EmptyInput, ServiceError

if TYPE_CHECKING:
    from ai_error_helper.interfaces.explanation import TextExplanationService

log = structlog.get_logger()

CHAT_FAILURE_REPLY = "❌ Failed to fetch AI reply."

ChatListener = Callable[[ChatMessage], None]


class ChatCoordinator:
    """Runs one panel's conversation against the text backend.

    The user's message is appended before the backend is called; the reply
    is appended whenever it arrives. Overlapping sends are not serialized,
    so replies land in arrival order.
    """

    def __init__(
        self,
        service: TextExplanationService,
        session: ChatSession | None = None,
    ) -> None:
        self._service = service
        self._session = session if session is not None else ChatSession()
        self._listeners: list[ChatListener] = []

    @property
    def session(self) -> ChatSession:
        """The panel's conversation."""
        return self._session

    def add_listener(self, listener: ChatListener) -> None:
        """Call ``listener`` with every appended message."""
        self._listeners.append(listener)

    async def send(self, text: str) -> ChatMessage:
        """Send a user message and return the AI reply that was appended.

        Raises:
            EmptyInput: If ``text`` is blank; nothing is appended
        """
        text = text.strip()
        if not text:
            raise EmptyInput("Chat message is empty")

        self._append(ChatRole.USER, text)

        try:
            reply = await self._service.generate(text)
        except ServiceError as e:
            log.error("chat_reply_failed", error_type=type(e).__name__, error=str(e))
            reply = CHAT_FAILURE_REPLY
        except Exception as e:
            log.exception("chat_reply_unexpected_error", error=str(e))
            reply = CHAT_FAILURE_REPLY

        return self._append(ChatRole.AI, reply)

    def _append(self, role: ChatRole, text: str) -> ChatMessage:
        message = self._session.append(role, text)
        for listener in list(self._listeners):
            try:
                listener(message)
            except Exception as e:
                log.exception("chat_listener_failed", error=str(e))
        return message
