"""Async utilities and the error taxonomy shared by coordinators and adapters.

This module provides:
- Custom exceptions for backend and protocol failures
- Task tracking for fire-and-forget message handlers

Recovery is always user-initiated: nothing in this package retries.
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any

import structlog

log = structlog.get_logger()


# =============================================================================
# Custom Exceptions
# =============================================================================


class HelperError(Exception):
    """Base exception for all helper errors."""


class ServiceError(HelperError):
    """A backend call did not produce a usable result."""


class NetworkFailure(ServiceError):
    """Backend unreachable or returned a non-success status.

    Attributes:
        status_code: HTTP status code, if a response was received.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedResponse(ServiceError):
    """Backend answered but an expected field was absent."""


class StaleTarget(HelperError):
    """The fingerprint or panel a result belongs to no longer exists."""


class EmptyInput(HelperError):
    """User submitted blank text; no request is issued."""


# =============================================================================
# Task Tracking
# =============================================================================


class BackgroundTasks:
    """Keeps references to spawned handler tasks until they finish.

    Handlers run concurrently on the single event loop; a slow backend call
    suspends only its own task.

    Example:
        tasks = BackgroundTasks()
        tasks.spawn(bridge.handle_message(payload))
        ...
        await tasks.drain()
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()

    def __len__(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], name: str | None = None) -> asyncio.Task[Any]:
        """Schedule a coroutine and track it until completion."""
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.error(
                "background_task_failed",
                task=task.get_name(),
                error_type=type(exc).__name__,
                error=str(exc),
            )

    async def drain(self) -> None:
        """Wait for all tracked tasks, including ones spawned meanwhile."""
        while self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
