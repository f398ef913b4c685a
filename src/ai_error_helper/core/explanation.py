"""Per-fingerprint explanation state machine.

This module implements the ExplanationCoordinator, which owns every
solution state transition after a record is created:

1. Ignore unknown fingerprints and fingerprints already Pending
2. Move to Pending and publish before any network round trip
3. Build the prompt from the diagnostic message and its source line
4. Call the text explanation backend
5. Sanitize the reply, move to Ready and open the detail view
6. On failure move to Failed with a fixed message

Each request carries a sequence number. A reply is applied only while the
record is still Pending with that same number; anything else is stale
and dropped.
"""

from __future__ import annotations

import asyncio
import itertools
from typing import TYPE_CHECKING

import structlog

from ai_error_helper.config.schema import PromptConfig
from ai_error_helper.core.sanitize import sanitize
from ai_error_helper.models.solution import ErrorRecord, Failed, Pending, Ready, SolutionState
from ai_error_helper.utils.async_helpers import MalformedResponse, ServiceError, StaleTarget

if TYPE_CHECKING:
    from ai_error_helper.core.solution_cache import SolutionCache
    from ai_error_helper.interfaces.editor import SolutionPresenter
    from ai_error_helper.interfaces.explanation import TextExplanationService
    from ai_error_helper.models.diagnostic import Fingerprint

log = structlog.get_logger()

PENDING_PLACEHOLDER = "⏳ Explanation loading..., please wait a moment..."
FAILURE_MESSAGE = "❌ Failed to get AI solution. Check the logs for details."


class ExplanationCoordinator:
    """Requests, sanitizes and stores AI explanations for error records.

    Example:
        coordinator = ExplanationCoordinator(service, cache, PromptConfig())
        state = await coordinator.request_explanation(record.fingerprint)
    """

    def __init__(
        self,
        service: TextExplanationService,
        cache: SolutionCache,
        prompts: PromptConfig | None = None,
        presenter: SolutionPresenter | None = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            service: Text explanation backend
            cache: Cache holding the error records
            prompts: Prompt templates
            presenter: Detail view opened once an explanation is ready
        """
        self._service = service
        self._cache = cache
        self._prompts = prompts or PromptConfig()
        self._presenter = presenter
        self._request_ids = itertools.count(1)

    async def request_explanation(self, fingerprint: Fingerprint) -> SolutionState | None:
        """Fetch an explanation for a visible error.

        Args:
            fingerprint: Identity of the error record

        Returns:
            The state the record ended in, or None if nothing was applied
            (unknown fingerprint, already pending, or stale reply).
        """
        record = self._cache.get(fingerprint)
        if record is None:
            log.debug("explanation_target_missing", fingerprint=str(fingerprint))
            return None
        if isinstance(record.state, Pending):
            log.debug("explanation_already_pending", fingerprint=str(fingerprint))
            return None

        request_id = next(self._request_ids)
        self._cache.transition(fingerprint, Pending(PENDING_PLACEHOLDER, request_id))
        self._cache.publish()

        log.info(
            "explanation_requested",
            fingerprint=str(fingerprint),
            request_id=request_id,
            model=self._service.model_name,
        )

        try:
            raw = await self._service.generate(self.build_prompt(record, self._prompts.explanation))
            text = sanitize(raw)
            if not text:
                raise MalformedResponse("Explanation was empty after sanitizing")
        except ServiceError as e:
            log.error(
                "explanation_failed",
                fingerprint=str(fingerprint),
                request_id=request_id,
                error_type=type(e).__name__,
                error=str(e),
            )
            return self._complete(fingerprint, request_id, Failed(FAILURE_MESSAGE))
        except asyncio.CancelledError:
            self._complete(fingerprint, request_id, Failed(FAILURE_MESSAGE))
            raise
        except Exception as e:
            log.exception(
                "explanation_unexpected_error", fingerprint=str(fingerprint), error=str(e)
            )
            return self._complete(fingerprint, request_id, Failed(FAILURE_MESSAGE))

        state = self._complete(fingerprint, request_id, Ready(text))
        if state is not None:
            self._present(text, record.diagnostic.message)
        return state

    async def explain_for_voice(self, fingerprint: Fingerprint) -> str:
        """Generate a short, sanitized explanation meant to be spoken.

        The record's solution state is left untouched.

        Raises:
            StaleTarget: If the fingerprint is no longer visible
            ServiceError: If the backend fails or returns nothing usable
        """
        record = self._cache.get(fingerprint)
        if record is None:
            raise StaleTarget(f"No visible error for {fingerprint}")

        raw = await self._service.generate(self.build_prompt(record, self._prompts.voice))
        text = sanitize(raw)
        if not text:
            raise MalformedResponse("Voice explanation was empty after sanitizing")
        return text

    @staticmethod
    def build_prompt(record: ErrorRecord, template: str) -> str:
        """Fill a prompt template with the error message and its source line."""
        try:
            code_line = record.document.line_text(record.diagnostic.start_line)
        except IndexError:
            log.warning(
                "source_line_unavailable",
                document=record.document.uri,
                line=record.diagnostic.start_line,
            )
            code_line = ""
        return template.format(message=record.diagnostic.message, code_line=code_line.strip())

    def _complete(
        self,
        fingerprint: Fingerprint,
        request_id: int,
        state: SolutionState,
    ) -> SolutionState | None:
        """Apply a terminal state if this request is still the latest one."""
        current = self._cache.get(fingerprint)
        if (
            current is None
            or not isinstance(current.state, Pending)
            or current.state.request_id != request_id
        ):
            log.debug(
                "stale_explanation_dropped",
                fingerprint=str(fingerprint),
                request_id=request_id,
            )
            return None

        self._cache.transition(fingerprint, state)
        self._cache.publish()
        log.info(
            "explanation_completed",
            fingerprint=str(fingerprint),
            request_id=request_id,
            status=type(state).__name__.lower(),
        )
        return state

    def _present(self, text: str, error_message: str) -> None:
        if self._presenter is None:
            return
        try:
            self._presenter.show_solution(text, error_message)
        except Exception as e:
            log.exception("show_solution_failed", error=str(e))
