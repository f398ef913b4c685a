"""Per-control speech synthesis state machine.

Policy for overlapping triggers: while a control has a synthesis in
flight, further triggers from that control are ignored (no call, no
events). The in-flight request still ends with its own terminal signal,
which is what re-enables the control.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

import structlog

from ai_error_helper.models.voice import VoiceOutcome, VoiceRequest
from ai_error_helper.utils.async_helpers import ServiceError

if TYPE_CHECKING:
    from ai_error_helper.interfaces.speech import SpeechSynthesisService

log = structlog.get_logger()

VOICE_FAILURE_MESSAGE = "❌ Failed to generate audio. Check the logs for details."
VOICE_DISABLED_MESSAGE = "Voice playback is not configured."


class SynthesisListener(Protocol):
    """Receives the outcome of one synthesis call."""

    def audio_ready(self, url: str) -> None:
        """Audio is available at ``url``."""
        ...

    def synthesis_failed(self, reason: str) -> None:
        """Synthesis failed; ``reason`` is safe to show to the user."""
        ...

    def synthesis_finished(self) -> None:
        """Terminal signal, emitted exactly once per accepted request."""
        ...


class VoiceCoordinator:
    """Issues synthesis calls with at most one in flight per control.

    Example:
        voice = VoiceCoordinator(murf)
        await voice.synthesize("panel-1:speak", request, listener)
    """

    def __init__(self, service: SpeechSynthesisService | None) -> None:
        """Initialize the coordinator.

        Args:
            service: Speech backend, or None when voice is not configured
        """
        self._service = service
        self._pending: set[str] = set()

    @property
    def enabled(self) -> bool:
        """Return True if a speech backend is configured."""
        return self._service is not None

    def is_pending(self, control: str) -> bool:
        """Return True if ``control`` has a synthesis in flight."""
        return control in self._pending

    async def synthesize(
        self,
        control: str,
        request: VoiceRequest,
        listener: SynthesisListener,
    ) -> VoiceOutcome:
        """Synthesize speech for one UI control.

        ``listener.synthesis_finished()`` runs on every path once the
        request is accepted, including unexpected errors.

        Args:
            control: Key of the UI control that triggered the request
            request: Text, voice and style to synthesize
            listener: Receives audio_ready / synthesis_failed / synthesis_finished

        Returns:
            How the request ended
        """
        if control in self._pending:
            log.info("synthesis_ignored_pending", control=control)
            return VoiceOutcome.IGNORED

        self._pending.add(control)
        outcome = VoiceOutcome.FAILED
        try:
            if self._service is None:
                log.warning("synthesis_not_configured", control=control)
                listener.synthesis_failed(VOICE_DISABLED_MESSAGE)
                return outcome

            log.info(
                "synthesis_started",
                control=control,
                voice_id=request.voice_id,
                style=request.style,
                chars=len(request.text),
            )
            url = await self._service.synthesize(request.text, request.voice_id, request.style)
            listener.audio_ready(url)
            outcome = VoiceOutcome.PLAYED
            log.info("synthesis_completed", control=control)
        except ServiceError as e:
            log.error(
                "synthesis_failed",
                control=control,
                error_type=type(e).__name__,
                error=str(e),
            )
            listener.synthesis_failed(VOICE_FAILURE_MESSAGE)
        except Exception as e:
            log.exception("synthesis_unexpected_error", control=control, error=str(e))
            listener.synthesis_failed(VOICE_FAILURE_MESSAGE)
        finally:
            self._pending.discard(control)
            listener.synthesis_finished()
        return outcome
