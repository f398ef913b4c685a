"""Composition root that wires the coordinators to the editor.

This module implements the ErrorHelper class. It:
- Owns the SolutionCache and keeps it in step with diagnostics
- Routes the editor commands (get explanation, play voice explanation)
- Runs the sidebar conversation
- Creates a WebviewBridge for every solution or chat panel
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from ai_error_helper.config.schema import HelperConfig
from ai_error_helper.core.bridge import WebviewBridge
from ai_error_helper.core.chat import ChatCoordinator
from ai_error_helper.core.diagnostic_watcher import DiagnosticWatcher
from ai_error_helper.core.explanation import ExplanationCoordinator
from ai_error_helper.core.solution_cache import SolutionCache
from ai_error_helper.core.voice import VoiceCoordinator
from ai_error_helper.models.voice import VoiceOutcome, VoiceRequest
from ai_error_helper.utils.async_helpers import EmptyInput, ServiceError, StaleTarget

if TYPE_CHECKING:
    from ai_error_helper.interfaces.editor import (
        AudioPlayer,
        ChatListView,
        DiagnosticsSource,
        ErrorListView,
        Notifier,
        PdfExporter,
        RenderingSurface,
        SolutionPresenter,
    )
    from ai_error_helper.interfaces.explanation import TextExplanationService
    from ai_error_helper.interfaces.speech import SpeechSynthesisService
    from ai_error_helper.models.chat import ChatMessage
    from ai_error_helper.models.diagnostic import Fingerprint
    from ai_error_helper.models.solution import ErrorRecord, SolutionState

log = structlog.get_logger()

VOICE_EXPLANATION_FAILED = "❌ Failed to generate voice explanation."


class _ExternalPlayerListener:
    """Opens the audio outside any webview; errors become notifications."""

    def __init__(self, player: AudioPlayer | None, notifier: Notifier) -> None:
        self._player = player
        self._notifier = notifier

    def audio_ready(self, url: str) -> None:
        if self._player is None:
            self._notifier.show_info(f"Voice explanation ready: {url}")
            return
        self._player.open(url)

    def synthesis_failed(self, reason: str) -> None:
        self._notifier.show_error(reason)

    def synthesis_finished(self) -> None:
        pass


class ErrorHelper:
    """Entry point used by the editor integration.

    Example:
        helper = ErrorHelper(config, explainer, speech, source, notifier, view=tree)
        helper.update()  # on diagnostics change / active editor change
        await helper.get_explanation(helper.records[0].fingerprint)
    """

    def __init__(
        self,
        config: HelperConfig,
        explainer: TextExplanationService,
        speech: SpeechSynthesisService | None,
        source: DiagnosticsSource,
        notifier: Notifier,
        view: ErrorListView | None = None,
        presenter: SolutionPresenter | None = None,
        player: AudioPlayer | None = None,
        exporter: PdfExporter | None = None,
        chat_view: ChatListView | None = None,
    ) -> None:
        """Initialize the helper.

        Args:
            config: Application configuration
            explainer: Text explanation backend
            speech: Speech backend, or None to disable voice
            source: Editor diagnostics and active document
            notifier: User-visible notifications
            view: Error list rendering
            presenter: Detail view for ready explanations
            player: External audio player for voice explanations
            exporter: PDF export for solution panels
            chat_view: Sidebar list showing the sidebar conversation
        """
        self._config = config
        self._explainer = explainer
        self._speech = speech
        self._notifier = notifier
        self._player = player
        self._exporter = exporter

        self.cache = SolutionCache()
        if view is not None:
            self.cache.add_listener(view.render)

        self.watcher = DiagnosticWatcher(source, self.cache)
        self.voice = VoiceCoordinator(speech)
        self.explanations = ExplanationCoordinator(
            explainer,
            self.cache,
            config.explanation.prompts,
            presenter,
        )

        self.chat = ChatCoordinator(explainer)
        if chat_view is not None:
            self.chat.add_listener(chat_view.append)

    @property
    def records(self) -> tuple[ErrorRecord, ...]:
        """Current error records in display order."""
        return self.cache.records

    def update(self) -> tuple[ErrorRecord, ...]:
        """Recompute the error list from the editor's diagnostics."""
        return self.watcher.update()

    async def get_explanation(self, fingerprint: Fingerprint) -> SolutionState | None:
        """Fetch and store an explanation for a visible error."""
        return await self.explanations.request_explanation(fingerprint)

    async def play_voice_explanation(self, fingerprint: Fingerprint) -> VoiceOutcome | None:
        """Generate a spoken explanation and play it outside the panels.

        Returns:
            The synthesis outcome, or None if the error is no longer visible
        """
        try:
            text = await self.explanations.explain_for_voice(fingerprint)
        except StaleTarget:
            log.debug("voice_explanation_target_missing", fingerprint=str(fingerprint))
            return None
        except ServiceError as e:
            log.error(
                "voice_explanation_failed",
                fingerprint=str(fingerprint),
                error_type=type(e).__name__,
                error=str(e),
            )
            self._notifier.show_error(VOICE_EXPLANATION_FAILED)
            return VoiceOutcome.FAILED
        except Exception as e:
            log.exception(
                "voice_explanation_unexpected_error",
                fingerprint=str(fingerprint),
                error=str(e),
            )
            self._notifier.show_error(VOICE_EXPLANATION_FAILED)
            return VoiceOutcome.FAILED

        self._notifier.show_info("🔊 Generating voice explanation...")
        request = VoiceRequest(
            text=text,
            voice_id=self._config.speech.voice_id,
            style=self._config.speech.style,
        )
        return await self.voice.synthesize(
            f"tree:{fingerprint}",
            request,
            _ExternalPlayerListener(self._player, self._notifier),
        )

    async def send_chat_message(self, text: str) -> ChatMessage | None:
        """Send a message from the sidebar chat.

        Returns:
            The appended AI reply, or None when ``text`` is blank
        """
        try:
            return await self.chat.send(text)
        except EmptyInput:
            log.debug("sidebar_chat_empty_input")
            return None

    async def aclose(self) -> None:
        """Close the backend clients."""
        log.debug("cleaning_up_resources")
        for service in (self._explainer, self._speech):
            close = getattr(service, "aclose", None)
            if close is None:
                continue
            try:
                await close()
            except Exception as e:
                log.warning("service_close_error", service=type(service).__name__, error=str(e))

    def open_solution_panel(self, surface: RenderingSurface) -> WebviewBridge:
        """Attach a bridge to a freshly rendered solution panel."""
        bridge = WebviewBridge(
            surface,
            self.voice,
            self._notifier,
            self._config.speech,
            exporter=self._exporter,
            name="solution",
        )
        bridge.announce_explanation()
        log.info("solution_panel_opened", panel=bridge.panel_id)
        return bridge

    def open_chat_panel(
        self,
        surface: RenderingSurface,
        chat: ChatCoordinator | None = None,
    ) -> WebviewBridge:
        """Attach a bridge with its own conversation to a chat panel."""
        bridge = WebviewBridge(
            surface,
            self.voice,
            self._notifier,
            self._config.speech,
            chat=chat if chat is not None else ChatCoordinator(self._explainer),
            exporter=self._exporter,
            name="chat",
        )
        log.info("chat_panel_opened", panel=bridge.panel_id)
        return bridge


def create_explanation_service(config: HelperConfig) -> TextExplanationService:
    """Instantiate the configured text explanation adapter.

    Raises:
        ValueError: If the provider block is missing
    """
    explanation = config.explanation
    if explanation.provider == "gemini":
        if explanation.gemini is None:
            raise ValueError("Gemini provider selected but gemini config missing")
        from ai_error_helper.adapters.llm.gemini import GeminiAdapter

        return GeminiAdapter(explanation.gemini)

    if explanation.anthropic is None:
        raise ValueError("Anthropic provider selected but anthropic config missing")
    from ai_error_helper.adapters.llm.anthropic import AnthropicAdapter

    return AnthropicAdapter(explanation.anthropic)


def create_speech_service(config: HelperConfig) -> SpeechSynthesisService | None:
    """Instantiate the speech adapter, or None when voice is not configured."""
    if config.speech.murf is None:
        log.info("speech_disabled")
        return None
    from ai_error_helper.adapters.speech.murf import MurfAdapter

    return MurfAdapter(config.speech.murf)


def create_helper(
    config: HelperConfig,
    source: DiagnosticsSource,
    notifier: Notifier,
    view: ErrorListView | None = None,
    presenter: SolutionPresenter | None = None,
    player: AudioPlayer | None = None,
    exporter: PdfExporter | None = None,
    chat_view: ChatListView | None = None,
) -> ErrorHelper:
    """Create an ErrorHelper with adapters built from configuration."""
    log.info("creating_helper", explanation_provider=config.explanation.provider)
    return ErrorHelper(
        config,
        create_explanation_service(config),
        create_speech_service(config),
        source,
        notifier,
        view=view,
        presenter=presenter,
        player=player,
        exporter=exporter,
        chat_view=chat_view,
    )
