"""Message protocol between a webview panel and the coordinators.

Inbound messages (UI → host) are validated with pydantic and dispatched
on their ``command`` field. Outbound messages (host → UI) are pydantic
models dumped to plain dicts.

Inbound:
    chat:send     {text}
    chat:tts      {text}
    speak         {text, voice?, style?}
    downloadPdf   {text}

Outbound:
    chat:append        {role, text}
    chat:playAudio     {url}
    playAudio          {url}
    speechFinished     {}
    explanationLoaded  {}

A ``speak`` request disables the panel's button, so it is always answered
with exactly one ``speechFinished``, even when the input was blank.
"""

from __future__ import annotations

import itertools
from collections.abc import Mapping
from typing import TYPE_CHECKING, Annotated, Any, Literal

import structlog
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from ai_error_helper.models.chat import ChatRole
from ai_error_helper.models.voice import VoiceOutcome, VoiceRequest

if TYPE_CHECKING:
    from ai_error_helper.config.schema import SpeechConfig
    from ai_error_helper.core.chat import ChatCoordinator
    from ai_error_helper.core.voice import VoiceCoordinator
    from ai_error_helper.interfaces.editor import Notifier, PdfExporter, RenderingSurface

log = structlog.get_logger()

PDF_UNAVAILABLE_MESSAGE = "PDF export is not available."
PDF_FAILURE_MESSAGE = "❌ Failed to export PDF. Check the logs for details."

_panel_ids = itertools.count(1)


# =============================================================================
# Inbound messages
# =============================================================================


class _Inbound(BaseModel):
    model_config = ConfigDict(extra="ignore")

    text: str = ""


class ChatSend(_Inbound):
    command: Literal["chat:send"]


class ChatTts(_Inbound):
    command: Literal["chat:tts"]


class Speak(_Inbound):
    command: Literal["speak"]
    voice: str | None = None
    style: str | None = None


class DownloadPdf(_Inbound):
    command: Literal["downloadPdf"]


InboundMessage = Annotated[
    ChatSend | ChatTts | Speak | DownloadPdf,
    Field(discriminator="command"),
]

_inbound_adapter: TypeAdapter[InboundMessage] = TypeAdapter(InboundMessage)


def parse_inbound(raw: Mapping[str, Any]) -> InboundMessage:
    """Validate a raw webview message.

    Raises:
        pydantic.ValidationError: If the command is unknown or fields are invalid
    """
    return _inbound_adapter.validate_python(raw)


# =============================================================================
# Outbound messages
# =============================================================================


class ChatAppend(BaseModel):
    command: Literal["chat:append"] = "chat:append"
    role: ChatRole
    text: str


class ChatPlayAudio(BaseModel):
    command: Literal["chat:playAudio"] = "chat:playAudio"
    url: str


class PlayAudio(BaseModel):
    command: Literal["playAudio"] = "playAudio"
    url: str


class SpeechFinished(BaseModel):
    command: Literal["speechFinished"] = "speechFinished"


class ExplanationLoaded(BaseModel):
    command: Literal["explanationLoaded"] = "explanationLoaded"


# =============================================================================
# Synthesis listeners
# =============================================================================


class _SpeakListener:
    """``speak`` outcome: playAudio on success, always speechFinished."""

    def __init__(self, bridge: WebviewBridge) -> None:
        self._bridge = bridge

    def audio_ready(self, url: str) -> None:
        self._bridge.post(PlayAudio(url=url))

    def synthesis_failed(self, reason: str) -> None:
        self._bridge.notify_error(reason)

    def synthesis_finished(self) -> None:
        self._bridge.post(SpeechFinished())


class _ChatTtsListener:
    """``chat:tts`` outcome: chat:playAudio on success; the chat UI has no busy state."""

    def __init__(self, bridge: WebviewBridge) -> None:
        self._bridge = bridge

    def audio_ready(self, url: str) -> None:
        self._bridge.post(ChatPlayAudio(url=url))

    def synthesis_failed(self, reason: str) -> None:
        self._bridge.notify_error(reason)

    def synthesis_finished(self) -> None:
        pass


# =============================================================================
# Bridge
# =============================================================================


class WebviewBridge:
    """Connects one webview panel to the coordinators.

    Example:
        bridge = WebviewBridge(surface, voice, notifier, config.speech, chat=chat)
        await bridge.handle_message({"command": "chat:send", "text": "hi"})
        ...
        bridge.dispose()
    """

    def __init__(
        self,
        surface: RenderingSurface,
        voice: VoiceCoordinator,
        notifier: Notifier,
        speech: SpeechConfig,
        chat: ChatCoordinator | None = None,
        exporter: PdfExporter | None = None,
        name: str = "panel",
    ) -> None:
        """Initialize the bridge.

        Args:
            surface: The webview to post messages to
            voice: Shared voice coordinator
            notifier: User-visible error and info notifications
            speech: Default voice and style
            chat: Conversation for chat panels; None for solution panels
            exporter: PDF export collaborator
            name: Panel kind, used in control keys and logs
        """
        self._surface = surface
        self._voice = voice
        self._notifier = notifier
        self._speech = speech
        self._chat = chat
        self._exporter = exporter
        self._panel_id = f"{name}-{next(_panel_ids)}"
        self._disposed = False

    @property
    def panel_id(self) -> str:
        """Unique identifier of this panel."""
        return self._panel_id

    @property
    def disposed(self) -> bool:
        """Return True once the panel has been closed."""
        return self._disposed

    def control(self, name: str) -> str:
        """Key of a UI control in this panel, as used by the VoiceCoordinator."""
        return f"{self._panel_id}:{name}"

    def dispose(self) -> None:
        """Mark the panel closed. Later results are dropped silently."""
        self._disposed = True
        log.debug("panel_disposed", panel=self._panel_id)

    async def handle_message(self, raw: Mapping[str, Any]) -> None:
        """Dispatch one inbound webview message."""
        try:
            message = parse_inbound(raw)
        except ValidationError as e:
            command = raw.get("command") if isinstance(raw, Mapping) else None
            log.warning(
                "invalid_webview_message",
                panel=self._panel_id,
                command=command,
                error=str(e),
            )
            if command == "speak":
                # The panel disabled its speak button when it sent this
                self.post(SpeechFinished())
            return

        if self._disposed:
            log.debug("message_for_disposed_panel", panel=self._panel_id, command=message.command)
            return

        log.debug("webview_message_received", panel=self._panel_id, command=message.command)

        if not message.text.strip():
            log.debug("empty_input_dropped", panel=self._panel_id, command=message.command)
            if isinstance(message, Speak):
                self.post(SpeechFinished())
            return

        match message:
            case ChatSend():
                await self._on_chat_send(message)
            case ChatTts():
                await self._on_chat_tts(message)
            case Speak():
                await self._on_speak(message)
            case DownloadPdf():
                await self._on_download_pdf(message)

    def announce_explanation(self) -> None:
        """Tell the panel its explanation content is in place."""
        self.post(ExplanationLoaded())

    def post(self, message: BaseModel) -> None:
        """Send an outbound message unless the panel is gone."""
        if self._disposed:
            log.debug(
                "stale_panel_message_dropped",
                panel=self._panel_id,
                command=getattr(message, "command", None),
            )
            return
        self._surface.post_message(message.model_dump(mode="json"))

    def notify_error(self, text: str) -> None:
        """Surface an error to the user unless the panel is gone."""
        if self._disposed:
            return
        self._notifier.show_error(text)

    def notify_info(self, text: str) -> None:
        """Surface an informational notice unless the panel is gone."""
        if self._disposed:
            return
        self._notifier.show_info(text)

    async def _on_chat_send(self, message: ChatSend) -> None:
        if self._chat is None:
            log.warning("chat_not_supported", panel=self._panel_id)
            return
        reply = await self._chat.send(message.text)
        self.post(ChatAppend(role=reply.role, text=reply.text))

    async def _on_chat_tts(self, message: ChatTts) -> None:
        request = VoiceRequest(
            text=message.text,
            voice_id=self._speech.voice_id,
            style=self._speech.style,
        )
        await self._voice.synthesize(self.control("chat"), request, _ChatTtsListener(self))

    async def _on_speak(self, message: Speak) -> None:
        request = VoiceRequest(
            text=message.text,
            voice_id=message.voice or self._speech.voice_id,
            style=message.style or self._speech.style,
        )
        if not self._voice.is_pending(self.control("speak")):
            self.notify_info("Generating audio...")
        outcome = await self._voice.synthesize(self.control("speak"), request, _SpeakListener(self))
        if outcome is VoiceOutcome.IGNORED:
            log.debug("speak_ignored_pending", panel=self._panel_id)

    async def _on_download_pdf(self, message: DownloadPdf) -> None:
        if self._exporter is None:
            self.notify_error(PDF_UNAVAILABLE_MESSAGE)
            return
        try:
            location = await self._exporter.export(message.text)
        except Exception as e:
            log.exception("pdf_export_failed", panel=self._panel_id, error=str(e))
            self.notify_error(PDF_FAILURE_MESSAGE)
            return
        log.info("pdf_exported", panel=self._panel_id, location=location)
        self.notify_info(f"Saved PDF to {location}")
