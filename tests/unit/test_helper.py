"""Tests for the ErrorHelper composition root."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from ai_error_helper.config.schema import (
    AnthropicConfig,
    ExplanationConfig,
    HelperConfig,
    SpeechConfig,
)
from ai_error_helper.core.chat import CHAT_FAILURE_REPLY
from ai_error_helper.core.helper import (
    VOICE_EXPLANATION_FAILED,
    ErrorHelper,
    create_explanation_service,
    create_helper,
    create_speech_service,
)
from ai_error_helper.models import ChatRole, Fingerprint, Pending, Ready, VoiceOutcome
from ai_error_helper.utils.async_helpers import NetworkFailure
from ai_error_helper.utils.security import SecurityError


@pytest.fixture
def view() -> MagicMock:
    """Error list view."""
    return MagicMock()


@pytest.fixture
def helper(helper_config, mock_explainer, mock_speech, source, notifier, view) -> ErrorHelper:
    """Helper wired to mocks."""
    return ErrorHelper(helper_config, mock_explainer, mock_speech, source, notifier, view=view)


class TestErrorHelper:
    """Tests for ErrorHelper."""

    def test_update_renders_view(self, helper: ErrorHelper, view: MagicMock) -> None:
        records = helper.update()

        assert len(records) == 2
        assert helper.records == records
        view.render.assert_called_once_with(records)

    async def test_get_explanation(self, helper: ErrorHelper, view: MagicMock) -> None:
        fp = helper.update()[1].fingerprint

        state = await helper.get_explanation(fp)

        assert isinstance(state, Ready)
        rendered_states = [
            next(r.state for r in c.args[0] if r.fingerprint == fp)
            for c in view.render.call_args_list
        ]
        assert isinstance(rendered_states[1], Pending)
        assert isinstance(rendered_states[2], Ready)

    async def test_solution_survives_refresh(self, helper: ErrorHelper) -> None:
        fp = helper.update()[0].fingerprint
        await helper.get_explanation(fp)

        records = helper.update()

        assert isinstance(records[0].state, Ready)


class TestVoiceExplanation:
    """Tests for play_voice_explanation."""

    async def test_plays_through_player(
        self, helper_config, mock_explainer, mock_speech, source, notifier
    ) -> None:
        player = MagicMock()
        helper = ErrorHelper(
            helper_config, mock_explainer, mock_speech, source, notifier, player=player
        )
        fp = helper.update()[0].fingerprint

        outcome = await helper.play_voice_explanation(fp)

        assert outcome is VoiceOutcome.PLAYED
        player.open.assert_called_once_with("https://cdn.example.com/audio.mp3")
        mock_speech.synthesize.assert_awaited_once_with(
            "Fix it with String(42).",
            helper_config.speech.voice_id,
            helper_config.speech.style,
        )

    async def test_without_player_shows_url(self, helper: ErrorHelper, notifier) -> None:
        fp = helper.update()[0].fingerprint

        await helper.play_voice_explanation(fp)

        infos = [c.args[0] for c in notifier.show_info.call_args_list]
        assert any("https://cdn.example.com/audio.mp3" in text for text in infos)

    async def test_explanation_failure(
        self, helper: ErrorHelper, mock_explainer, mock_speech, notifier
    ) -> None:
        mock_explainer.generate.side_effect = NetworkFailure("down")
        fp = helper.update()[0].fingerprint

        outcome = await helper.play_voice_explanation(fp)

        assert outcome is VoiceOutcome.FAILED
        notifier.show_error.assert_called_once_with(VOICE_EXPLANATION_FAILED)
        mock_speech.synthesize.assert_not_awaited()

    @pytest.mark.parametrize(
        "error",
        [SecurityError("redaction failed"), KeyError("field")],
    )
    async def test_unexpected_failure_is_reported(
        self, helper: ErrorHelper, mock_explainer, mock_speech, notifier, error
    ) -> None:
        mock_explainer.generate.side_effect = error
        fp = helper.update()[0].fingerprint

        outcome = await helper.play_voice_explanation(fp)

        assert outcome is VoiceOutcome.FAILED
        notifier.show_error.assert_called_once_with(VOICE_EXPLANATION_FAILED)
        mock_speech.synthesize.assert_not_awaited()

    async def test_missing_target(self, helper: ErrorHelper, mock_explainer) -> None:
        helper.update()

        assert await helper.play_voice_explanation(Fingerprint("gone", 0)) is None
        mock_explainer.generate.assert_not_awaited()

    async def test_does_not_touch_solution_state(self, helper: ErrorHelper) -> None:
        record = helper.update()[0]

        await helper.play_voice_explanation(record.fingerprint)

        assert helper.records[0].state == record.state


class TestSidebarChat:
    """Tests for the sidebar conversation."""

    async def test_send_updates_chat_view(
        self, helper_config, mock_explainer, mock_speech, source, notifier
    ) -> None:
        chat_view = MagicMock()
        helper = ErrorHelper(
            helper_config, mock_explainer, mock_speech, source, notifier, chat_view=chat_view
        )
        mock_explainer.generate.return_value = "Use a string."

        reply = await helper.send_chat_message("  why?  ")

        assert reply is not None
        assert reply.role is ChatRole.AI
        mock_explainer.generate.assert_awaited_once_with("why?")
        shown = [(c.args[0].role, c.args[0].text) for c in chat_view.append.call_args_list]
        assert shown == [(ChatRole.USER, "why?"), (ChatRole.AI, "Use a string.")]

    async def test_blank_message_is_dropped(self, helper: ErrorHelper, mock_explainer) -> None:
        assert await helper.send_chat_message("   ") is None
        assert len(helper.chat.session) == 0
        mock_explainer.generate.assert_not_awaited()

    async def test_failure_becomes_reply(self, helper: ErrorHelper, mock_explainer) -> None:
        mock_explainer.generate.side_effect = NetworkFailure("down")

        reply = await helper.send_chat_message("hi")

        assert reply is not None
        assert reply.text == CHAT_FAILURE_REPLY
        assert [m.role for m in helper.chat.session] == [ChatRole.USER, ChatRole.AI]

    async def test_separate_from_panel_sessions(self, helper: ErrorHelper, surface) -> None:
        bridge = helper.open_chat_panel(surface)

        await bridge.handle_message({"command": "chat:send", "text": "panel"})

        assert len(helper.chat.session) == 0


class TestPanels:
    """Tests for panel creation."""

    def test_solution_panel_announces(self, helper: ErrorHelper, surface) -> None:
        bridge = helper.open_solution_panel(surface)

        assert bridge.panel_id.startswith("solution-")
        assert surface.commands == ["explanationLoaded"]

    async def test_chat_panels_have_separate_sessions(self, helper: ErrorHelper, surface) -> None:
        first = helper.open_chat_panel(surface)
        second = helper.open_chat_panel(surface)

        await first.handle_message({"command": "chat:send", "text": "hi"})

        assert first.panel_id != second.panel_id
        assert surface.commands == ["chat:append"]

    def test_panels_share_voice(self, helper: ErrorHelper, surface) -> None:
        bridge = helper.open_chat_panel(surface)
        assert bridge._voice is helper.voice


class TestFactories:
    """Tests for adapter construction from configuration."""

    def test_gemini_service(self, helper_config: HelperConfig) -> None:
        from ai_error_helper.adapters.llm.gemini import GeminiAdapter

        service = create_explanation_service(helper_config)
        assert isinstance(service, GeminiAdapter)

    def test_anthropic_service(self) -> None:
        config = HelperConfig(
            explanation=ExplanationConfig(
                provider="anthropic",
                anthropic=AnthropicConfig(api_key="sk-ant-test"),
            )
        )
        with patch("ai_error_helper.adapters.llm.anthropic.anthropic.AsyncAnthropic"):
            from ai_error_helper.adapters.llm.anthropic import AnthropicAdapter

            assert isinstance(create_explanation_service(config), AnthropicAdapter)

    def test_missing_provider_block(self) -> None:
        config = HelperConfig(explanation=ExplanationConfig(provider="gemini"))

        with pytest.raises(ValueError, match="gemini config missing"):
            create_explanation_service(config)

    def test_speech_disabled_without_murf(self, helper_config: HelperConfig) -> None:
        config = helper_config.model_copy(update={"speech": SpeechConfig()})
        assert create_speech_service(config) is None

    def test_speech_enabled(self, helper_config: HelperConfig) -> None:
        from ai_error_helper.adapters.speech.murf import MurfAdapter

        assert isinstance(create_speech_service(helper_config), MurfAdapter)

    def test_create_helper(self, helper_config: HelperConfig, source, notifier) -> None:
        helper = create_helper(helper_config, source, notifier)

        assert helper.voice.enabled
        assert helper.explanations is not None
