"""Tests for the Murf speech adapter."""

from __future__ import annotations

import json

import httpx
import pytest

from ai_error_helper.adapters.speech.murf import MurfAdapter, extract_audio_url
from ai_error_helper.config.schema import MurfConfig
from ai_error_helper.utils.async_helpers import MalformedResponse, NetworkFailure


@pytest.fixture
def murf_config() -> MurfConfig:
    """Create a test Murf configuration."""
    return MurfConfig(api_key="murf-test-key")


def _adapter(config: MurfConfig, handler) -> MurfAdapter:
    return MurfAdapter(config, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


class TestExtractAudioUrl:
    """Tests for response parsing."""

    def test_audio_file(self) -> None:
        assert extract_audio_url({"audioFile": "https://a/x.mp3"}) == "https://a/x.mp3"

    def test_audio_url_fallback(self) -> None:
        assert extract_audio_url({"audio_url": "https://a/y.mp3"}) == "https://a/y.mp3"

    def test_prefers_audio_file(self) -> None:
        data = {"audio_url": "https://a/y.mp3", "audioFile": "https://a/x.mp3"}
        assert extract_audio_url(data) == "https://a/x.mp3"

    @pytest.mark.parametrize("data", [{}, {"audioFile": ""}, {"audioFile": None}, [], "url"])
    def test_missing(self, data) -> None:
        with pytest.raises(MalformedResponse):
            extract_audio_url(data)


class TestMurfAdapter:
    """Tests for MurfAdapter.synthesize."""

    async def test_synthesize_success(self, murf_config: MurfConfig) -> None:
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200, json={"audioFile": "https://murf.ai/audio.mp3"})

        adapter = _adapter(murf_config, handler)

        url = await adapter.synthesize("Hello", "en-US-natalie", "Promo")

        assert url == "https://murf.ai/audio.mp3"
        request = captured[0]
        assert str(request.url) == "https://api.murf.ai/v1/speech/generate"
        assert request.headers["api-key"] == "murf-test-key"
        assert request.headers["accept"] == "application/json"
        assert json.loads(request.content) == {
            "text": "Hello",
            "voice_id": "en-US-natalie",
            "style": "Promo",
        }
        await adapter.aclose()

    async def test_http_error(self, murf_config: MurfConfig) -> None:
        adapter = _adapter(
            murf_config, lambda request: httpx.Response(401, json={"error": "bad key"})
        )

        with pytest.raises(NetworkFailure) as exc_info:
            await adapter.synthesize("Hello", "en-US-natalie", "Promo")

        assert exc_info.value.status_code == 401

    async def test_timeout(self, murf_config: MurfConfig) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        adapter = _adapter(murf_config, handler)

        with pytest.raises(NetworkFailure):
            await adapter.synthesize("Hello", "en-US-natalie", "Promo")

    async def test_missing_audio(self, murf_config: MurfConfig) -> None:
        adapter = _adapter(murf_config, lambda request: httpx.Response(200, json={"status": "ok"}))

        with pytest.raises(MalformedResponse):
            await adapter.synthesize("Hello", "en-US-natalie", "Promo")

    async def test_invalid_json(self, murf_config: MurfConfig) -> None:
        adapter = _adapter(murf_config, lambda request: httpx.Response(200, text="not json"))

        with pytest.raises(MalformedResponse):
            await adapter.synthesize("Hello", "en-US-natalie", "Promo")
