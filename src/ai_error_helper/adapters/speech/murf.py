"""Murf text-to-speech adapter.

This module implements the SpeechSynthesisService protocol against the
Murf ``/speech/generate`` REST endpoint using httpx.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from ...config.schema import MurfConfig
from ...utils.async_helpers import MalformedResponse, NetworkFailure

log = structlog.get_logger()

# Response fields that may carry the audio URL, in order of preference
AUDIO_URL_FIELDS = ("audioFile", "audio_url")


def extract_audio_url(data: Any) -> str:
    """Return the audio URL from a Murf reply.

    Raises:
        MalformedResponse: If no known field holds a non-empty string
    """
    if isinstance(data, dict):
        for field in AUDIO_URL_FIELDS:
            url = data.get(field)
            if isinstance(url, str) and url:
                return url
    raise MalformedResponse("Murf response did not contain an audio URL")


class MurfAdapter:
    """Murf adapter implementing the SpeechSynthesisService protocol.

    Example:
        adapter = MurfAdapter(MurfConfig(api_key="..."))
        url = await adapter.synthesize("Hello", "en-US-natalie", "Promo")
    """

    def __init__(self, config: MurfConfig, client: httpx.AsyncClient | None = None) -> None:
        """Initialize the Murf adapter.

        Args:
            config: Murf-specific configuration.
            client: HTTP client. If None, creates one with the configured timeout.
        """
        self._config = config
        self._client = client or httpx.AsyncClient(timeout=config.timeout)

    @property
    def endpoint(self) -> str:
        """Speech generation URL."""
        return f"{self._config.base_url.rstrip('/')}/speech/generate"

    async def synthesize(self, text: str, voice_id: str, style: str) -> str:
        """Synthesize speech and return the audio URL.

        Raises:
            NetworkFailure: On transport errors or non-2xx status.
            MalformedResponse: If the reply carries no audio URL.
        """
        try:
            response = await self._client.post(
                self.endpoint,
                json={"text": text, "voice_id": voice_id, "style": style},
                headers={
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                    "api-key": self._config.api_key,
                },
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            log.error("murf_http_error", status_code=status, body=e.response.text[:500])
            raise NetworkFailure(f"Murf returned HTTP {status}", status_code=status) from e
        except httpx.HTTPError as e:
            log.error("murf_request_failed", error_type=type(e).__name__, error=str(e))
            raise NetworkFailure(f"Murf request failed: {type(e).__name__}") from e

        try:
            data = response.json()
        except ValueError as e:
            log.error("murf_invalid_json", body=response.text[:500])
            raise MalformedResponse("Murf response is not valid JSON") from e

        try:
            return extract_audio_url(data)
        except MalformedResponse:
            log.error("murf_response_missing_audio", response=data)
            raise

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
