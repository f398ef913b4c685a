"""Google Gemini text explanation adapter.

This module implements the TextExplanationService protocol against the
Gemini REST ``generateContent`` endpoint using httpx.

Security features:
- Secret redaction BEFORE every API call (fail-closed)
- The API key travels as a query parameter, so error messages raised from
  this module never include the request URL
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from ...config.schema import GeminiConfig
from ...utils.async_helpers import MalformedResponse, NetworkFailure
from ...utils.security import SecretRedactor, redact_prompt

log = structlog.get_logger()


def extract_text(data: Any) -> str:
    """Pull ``candidates[0].content.parts[0].text`` out of a Gemini reply.

    Raises:
        MalformedResponse: If any level of the path is missing
    """
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        raise MalformedResponse("Gemini response has no candidate text") from e
    if not isinstance(text, str):
        raise MalformedResponse("Gemini candidate text is not a string")
    return text


class GeminiAdapter:
    """Gemini adapter implementing the TextExplanationService protocol.

    Example:
        config = GeminiConfig(api_key="...")
        adapter = GeminiAdapter(config)

        text = await adapter.generate("Explain: TypeError ...")
        await adapter.aclose()
    """

    def __init__(
        self,
        config: GeminiConfig,
        client: httpx.AsyncClient | None = None,
        redactor: SecretRedactor | None = None,
    ) -> None:
        """Initialize the Gemini adapter.

        Args:
            config: Gemini-specific configuration.
            client: HTTP client. If None, creates one with the configured timeout.
            redactor: Secret redactor. If None, creates default.
        """
        self._config = config
        self._client = client or httpx.AsyncClient(timeout=config.timeout)
        self._redactor = redactor or SecretRedactor()

    @property
    def model_name(self) -> str:
        """Return the model identifier being used."""
        return self._config.model

    @property
    def endpoint(self) -> str:
        """generateContent URL for the configured model (without the key)."""
        return f"{self._config.base_url.rstrip('/')}/models/{self._config.model}:generateContent"

    def _redact_text(self, text: str) -> str:
        """Redact secrets from text, failing closed on error.

        Raises:
            SecurityError: If redaction fails.
        """
        return redact_prompt(self._redactor, text, "gemini")

    async def generate(self, prompt: str) -> str:
        """Generate text for a prompt.

        Raises:
            NetworkFailure: On transport errors or non-2xx status.
            MalformedResponse: If the reply is not JSON or lacks text.
            SecurityError: If redaction fails.
        """
        payload = {"contents": [{"parts": [{"text": self._redact_text(prompt)}]}]}

        try:
            response = await self._client.post(
                self.endpoint,
                params={"key": self._config.api_key},
                json=payload,
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            log.error("gemini_http_error", status_code=status, body=e.response.text[:500])
            raise NetworkFailure(f"Gemini returned HTTP {status}", status_code=status) from e
        except httpx.HTTPError as e:
            log.error("gemini_request_failed", error_type=type(e).__name__, error=str(e))
            raise NetworkFailure(f"Gemini request failed: {type(e).__name__}") from e

        try:
            data = response.json()
        except ValueError as e:
            log.error("gemini_invalid_json", body=response.text[:500])
            raise MalformedResponse("Gemini response is not valid JSON") from e

        try:
            return extract_text(data)
        except MalformedResponse:
            log.error(
                "gemini_missing_text",
                response_keys=sorted(data) if isinstance(data, dict) else None,
            )
            raise

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
