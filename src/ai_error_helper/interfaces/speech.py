"""Abstract interface for speech synthesis backends."""

from typing import Protocol


class SpeechSynthesisService(Protocol):
    """Synthesizes spoken audio for arbitrary text."""

    async def synthesize(self, text: str, voice_id: str, style: str) -> str:
        """
        Synthesize speech.

        Args:
            text: Text to speak
            voice_id: Backend voice identifier (e.g. "en-US-natalie")
            style: Voice style (e.g. "Promo")

        Returns:
            URL of a playable audio resource

        Raises:
            NetworkFailure: If the backend is unreachable or returns non-success
            MalformedResponse: If the response carries no audio URL
        """
        ...
