"""Abstract interface for text explanation backends."""

from typing import Protocol


class TextExplanationService(Protocol):
    """Generates free-form explanatory text for a prompt.

    Implemented by the Gemini and Anthropic adapters.
    """

    async def generate(self, prompt: str) -> str:
        """
        Generate text for a prompt.

        Args:
            prompt: Full prompt, e.g. an error message plus the offending line

        Returns:
            Raw model output (may contain Markdown)

        Raises:
            NetworkFailure: If the backend is unreachable or returns non-success
            MalformedResponse: If the response lacks the expected text field
        """
        ...

    @property
    def model_name(self) -> str:
        """Return the model identifier being used."""
        ...
