"""Pydantic models for configuration schema."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_EXPLANATION_PROMPT = (
    "Explain this error to me like a good friend like a story, "
    "in about 1000 - 1100 letters, so I can quickly understand it:\n"
    'Error: "{message}"\n'
    'Code line: "{code_line}"'
)

DEFAULT_VOICE_PROMPT = (
    "Explain this error in simple friendly words like a short story "
    "so I can quickly understand:\n"
    'Error: "{message}"\n'
    'Code line: "{code_line}"'
)


class GeminiConfig(BaseModel):
    """Gemini-specific configuration."""

    api_key: str
    model: str = "gemini-2.0-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout: float = Field(60.0, gt=0)

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Reject placeholder keys left over from example configs."""
        if not v.strip() or v.startswith("YOUR_"):
            raise ValueError("Gemini api_key must be set")
        return v


class AnthropicConfig(BaseModel):
    """Anthropic-specific configuration."""

    api_key: str
    model: str = "claude-3-5-sonnet-20241022"
    max_tokens: int = 1024
    temperature: float = 0.3
    timeout: float = Field(60.0, gt=0)


class MurfConfig(BaseModel):
    """Murf text-to-speech configuration."""

    api_key: str
    base_url: str = "https://api.murf.ai/v1"
    timeout: float = Field(60.0, gt=0)

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Reject placeholder keys left over from example configs."""
        if not v.strip() or v.startswith("YOUR_"):
            raise ValueError("Murf api_key must be set")
        return v


class PromptConfig(BaseModel):
    """Prompt templates. ``{message}`` and ``{code_line}`` are substituted."""

    explanation: str = DEFAULT_EXPLANATION_PROMPT
    voice: str = DEFAULT_VOICE_PROMPT

    @field_validator("explanation", "voice")
    @classmethod
    def validate_placeholders(cls, v: str) -> str:
        """Templates must reference the diagnostic message."""
        if "{message}" not in v:
            raise ValueError("Prompt template must contain {message}")
        return v


class ExplanationConfig(BaseModel):
    """Text explanation provider configuration."""

    provider: Literal["gemini", "anthropic"]
    gemini: GeminiConfig | None = None
    anthropic: AnthropicConfig | None = None
    prompts: PromptConfig = PromptConfig()


class SpeechConfig(BaseModel):
    """Speech synthesis provider configuration."""

    provider: Literal["murf"] = "murf"
    murf: MurfConfig | None = None
    voice_id: str = "en-US-natalie"
    style: str = "Promo"


class FileLoggingConfig(BaseModel):
    """File logging configuration."""

    enabled: bool = False
    path: Path = Path("~/.cache/ai-error-helper/helper.log").expanduser()

    @field_validator("path")
    @classmethod
    def expand_path(cls, v: Path) -> Path:
        """Expand ~ in paths read from YAML."""
        return v.expanduser()


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "console"] = "json"
    file: FileLoggingConfig = FileLoggingConfig()


class HelperConfig(BaseSettings):
    """Root configuration for AI Error Helper."""

    explanation: ExplanationConfig
    speech: SpeechConfig = SpeechConfig()
    logging: LoggingConfig = LoggingConfig()

    model_config = SettingsConfigDict(
        env_prefix="AI_ERROR_HELPER_",
        env_nested_delimiter="__",
    )
