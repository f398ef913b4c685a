"""Configuration loading and validation."""

from .loader import load_config
from .schema import (
    AnthropicConfig,
    ExplanationConfig,
    GeminiConfig,
    HelperConfig,
    LoggingConfig,
    MurfConfig,
    PromptConfig,
    SpeechConfig,
)

__all__ = [
    # Loader
    "load_config",
    # Root config
    "HelperConfig",
    # Top-level configs
    "ExplanationConfig",
    "SpeechConfig",
    "LoggingConfig",
    "PromptConfig",
    # Provider-specific configs
    "GeminiConfig",
    "AnthropicConfig",
    "MurfConfig",
]
