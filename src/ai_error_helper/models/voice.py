"""Data models for speech synthesis."""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class VoiceRequest:
    """Input of a single synthesis call. Never persisted."""

    text: str
    voice_id: str
    style: str


class VoiceOutcome(Enum):
    """How a synthesis trigger ended."""

    PLAYED = "played"
    FAILED = "failed"
    IGNORED = "ignored"  # another request from the same control was pending
