"""Data models and transfer objects."""

from .chat import ChatMessage, ChatRole, ChatSession
from .diagnostic import Diagnostic, Fingerprint, Severity
from .solution import (
    UNREQUESTED,
    ErrorRecord,
    Failed,
    Pending,
    Ready,
    SolutionState,
    Unrequested,
    has_solution,
    solution_text,
)
from .voice import VoiceOutcome, VoiceRequest

__all__ = [
    # Diagnostic models
    "Severity",
    "Diagnostic",
    "Fingerprint",
    # Solution models
    "SolutionState",
    "Unrequested",
    "Pending",
    "Ready",
    "Failed",
    "UNREQUESTED",
    "ErrorRecord",
    "has_solution",
    "solution_text",
    # Chat models
    "ChatRole",
    "ChatMessage",
    "ChatSession",
    # Voice models
    "VoiceRequest",
    "VoiceOutcome",
]
