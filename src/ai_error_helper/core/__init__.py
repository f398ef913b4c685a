"""Core state management components.

This module exports:
- SolutionCache: fingerprint-keyed error records and solution states
- DiagnosticWatcher: keeps the cache in step with editor diagnostics
- ExplanationCoordinator: explanation request state machine
- VoiceCoordinator: speech synthesis state machine
- ChatCoordinator: chat panel conversation flow
- WebviewBridge: host <-> webview message protocol
- ErrorHelper: composition root
"""

from ai_error_helper.core.bridge import WebviewBridge, parse_inbound
from ai_error_helper.core.chat import ChatCoordinator
from ai_error_helper.core.diagnostic_watcher import DiagnosticWatcher, refresh
from ai_error_helper.core.explanation import ExplanationCoordinator
from ai_error_helper.core.fingerprinting import fingerprint
from ai_error_helper.core.helper import ErrorHelper, create_helper
from ai_error_helper.core.sanitize import PIPELINE, SanitizeStage, sanitize
from ai_error_helper.core.solution_cache import InvalidTransitionError, SolutionCache
from ai_error_helper.core.voice import SynthesisListener, VoiceCoordinator

__all__ = [
    "PIPELINE",
    "ChatCoordinator",
    "DiagnosticWatcher",
    "ErrorHelper",
    "ExplanationCoordinator",
    "InvalidTransitionError",
    "SanitizeStage",
    "SolutionCache",
    "SynthesisListener",
    "VoiceCoordinator",
    "WebviewBridge",
    "create_helper",
    "fingerprint",
    "parse_inbound",
    "refresh",
    "sanitize",
]
