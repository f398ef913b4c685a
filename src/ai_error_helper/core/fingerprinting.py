"""Diagnostic fingerprinting."""

from ai_error_helper.models.diagnostic import Diagnostic, Fingerprint


def fingerprint(diagnostic: Diagnostic) -> Fingerprint:
    """Derive the cache identity of a diagnostic from its message and start line."""
    return Fingerprint(message=diagnostic.message, line=diagnostic.start_line)
