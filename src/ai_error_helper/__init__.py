"""AI explanations and spoken playback for editor diagnostics."""

from ai_error_helper._version import __version__

__all__ = ["__version__"]
