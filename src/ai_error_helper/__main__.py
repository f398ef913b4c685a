"""Entry point for running the AI Error Helper outside an editor.

This module provides the command line for the AI Error Helper.
It handles:
- Configuration loading
- Logging setup with secret sanitization
- One-shot explanations for a file and line (``--explain``)
- A webview bridge speaking JSON lines over stdin/stdout (``--panel``)
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from ai_error_helper._version import __version__

if TYPE_CHECKING:
    from ai_error_helper.config.schema import HelperConfig

log = structlog.get_logger()


def setup_logging(debug: bool = False, log_format: str = "console") -> None:
    """Configure structured logging with secret sanitization.

    Args:
        debug: Enable debug logging if True
        log_format: Output format ("json" or "console")
    """
    from ai_error_helper.utils.logging import LogFormat, LogLevel, configure_logging

    level = LogLevel.DEBUG if debug else LogLevel.INFO
    configure_logging(level=level, log_format=LogFormat(log_format.lower()))


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed argument namespace
    """
    parser = argparse.ArgumentParser(
        prog="ai-error-helper",
        description="AI Error Helper - explain editor errors in plain language",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: $AI_ERROR_HELPER_CONFIG or config/config.yaml)",
    )

    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    parser.add_argument(
        "--format",
        choices=["json", "console"],
        default="console",
        help="Log output format (default: console)",
    )

    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument(
        "--dry-run",
        action="store_true",
        help="Parse config and validate without doing anything else",
    )
    mode.add_argument(
        "--explain",
        type=Path,
        metavar="FILE",
        help="Explain one error in FILE (requires --line and --message)",
    )
    mode.add_argument(
        "--panel",
        choices=["chat", "solution"],
        help="Run a webview bridge over stdin/stdout",
    )

    parser.add_argument("--line", type=int, help="1-based line of the error for --explain")
    parser.add_argument("--message", help="Diagnostic message for --explain")

    args = parser.parse_args(argv)
    if args.explain is not None and (args.line is None or not args.message):
        parser.error("--explain requires --line and --message")
    return args


async def explain_file(config: "HelperConfig", path: Path, line: int, message: str) -> int:
    """Print an explanation for a single error.

    Returns:
        Exit code (0 when an explanation was printed)
    """
    from ai_error_helper.adapters.local import (
        FileDocument,
        LogNotifier,
        StaticDiagnosticsSource,
        StreamPresenter,
    )
    from ai_error_helper.core.helper import create_helper
    from ai_error_helper.models.diagnostic import Diagnostic
    from ai_error_helper.models.solution import Ready

    document = FileDocument(path)
    source = StaticDiagnosticsSource(document, [Diagnostic(message=message, start_line=line - 1)])
    helper = create_helper(config, source, LogNotifier(), presenter=StreamPresenter())

    try:
        records = helper.update()
        state = await helper.get_explanation(records[0].fingerprint)
    finally:
        await helper.aclose()
    return 0 if isinstance(state, Ready) else 1


async def run_panel(config: "HelperConfig", kind: str) -> int:
    """Serve one webview panel over stdin/stdout until EOF.

    Returns:
        Exit code
    """
    from ai_error_helper.adapters.local import LogNotifier, StaticDiagnosticsSource, StreamSurface
    from ai_error_helper.core.helper import create_helper
    from ai_error_helper.utils.async_helpers import BackgroundTasks
    from ai_error_helper.utils.logging import panel_context

    helper = create_helper(config, StaticDiagnosticsSource(None, []), LogNotifier())

    surface = StreamSurface(sys.stdout)
    if kind == "chat":
        bridge = helper.open_chat_panel(surface)
    else:
        bridge = helper.open_solution_panel(surface)

    tasks = BackgroundTasks()

    with panel_context(bridge.panel_id, kind=kind):
        log.info("panel_bridge_started")
        try:
            while True:
                line = await asyncio.to_thread(sys.stdin.readline)
                if not line:
                    break
                if not line.strip():
                    continue
                try:
                    payload = json.loads(line)
                except json.JSONDecodeError as e:
                    log.warning("invalid_json_message", error=str(e))
                    continue
                if not isinstance(payload, dict):
                    log.warning("invalid_webview_message", error="message is not an object")
                    continue
                tasks.spawn(bridge.handle_message(payload), name=str(payload.get("command")))
            await tasks.drain()
        finally:
            bridge.dispose()
            await helper.aclose()
            log.info("panel_bridge_stopped")

    return 0


def dry_run(config: "HelperConfig") -> int:
    """Log a masked summary of a validated configuration."""
    from ai_error_helper.utils.security import mask_config_value

    provider = config.explanation.provider
    provider_config = getattr(config.explanation, provider)
    log.info(
        "dry_run_mode_config_valid",
        explanation_provider=provider,
        model=provider_config.model,
        api_key=mask_config_value("api_key", provider_config.api_key),
        speech_enabled=config.speech.murf is not None,
        voice_id=config.speech.voice_id,
    )
    return 0


async def run(args: argparse.Namespace) -> int:
    """Run the selected mode.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    from ai_error_helper.config.loader import load_config, resolve_config_path

    config_path = resolve_config_path(args.config)
    log.info("starting_ai_error_helper", version=__version__, config_path=str(config_path))

    try:
        log.info("loading_configuration", path=str(config_path))
        config = load_config(config_path)
        log.info("configuration_loaded")

        # Reconfigure logging from config file settings; --debug still wins
        from ai_error_helper.utils.logging import configure_logging

        configure_logging(
            level="DEBUG" if args.debug else config.logging.level,
            log_format=config.logging.format,
            file_path=config.logging.file.path if config.logging.file.enabled else None,
            file_enabled=config.logging.file.enabled,
        )

        if args.dry_run:
            return dry_run(config)
        if args.explain is not None:
            return await explain_file(config, args.explain, args.line, args.message)
        return await run_panel(config, args.panel)

    except FileNotFoundError as e:
        log.error("file_not_found", error=str(e))
        return 1
    except UnicodeDecodeError as e:
        log.error("source_file_unreadable", path=str(args.explain), error=str(e))
        return 1
    except ValueError as e:
        log.error("configuration_invalid", error=str(e))
        return 1
    except Exception as e:
        log.exception("fatal_error", error=str(e))
        return 1


def main() -> int:
    """Main entry point."""
    args = parse_args()

    setup_logging(debug=args.debug, log_format=args.format)

    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        log.info("shutting_down_gracefully")
        return 0


if __name__ == "__main__":
    sys.exit(main())
