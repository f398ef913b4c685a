"""Tests for the command line entry point."""

from __future__ import annotations

import io
import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from ai_error_helper.__main__ import dry_run, explain_file, parse_args, run, run_panel
from ai_error_helper.config.loader import load_config
from ai_error_helper.utils.logging import configure_logging


FACTORY = "ai_error_helper.core.helper.create_explanation_service"


@pytest.fixture(autouse=True)
def stderr_logging() -> None:
    """Keep log output off stdout, which carries panel messages."""
    configure_logging(level="WARNING", log_format="json")


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """A valid configuration without speech."""
    path = tmp_path / "config.yaml"
    path.write_text(
        "explanation:\n"
        "  provider: gemini\n"
        "  gemini:\n"
        "    api_key: gemini-test-key-123456\n"
    )
    return path


@pytest.fixture
def explainer() -> AsyncMock:
    """Mocked text service returned by the adapter factory."""
    service = AsyncMock()
    service.model_name = "test-model"
    service.generate.return_value = "**Use** a `string`."
    return service


class TestParseArgs:
    """Tests for argument parsing."""

    def test_dry_run(self) -> None:
        args = parse_args(["--dry-run"])
        assert args.dry_run
        assert args.config is None

    def test_explain(self) -> None:
        args = parse_args(["--explain", "main.ts", "--line", "3", "--message", "boom"])
        assert args.explain == Path("main.ts")
        assert args.line == 3

    def test_explain_requires_line_and_message(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["--explain", "main.ts"])

    def test_mode_required(self) -> None:
        with pytest.raises(SystemExit):
            parse_args([])

    def test_modes_are_exclusive(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["--dry-run", "--panel", "chat"])


class TestModes:
    """Tests for the run modes."""

    def test_dry_run(self, config_file: Path) -> None:
        assert dry_run(load_config(config_file)) == 0

    async def test_run_missing_config(self, tmp_path: Path) -> None:
        args = parse_args(["--dry-run", "-c", str(tmp_path / "missing.yaml")])
        assert await run(args) == 1

    async def test_run_invalid_config(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("explanation:\n  provider: gemini\n")
        assert await run(parse_args(["--dry-run", "-c", str(path)])) == 1

    async def test_explain_file(
        self, config_file: Path, tmp_path: Path, explainer: AsyncMock, capsys
    ) -> None:
        source = tmp_path / "main.ts"
        source.write_text("let b: string = 1;\n")

        with patch(FACTORY, return_value=explainer):
            code = await explain_file(
                load_config(config_file), source, 1, "Type 'number' is not assignable"
            )

        assert code == 0
        assert "Use a string." in capsys.readouterr().out
        prompt = explainer.generate.call_args.args[0]
        assert "let b: string = 1;" in prompt
        explainer.aclose.assert_awaited_once()

    async def test_explain_file_failure(
        self, config_file: Path, tmp_path: Path, explainer: AsyncMock
    ) -> None:
        from ai_error_helper.utils.async_helpers import NetworkFailure

        source = tmp_path / "main.ts"
        source.write_text("x\n")
        explainer.generate.side_effect = NetworkFailure("down")

        with patch(FACTORY, return_value=explainer):
            assert await explain_file(load_config(config_file), source, 1, "boom") == 1

    async def test_run_explain_binary_source(
        self, config_file: Path, tmp_path: Path, explainer: AsyncMock
    ) -> None:
        source = tmp_path / "main.ts"
        source.write_bytes(b"let a = '\xff\xfe';\n")
        args = parse_args(
            ["-c", str(config_file), "--explain", str(source), "--line", "1", "--message", "x"]
        )

        with (
            patch(FACTORY, return_value=explainer),
            patch("ai_error_helper.__main__.log") as log,
        ):
            assert await run(args) == 1

        events = [c.args[0] for c in log.error.call_args_list]
        assert "source_file_unreadable" in events
        assert "configuration_invalid" not in events
        explainer.generate.assert_not_awaited()

    async def test_chat_panel_over_stdio(
        self, config_file: Path, explainer: AsyncMock, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        explainer.generate.return_value = "hello"
        stdin = io.StringIO(
            '{"command": "chat:send", "text": "hi"}\n'
            "not json\n"
            "\n"
            "[1, 2]\n"
            '{"command": "speak", "text": ""}\n'
        )
        stdout = io.StringIO()
        monkeypatch.setattr("sys.stdin", stdin)
        monkeypatch.setattr("sys.stdout", stdout)

        with patch(FACTORY, return_value=explainer):
            code = await run_panel(load_config(config_file), "chat")

        messages = [json.loads(line) for line in stdout.getvalue().splitlines()]
        assert code == 0
        assert {"command": "chat:append", "role": "ai", "text": "hello"} in messages
        assert {"command": "speechFinished"} in messages
        assert len(messages) == 2

    async def test_solution_panel_announces(
        self, config_file: Path, explainer: AsyncMock, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        stdout = io.StringIO()
        monkeypatch.setattr("sys.stdin", io.StringIO(""))
        monkeypatch.setattr("sys.stdout", stdout)

        with patch(FACTORY, return_value=explainer):
            await run_panel(load_config(config_file), "solution")

        assert json.loads(stdout.getvalue()) == {"command": "explanationLoaded"}

    async def test_run_applies_logging_config(self, tmp_path: Path) -> None:
        log_file = tmp_path / "logs" / "helper.log"
        path = tmp_path / "config.yaml"
        path.write_text(
            "explanation:\n"
            "  provider: gemini\n"
            "  gemini:\n"
            "    api_key: gemini-test-key-123456\n"
            "logging:\n"
            "  level: WARNING\n"
            "  file:\n"
            "    enabled: true\n"
            f"    path: {log_file}\n"
        )

        with patch("ai_error_helper.utils.logging.configure_logging") as configure:
            assert await run(parse_args(["--dry-run", "-c", str(path)])) == 0

        kwargs = configure.call_args.kwargs
        assert kwargs["level"] == "WARNING"
        assert kwargs["file_enabled"] is True
        assert kwargs["file_path"] == log_file
