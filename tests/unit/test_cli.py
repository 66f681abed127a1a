from __future__ import annotations

import io
import json
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, cast

import pytest
from cyclopts import App
from rich.console import Console

from r2pilot.cli import CLIContext, create_app
from r2pilot.cli._commands import ExitCode, exit_code_for, register_commands
from r2pilot.exceptions import (
    ConfigValidationError,
    HttpStatusError,
    SpawnError,
)
from r2pilot.utils import get_cli_log_file, get_user_config_path

if TYPE_CHECKING:
    from pytest_mock import MockerFixture

RunCli = Callable[..., int]


@pytest.fixture
def r2pilot_cli(console: Console) -> RunCli:
    """Run the CLI through its meta app and return the exit code."""
    app = create_app(console=console, error_console=console)

    def _run(*args: str) -> int:
        try:
            app.meta(list(args))
        except SystemExit as e:
            return int(e.code or 0)
        else:
            return 0
        finally:
            CLIContext.reset()

    return _run


class TestCommandRegistration:
    def test_register_commands_registers_subcommands(
        self, mocker: MockerFixture
    ) -> None:
        mock_app = mocker.MagicMock(spec=App)
        register_commands(mock_app)

        assert cast("int", mock_app.command.call_count) == 3  # pyright: ignore[reportAny]


class TestExitCodeFor:
    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            (
                ConfigValidationError("bad", key="k", value=1, expected="int"),
                ExitCode.CONFIG_ERROR,
            ),
            (SpawnError("no"), ExitCode.PROCESS_ERROR),
            (HttpStatusError("no", status_code=500), ExitCode.TRANSPORT_ERROR),
            (PermissionError("no"), ExitCode.IO_ERROR),
            (RuntimeError("no"), ExitCode.INTERNAL_ERROR),
        ],
    )
    def test_maps_errors(self, error: Exception, expected: ExitCode) -> None:
        assert exit_code_for(error) is expected


class TestPdb2bb:
    def test_formats_stdin(
        self,
        r2pilot_cli: RunCli,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO("  ; hdr\n  90   nop\n"))

        exit_code = r2pilot_cli("pdb2bb")

        assert exit_code == ExitCode.SUCCESS
        assert capsys.readouterr().out == "┌───────┐\n│ ; hdr │\n│ nop   │\n└───────┘\n"


class TestConfigCommand:
    def test_show_json_defaults(
        self, r2pilot_cli: RunCli, capsys: pytest.CaptureFixture[str]
    ) -> None:
        exit_code = r2pilot_cli("config")

        assert exit_code == ExitCode.SUCCESS
        data = json.loads(capsys.readouterr().out)
        assert data["radare2"]["executable_path"] == "radare2"
        assert data["radare2"]["http_port"] == 9090
        assert "custom_args" not in data["radare2"]

    def test_show_toml_from_config_file(
        self,
        r2pilot_cli: RunCli,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        config = tmp_path / "r2.toml"
        _ = config.write_text("[radare2]\nhttp_port = 7777\n")

        exit_code = r2pilot_cli("--config", str(config), "config", "--format", "toml")

        assert exit_code == ExitCode.SUCCESS
        out = capsys.readouterr().out
        assert "[radare2]" in out
        assert "http_port = 7777" in out

    def test_env_overrides_are_shown(
        self,
        r2pilot_cli: RunCli,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        monkeypatch.setenv("R2PILOT_RADARE2__SAVE_OUTPUT", "true")

        exit_code = r2pilot_cli("config")

        assert exit_code == ExitCode.SUCCESS
        assert json.loads(capsys.readouterr().out)["radare2"]["save_output"] is True

    def test_missing_config_file(
        self,
        r2pilot_cli: RunCli,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        exit_code = r2pilot_cli("--config", str(tmp_path / "nope.toml"), "config")

        assert exit_code == ExitCode.CONFIG_ERROR
        assert "Config file not found" in capsys.readouterr().err

    def test_path_shows_default_location(
        self,
        r2pilot_cli: RunCli,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        exit_code = r2pilot_cli("config", "path")

        assert exit_code == ExitCode.SUCCESS
        assert capsys.readouterr().out.strip() == str(get_user_config_path())


class TestExecCommand:
    def test_requires_commands(
        self, r2pilot_cli: RunCli, capsys: pytest.CaptureFixture[str]
    ) -> None:
        exit_code = r2pilot_cli("exec")

        assert exit_code == ExitCode.CONFIG_ERROR
        assert "No commands given" in capsys.readouterr().err

    def test_missing_binary(
        self,
        r2pilot_cli: RunCli,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        monkeypatch.setenv("R2PILOT_RADARE2__EXECUTABLE_PATH", "r2pilot-missing-binary")

        exit_code = r2pilot_cli("exec", "?V")

        assert exit_code == ExitCode.CONFIG_ERROR
        assert "r2pilot-missing-binary" in capsys.readouterr().err

    def test_logs_to_cli_log(
        self, r2pilot_cli: RunCli, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("R2PILOT_RADARE2__EXECUTABLE_PATH", "r2pilot-missing-binary")

        _ = r2pilot_cli("exec", "?V")

        log = get_cli_log_file().read_text()
        assert "exec_started" in log
        assert "exec_failed" in log
