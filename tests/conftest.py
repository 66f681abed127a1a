"""Shared test fixtures for r2pilot tests."""

import os
import sys
from collections.abc import Callable
from pathlib import Path

import pytest
from rich.console import Console

from r2pilot.config import Radare2Config

FIXTURES_DIR = Path(__file__).parent / "fixtures"
FAKE_R2 = FIXTURES_DIR / "fake_r2.py"


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point config and log lookups at a temporary home.

    Also clears every R2PILOT_ variable so the host environment cannot leak
    into settings.
    """
    home = tmp_path / "home"
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(home / "state"))
    for key in list(os.environ):
        if key.startswith("R2PILOT_"):
            monkeypatch.delenv(key)
    return home


@pytest.fixture
def console() -> Console:
    return Console(
        width=70,
        force_terminal=True,
        highlight=False,
        color_system=None,
        legacy_windows=False,
    )


PythonConfigFactory = Callable[..., Radare2Config]


@pytest.fixture
def python_config() -> PythonConfigFactory:
    """Return a factory for configs that run a Python snippet as the child."""

    def _make(code: str, **overrides: object) -> Radare2Config:
        return Radare2Config.model_validate(
            {
                "executable_path": sys.executable,
                "custom_args": ("-c", code),
                **overrides,
            }
        )

    return _make


@pytest.fixture
def fake_r2_path() -> Path:
    return FAKE_R2


@pytest.fixture
def fake_r2_config() -> PythonConfigFactory:
    """Return a factory for configs that run the fake radare2 pipe server."""

    def _make(*stub_args: str, **overrides: object) -> Radare2Config:
        return Radare2Config.model_validate(
            {
                "executable_path": sys.executable,
                "custom_args": (str(FAKE_R2), *stub_args),
                **overrides,
            }
        )

    return _make
