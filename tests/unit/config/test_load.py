from pathlib import Path

import pytest

from r2pilot.config import (
    ConfigLoadError,
    ConfigValidationError,
    LogLevel,
    Settings,
    load_settings,
    safe_load_settings,
    settings_from_dict,
)
from r2pilot.utils import get_user_config_path


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "r2pilot.toml"
    _ = path.write_text(
        """\
[radare2]
executable_path = "/opt/radare2/bin/radare2"
http_port = 8000
additional_args = ["-w"]

[logging]
level = "warning"
"""
    )
    return path


class TestSettingsFromDict:
    def test_empty_dict_gives_defaults(self) -> None:
        assert settings_from_dict({}) == Settings()

    def test_validation_error_names_key(self) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            _ = settings_from_dict(
                {"radare2": {"http_port": "not-a-port"}}, source="test"
            )

        assert exc_info.value.key == "radare2.http_port"
        assert exc_info.value.source == "test"

    def test_unknown_radare2_key_is_rejected(self) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            _ = settings_from_dict({"radare2": {"port": 1}})

        assert exc_info.value.key == "radare2.port"


class TestLoadSettings:
    def test_defaults_without_any_source(self) -> None:
        assert load_settings() == Settings()

    def test_explicit_file(self, config_file: Path) -> None:
        settings = load_settings(config_file)

        assert settings.radare2.executable_path == "/opt/radare2/bin/radare2"
        assert settings.radare2.http_port == 8000
        assert settings.radare2.additional_args == ("-w",)
        assert settings.logging.level is LogLevel.WARNING

    def test_user_config_is_used_when_present(self) -> None:
        user_config = get_user_config_path()
        user_config.parent.mkdir(parents=True)
        _ = user_config.write_text("[radare2]\nsave_output = true\n")

        assert load_settings().radare2.save_output

    def test_explicit_file_must_exist(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            _ = load_settings(tmp_path / "missing.toml")

    def test_env_overrides_file(
        self, config_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("R2PILOT_RADARE2__HTTP_PORT", "9001")

        settings = load_settings(config_file)

        assert settings.radare2.http_port == 9001
        assert settings.radare2.executable_path == "/opt/radare2/bin/radare2"

    def test_env_can_be_skipped(
        self, config_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("R2PILOT_RADARE2__HTTP_PORT", "9001")

        settings = load_settings(config_file, include_env=False)

        assert settings.radare2.http_port == 8000

    def test_overrides_win_over_env(
        self, config_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("R2PILOT_RADARE2__HTTP_PORT", "9001")

        settings = load_settings(
            config_file, overrides={"radare2": {"http_port": 9002}}
        )

        assert settings.radare2.http_port == 9002

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.toml"
        _ = path.write_text("[radare2\n")

        with pytest.raises(ConfigLoadError):
            _ = load_settings(path)

    def test_validation_error_reports_sources(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.toml"
        _ = path.write_text("[radare2]\nhttp_port = 70000\n")

        with pytest.raises(ConfigValidationError) as exc_info:
            _ = load_settings(path)

        assert exc_info.value.source == str(path)


class TestSafeLoadSettings:
    def test_success(self, config_file: Path) -> None:
        settings, error = safe_load_settings(config_file)

        assert error is None
        assert settings.radare2.http_port == 8000

    def test_failure_falls_back_to_defaults(self, tmp_path: Path) -> None:
        settings, error = safe_load_settings(tmp_path / "missing.toml")

        assert settings == Settings()
        assert error is not None
        assert "missing.toml" in error
