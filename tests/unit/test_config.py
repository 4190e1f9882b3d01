"""Unit tests for configuration schema."""

import os

import pytest
from pathlib import Path
from unittest.mock import patch
from pydantic import ValidationError

from distinct.config import Config, get_config, reload_config


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run with no DISTINCT_* variables and no .env file in reach."""
    for key in list(os.environ):
        if key.startswith("DISTINCT_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


class TestConfig:
    """Test configuration loading and validation."""

    def test_defaults(self, clean_env):
        config = Config()

        assert config.enabled is True
        assert config.settings_file == Path("config/distinct.yaml")
        assert config.default_display == "default"
        assert config.log_level == "INFO"
        assert config.log_max_context_length == 1000

    def test_environment_variables(self, clean_env, monkeypatch):
        monkeypatch.setenv("DISTINCT_ENABLED", "false")
        monkeypatch.setenv("DISTINCT_SETTINGS_FILE", "/etc/distinct/listing.yaml")
        monkeypatch.setenv("DISTINCT_DEFAULT_DISPLAY", "master")
        monkeypatch.setenv("DISTINCT_LOG_LEVEL", "debug")

        config = Config()

        assert config.enabled is False
        assert config.settings_file == Path("/etc/distinct/listing.yaml")
        assert config.default_display == "master"
        assert config.log_level == "DEBUG"

    def test_dotenv_file(self, clean_env, tmp_path):
        (tmp_path / ".env").write_text("DISTINCT_DEFAULT_DISPLAY=page_1\n")
        assert Config().default_display == "page_1"

    def test_invalid_log_level(self, clean_env):
        with pytest.raises(ValidationError):
            Config(log_level="LOUD")

    def test_empty_default_display_rejected(self, clean_env):
        with pytest.raises(ValidationError):
            Config(default_display="")

    def test_context_length_bounds(self, clean_env):
        with pytest.raises(ValidationError):
            Config(log_max_context_length=10)


class TestValidateConfiguration:
    def test_valid(self, clean_env):
        assert Config().validate_configuration() == []

    def test_non_yaml_settings_file(self, clean_env):
        issues = Config(settings_file=Path("settings.json")).validate_configuration()
        assert any("yaml" in issue for issue in issues)

    def test_settings_path_is_directory(self, clean_env, tmp_path):
        d = tmp_path / "dir.yaml"
        d.mkdir()
        issues = Config(settings_file=d).validate_configuration()
        assert any("not a file" in issue for issue in issues)

    def test_log_configuration(self, clean_env):
        with patch("distinct.utils.logger.log_info") as mock_log:
            Config().log_configuration()
        mock_log.assert_called_once()
        assert mock_log.call_args.kwargs["default_display"] == "default"


class TestGlobalConfig:
    def test_get_config_is_cached(self, clean_env):
        reload_config()
        assert get_config() is get_config()

    def test_reload_config_picks_up_env(self, clean_env, monkeypatch):
        reload_config()
        monkeypatch.setenv("DISTINCT_ENABLED", "false")
        assert get_config().enabled is True
        assert reload_config().enabled is False
        assert get_config().enabled is False
        monkeypatch.delenv("DISTINCT_ENABLED")
        reload_config()
