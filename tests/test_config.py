"""Tests for settings loading."""

import pytest
from pydantic import ValidationError

from supa_session import config
from supa_session.config import (
    PLACEHOLDER_URL,
    Settings,
    get_settings,
    load_config,
    reset_settings,
    save_config,
)


@pytest.fixture(autouse=True)
def clean_env(tmp_path, monkeypatch):
    """No SUPABASE_* variables, no .env file, config file in tmp_path."""
    for name in ("URL", "ANON_KEY", "KEYRING_SERVICE", "TIMEOUT", "OAUTH_CALLBACK_PORT", "OAUTH_TIMEOUT"):
        monkeypatch.delenv(f"SUPABASE_{name}", raising=False)
    config_path = tmp_path / "config.yaml"
    monkeypatch.setattr(config, "CONFIG_PATH", config_path)
    monkeypatch.chdir(tmp_path)
    reset_settings()
    yield config_path
    reset_settings()


class TestSettings:
    """Tests for Settings sources and validation."""

    def test_defaults_are_placeholder(self):
        """Unconfigured settings point at the placeholder backend."""
        settings = Settings()

        assert settings.url == PLACEHOLDER_URL
        assert settings.is_placeholder
        assert settings.keyring_service == "supa-session"
        assert settings.timeout == 30
        assert settings.oauth_callback_port == 8765

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_URL", "https://abc.supabase.co")
        monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")

        settings = Settings()

        assert settings.url == "https://abc.supabase.co"
        assert settings.anon_key == "anon"
        assert not settings.is_placeholder

    def test_yaml_source(self, clean_env):
        clean_env.write_text("url: https://yaml.supabase.co\ntimeout: 45\n")

        settings = Settings()

        assert settings.url == "https://yaml.supabase.co"
        assert settings.timeout == 45

    def test_env_beats_yaml(self, clean_env, monkeypatch):
        clean_env.write_text("timeout: 45\n")
        monkeypatch.setenv("SUPABASE_TIMEOUT", "60")

        assert Settings().timeout == 60

    def test_trailing_slash_stripped(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_URL", "https://abc.supabase.co/")

        assert Settings().url == "https://abc.supabase.co"

    def test_timeout_out_of_range(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_TIMEOUT", "1")

        with pytest.raises(ValidationError):
            Settings()

    def test_get_settings_cached(self):
        """get_settings returns one instance until reset."""
        first = get_settings()

        assert get_settings() is first
        reset_settings()
        assert get_settings() is not first


class TestConfigFile:
    """Tests for the YAML config file helpers."""

    def test_missing_file(self):
        assert load_config() == {}

    def test_invalid_yaml(self, clean_env):
        clean_env.write_text("url: [unclosed\n")

        assert load_config() == {}

    def test_non_mapping(self, clean_env):
        clean_env.write_text("- just\n- a list\n")

        assert load_config() == {}

    def test_save_and_load(self, clean_env):
        save_config({"url": "https://abc.supabase.co", "timeout": 60})

        assert clean_env.exists()
        assert load_config() == {"url": "https://abc.supabase.co", "timeout": 60}
