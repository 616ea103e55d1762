"""Configuration management using Pydantic Settings."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

# Config file location
CONFIG_PATH = Path.home() / ".config" / "supa-session" / "config.yaml"

PLACEHOLDER_URL = "https://placeholder.supabase.co"
PLACEHOLDER_ANON_KEY = "placeholder-anon-key"


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that loads from YAML config file."""

    def get_field_value(
        self, field: Any, field_name: str
    ) -> tuple[Any, str, bool]:
        """Get field value from YAML config."""
        config = load_config()
        if field_name in config:
            return config[field_name], field_name, False
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return all config values."""
        return load_config()


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Without any configuration the placeholder backend is used: the manager
    can be constructed, but backend calls fail cleanly.
    """

    model_config = SettingsConfigDict(
        env_prefix="SUPABASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    url: str = Field(default=PLACEHOLDER_URL, description="Backend base URL")
    anon_key: str = Field(default=PLACEHOLDER_ANON_KEY, description="Public API key")
    keyring_service: str = Field(
        default="supa-session",
        description="Keyring service name the credential slots live under",
    )
    timeout: int = Field(default=30, ge=5, le=120, description="HTTP timeout in seconds")
    oauth_callback_port: int = Field(
        default=8765,
        ge=1024,
        le=65535,
        description="Port for the local OAuth callback listener",
    )
    oauth_timeout: int = Field(
        default=300,
        ge=30,
        le=600,
        description="Timeout for OAuth flow in seconds",
    )

    @field_validator("url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Endpoint paths are appended with a leading slash."""
        return v.rstrip("/")

    @property
    def is_placeholder(self) -> bool:
        """True when no real backend has been configured."""
        return self.url == PLACEHOLDER_URL or self.anon_key == PLACEHOLDER_ANON_KEY

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources - priority: env > yaml > defaults."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
        )


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (useful for testing)."""
    global _settings
    _settings = None


def load_config() -> dict[str, Any]:
    """Load config from YAML file.

    Returns:
        Dictionary of config values, empty dict if file doesn't exist or is invalid.
    """
    if not CONFIG_PATH.exists():
        return {}
    try:
        with open(CONFIG_PATH) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError:
        return {}
    return data if isinstance(data, dict) else {}


def save_config(config: dict[str, Any]) -> None:
    """Save config to YAML file.

    Args:
        config: Dictionary of config values to save.
    """
    CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
    with open(CONFIG_PATH, "w") as f:
        yaml.dump(config, f, default_flow_style=False, allow_unicode=True)
