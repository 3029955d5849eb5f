"""
Configuration Management.

Loads settings from config/settings/*.yaml and overrides from the environment.
Defaults ship inside the package; set ASGARDEO_CONFIG_DIR to load the YAML
files from another directory instead.

Environment (ASGARDEO_*):
    CONFIG_DIR, CLIENT_ID, CLIENT_SECRET

Settings (YAML):
    application.yaml   - API endpoints, requested scopes, credential file location
    logging.yaml       - Logging configuration
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from asgardeo_cli.core.config_schema import ApplicationSchema, LoggingSchema
from asgardeo_cli.core.exceptions import ConfigurationError

PACKAGED_SETTINGS_DIR = Path(__file__).resolve().parent.parent / "config" / "settings"


class Settings(BaseSettings):
    """Environment overrides. Only locations and client credentials."""

    config_dir: Path | None = None
    client_id: str | None = None
    client_secret: SecretStr | None = None

    model_config = SettingsConfigDict(
        env_prefix="ASGARDEO_",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached environment settings."""
    return Settings()


def settings_dir() -> Path:
    """Directory holding the YAML settings files."""
    return get_settings().config_dir or PACKAGED_SETTINGS_DIR


def expand_path(value: str) -> Path:
    """Resolve a configured path, expanding a leading ``~``."""
    return Path(value).expanduser()


def load_yaml_config(filename: str, directory: Path | None = None) -> dict[str, Any]:
    """Load a YAML configuration file from the settings directory."""
    config_path = (directory or settings_dir()) / filename

    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


def _load_validated(schema_cls: type, filename: str, directory: Path | None) -> Any:
    """Load YAML and validate against schema. Returns typed model instance."""
    raw = load_yaml_config(filename, directory)
    try:
        return schema_cls(**raw)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration in {filename}:\n{e}"
        ) from e


class AppConfig:
    """
    Application configuration loaded from YAML files.

    Each YAML file is validated against its Pydantic schema at load time.
    Properties return typed Pydantic model instances with attribute access.
    """

    def __init__(self, directory: Path | None = None) -> None:
        self._application = _load_validated(ApplicationSchema, "application.yaml", directory)
        self._logging = _load_validated(LoggingSchema, "logging.yaml", directory)

    @property
    def application(self) -> ApplicationSchema:
        """Application settings."""
        return self._application

    @property
    def logging(self) -> LoggingSchema:
        """Logging settings."""
        return self._logging

    @property
    def credentials_file(self) -> Path:
        """Location of the tenant credential store."""
        return expand_path(self._application.storage.credentials_file)


@lru_cache
def get_app_config() -> AppConfig:
    """Get cached application configuration."""
    return AppConfig()
