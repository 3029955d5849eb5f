"""
Unit Tests for Configuration Management.

Tests run against the packaged YAML defaults. Failure scenarios use
tmp_path to create controlled settings directories.
"""

from pathlib import Path

import pytest
import yaml

from asgardeo_cli.core.config import (
    PACKAGED_SETTINGS_DIR,
    AppConfig,
    expand_path,
    get_app_config,
    get_settings,
    load_yaml_config,
    settings_dir,
)
from asgardeo_cli.core.config_schema import ApplicationSchema, LoggingSchema
from asgardeo_cli.core.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def _clear_config_cache(monkeypatch):
    """Clear lru_cache and ASGARDEO_* overrides so each test gets a fresh load."""
    for name in ("ASGARDEO_CONFIG_DIR", "ASGARDEO_CLIENT_ID", "ASGARDEO_CLIENT_SECRET"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    get_app_config.cache_clear()
    yield
    get_settings.cache_clear()
    get_app_config.cache_clear()


def write_settings(directory: Path, application: dict | None = None, logging: dict | None = None) -> Path:
    """Copy the packaged settings into ``directory`` with top-level overrides."""
    for filename, overrides in (("application.yaml", application), ("logging.yaml", logging)):
        data = load_yaml_config(filename, PACKAGED_SETTINGS_DIR)
        data.update(overrides or {})
        (directory / filename).write_text(yaml.safe_dump(data))
    return directory


# =============================================================================
# Packaged defaults
# =============================================================================


class TestPackagedDefaults:
    """Tests for the YAML files shipped with the package."""

    def test_application_defaults(self, app_config: AppConfig) -> None:
        """Test application.yaml loads into its schema."""
        assert isinstance(app_config.application, ApplicationSchema)
        assert app_config.application.api.base_url == "https://api.asgardeo.io/"
        assert app_config.application.api.base_path == "t/{tenant}/api/server/v1"
        assert app_config.application.api.follow_redirects is True

    def test_scopes_cover_application_management(self, app_config: AppConfig) -> None:
        """Test the default scopes include application management."""
        assert "internal_application_mgt_view" in app_config.application.auth.scopes

    def test_logging_defaults(self, app_config: AppConfig) -> None:
        """Test logging.yaml loads into its schema with console logging off."""
        assert isinstance(app_config.logging, LoggingSchema)
        assert app_config.logging.handlers.console.enabled is False
        assert app_config.logging.handlers.file.enabled is True

    def test_credentials_file_is_expanded(self, app_config: AppConfig) -> None:
        """Test the credential path has its ~ expanded."""
        assert app_config.credentials_file.is_absolute()
        assert app_config.credentials_file.name == "config.yaml"


# =============================================================================
# Settings and overrides
# =============================================================================


class TestSettings:
    """Tests for environment overrides."""

    def test_defaults_to_packaged_directory(self) -> None:
        assert settings_dir() == PACKAGED_SETTINGS_DIR

    def test_config_dir_override(self, monkeypatch, tmp_path) -> None:
        """Test ASGARDEO_CONFIG_DIR redirects YAML loading."""
        write_settings(tmp_path, application={"name": "custom"})
        monkeypatch.setenv("ASGARDEO_CONFIG_DIR", str(tmp_path))

        assert settings_dir() == tmp_path
        assert get_app_config().application.name == "custom"

    def test_client_credentials_from_environment(self, monkeypatch) -> None:
        """Test client credentials are read from the environment and the secret is masked."""
        monkeypatch.setenv("ASGARDEO_CLIENT_ID", "client-123")
        monkeypatch.setenv("ASGARDEO_CLIENT_SECRET", "s3cret")

        settings = get_settings()

        assert settings.client_id == "client-123"
        assert settings.client_secret.get_secret_value() == "s3cret"
        assert "s3cret" not in repr(settings)

    def test_expand_path(self) -> None:
        assert expand_path("~/x") == Path.home() / "x"


# =============================================================================
# Failure scenarios
# =============================================================================


class TestInvalidConfiguration:
    """Tests for configuration errors."""

    def test_missing_file_raises(self, tmp_path) -> None:
        """Test a missing YAML file raises ConfigurationError."""
        with pytest.raises(ConfigurationError, match="application.yaml"):
            AppConfig(tmp_path)

    def test_unknown_key_raises(self, tmp_path) -> None:
        """Test unknown keys are rejected at load time."""
        write_settings(tmp_path, application={"unexpected": True})

        with pytest.raises(ConfigurationError, match="application.yaml"):
            AppConfig(tmp_path)

    def test_missing_key_raises(self, tmp_path) -> None:
        """Test a missing required section is rejected."""
        write_settings(tmp_path)
        data = load_yaml_config("logging.yaml", tmp_path)
        del data["handlers"]
        (tmp_path / "logging.yaml").write_text(yaml.safe_dump(data))

        with pytest.raises(ConfigurationError, match="logging.yaml"):
            AppConfig(tmp_path)
