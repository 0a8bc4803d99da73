"""Unit tests for application settings."""

import pytest
from pydantic import ValidationError

from api_to_mcp.core.config.settings import (
    ApplicationSettings,
    McpToolsSettings,
    Settings,
    get_settings,
)


class TestApplicationSettings:
    """Test application-level settings."""

    @pytest.mark.unit
    def test_defaults(self):
        """Test default application settings."""
        # Act
        settings = ApplicationSettings()

        # Assert
        assert settings.app_name == "api-to-mcp"
        assert settings.app_env == "development"
        assert settings.log_level == "INFO"

    @pytest.mark.unit
    def test_environment_is_normalized(self, monkeypatch):
        """Test environment and log level are normalized."""
        # Arrange
        monkeypatch.setenv("APP_ENV", "Production")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        # Act
        settings = ApplicationSettings()

        # Assert
        assert settings.app_env == "production"
        assert settings.log_level == "DEBUG"

    @pytest.mark.unit
    def test_invalid_environment(self, monkeypatch):
        """Test unknown environments are rejected."""
        # Arrange
        monkeypatch.setenv("APP_ENV", "moon")

        # Act & Assert
        with pytest.raises(ValidationError, match="APP_ENV must be one of"):
            ApplicationSettings()


class TestMcpToolsSettings:
    """Test MCP tool runtime settings."""

    @pytest.mark.unit
    def test_defaults(self):
        """Test default tool settings."""
        # Act
        settings = McpToolsSettings()

        # Assert
        assert settings.path == "/mcp"
        assert settings.base_url is None
        assert settings.tunnel_url_var == "DEV_TUNNEL_URL"
        assert settings.host == "127.0.0.1"
        assert settings.port == 8000
        assert settings.request_timeout == 30.0
        assert settings.verify_ssl is True
        assert settings.scope_claim == "scope"

    @pytest.mark.unit
    def test_from_environment(self, monkeypatch):
        """Test tool settings are read from the environment."""
        # Arrange
        monkeypatch.setenv("MCP_TOOLS_PATH", "tools/")
        monkeypatch.setenv("MCP_TOOLS_BASE_URL", "  https://api.example.com ")
        monkeypatch.setenv("MCP_TOOLS_REQUEST_TIMEOUT", "12.5")
        monkeypatch.setenv("MCP_TOOLS_VERIFY_SSL", "false")

        # Act
        settings = McpToolsSettings()

        # Assert
        assert settings.path == "/tools"
        assert settings.base_url == "https://api.example.com"
        assert settings.request_timeout == 12.5
        assert settings.verify_ssl is False

    @pytest.mark.unit
    def test_blank_base_url_is_none(self, monkeypatch):
        """Test a blank base URL counts as unset."""
        # Arrange
        monkeypatch.setenv("MCP_TOOLS_BASE_URL", "   ")

        # Act & Assert
        assert McpToolsSettings().base_url is None

    @pytest.mark.unit
    def test_root_path_is_rejected(self, monkeypatch):
        """Test the tool endpoint cannot be the root path."""
        # Arrange
        monkeypatch.setenv("MCP_TOOLS_PATH", "/")

        # Act & Assert
        with pytest.raises(ValidationError):
            McpToolsSettings()


class TestSettings:
    """Test the combined settings object."""

    @pytest.mark.unit
    def test_environment_flags(self, monkeypatch):
        """Test the environment convenience properties."""
        # Arrange
        monkeypatch.setenv("APP_ENV", "testing")

        # Act
        settings = Settings()

        # Assert
        assert settings.is_testing
        assert not settings.is_development
        assert not settings.is_production

    @pytest.mark.unit
    def test_get_settings_is_cached(self):
        """Test the same instance is returned on every call."""
        # Act & Assert
        assert get_settings() is get_settings()
