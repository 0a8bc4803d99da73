"""
Application configuration management.

Handles loading configuration from environment variables and .env files.
"""

from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class ApplicationSettings(BaseSettings):
    """Application configuration."""

    app_name: str = Field(default="api-to-mcp", alias="APP_NAME")
    app_env: str = Field(default="development", alias="APP_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @field_validator("app_env")
    @classmethod
    def validate_environment(cls, v: Any) -> str:
        allowed = {"development", "testing", "staging", "production"}
        v_str = str(v).lower()
        if v_str not in allowed:
            raise ValueError(f"APP_ENV must be one of {allowed}")
        return v_str

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: Any) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v = str(v).upper()
        if v not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of {allowed}")
        return str(v)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


class McpToolsSettings(BaseSettings):
    """Runtime settings for the generated MCP tools and their self-calls."""

    server_name: str = Field(default="api-to-mcp", alias="MCP_TOOLS_SERVER_NAME")

    # Reserved tool-endpoint prefix, also the loop-prevention boundary
    path: str = Field(default="/mcp", alias="MCP_TOOLS_PATH")

    # Self-call target resolution
    base_url: str | None = Field(None, alias="MCP_TOOLS_BASE_URL")
    tunnel_url_var: str = Field(default="DEV_TUNNEL_URL", alias="MCP_TOOLS_TUNNEL_URL_VAR")
    host: str = Field(default="127.0.0.1", alias="MCP_TOOLS_HOST")
    port: int = Field(default=8000, alias="MCP_TOOLS_PORT")
    https: bool = Field(default=False, alias="MCP_TOOLS_HTTPS")

    # HTTP client settings for the invoker
    request_timeout: float = Field(default=30.0, alias="MCP_TOOLS_REQUEST_TIMEOUT")
    verify_ssl: bool = Field(default=True, alias="MCP_TOOLS_VERIFY_SSL")

    # Scope checking stays disabled until the host supplies a claim mapper
    scope_claim: str = Field(default="scope", alias="MCP_TOOLS_SCOPE_CLAIM")

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: Any) -> str:
        path = "/" + str(v).strip().strip("/")
        if path == "/":
            raise ValueError("MCP_TOOLS_PATH must not be the root path")
        return path

    @field_validator("base_url")
    @classmethod
    def strip_base_url(cls, v: Any) -> str | None:
        if v is None:
            return None
        v_str = str(v).strip()
        return v_str or None

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


class Settings(BaseSettings):
    """Main settings class that combines all configuration sections."""

    application: ApplicationSettings = Field(default_factory=ApplicationSettings)
    mcp_tools: McpToolsSettings = Field(default_factory=McpToolsSettings)  # type: ignore[arg-type]

    @property
    def is_development(self) -> bool:
        return self.application.app_env == "development"

    @property
    def is_production(self) -> bool:
        return self.application.app_env == "production"

    @property
    def is_testing(self) -> bool:
        return self.application.app_env == "testing"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


def load_settings() -> Settings:
    """
    Load settings from environment variables and .env file.

    Returns:
        Settings: Configured settings instance
    """
    return Settings()


_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get cached settings instance (singleton pattern).

    Returns:
        Settings: Cached settings instance
    """
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings
