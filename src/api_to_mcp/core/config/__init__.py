"""Configuration management."""

from .settings import (
    ApplicationSettings,
    McpToolsSettings,
    Settings,
    get_settings,
    load_settings,
)

__all__ = [
    "ApplicationSettings",
    "McpToolsSettings",
    "Settings",
    "get_settings",
    "load_settings",
]
