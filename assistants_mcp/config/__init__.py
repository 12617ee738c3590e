"""Configuration loading and management."""

from assistants_mcp.config.loader import Settings, get_settings, load_yaml

__all__ = ["Settings", "get_settings", "load_yaml"]
