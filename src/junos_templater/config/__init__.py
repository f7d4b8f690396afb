"""Templater settings."""
from .settings import TemplaterSettings, SettingsError, load_settings

__all__ = ["TemplaterSettings", "SettingsError", "load_settings"]
