"""Host-side integrations (settings storage)."""

from .settings_store import InMemorySettingsProvider, JsonFileSettingsProvider, SettingsProvider

__all__ = [
    "InMemorySettingsProvider",
    "JsonFileSettingsProvider",
    "SettingsProvider",
]
