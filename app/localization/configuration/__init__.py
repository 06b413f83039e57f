"""Localization configuration module - public API.

Centralized configuration for the localization runtime using Pydantic
BaseSettings with one settings class per concern.

Exports:
    settings: Singleton Settings instance (main configuration object)
    Settings: Main settings class (for testing/overrides)
    LocaleSettings, StorageSettings, LoaderSettings: section classes

Example:
    ```python
    from localization.configuration import settings

    default_locale = settings.locale.default_locale
    strategy = settings.storage.strategy

    if settings.is_production:
        # Production-specific logic...
    ```
"""

from localization.configuration.loader import LoaderSettings
from localization.configuration.locale import LocaleSettings
from localization.configuration.settings import Settings, settings
from localization.configuration.storage import StorageSettings

__all__ = [
    "settings",
    "Settings",
    "LocaleSettings",
    "StorageSettings",
    "LoaderSettings",
]
