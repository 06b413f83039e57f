"""Localization configuration settings - main aggregator."""

from pydantic_settings import BaseSettings, SettingsConfigDict

from localization.configuration.loader import LoaderSettings
from localization.configuration.locale import LocaleSettings
from localization.configuration.storage import StorageSettings


class Settings(BaseSettings):
    """Localization runtime settings - main aggregator.

    Aggregates the section settings into a single configuration object:

    - **locale**: default/supported locales and default currency
    - **storage**: persistence strategy and cookie lifetime
    - **loader**: remote prefix, eager loading, bundled tables

    Environment Variables:
        PREFIX: Environment prefix, empty in production
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)

    Example:
        ```python
        from localization.configuration import settings

        if settings.loader.eager_load:
            ...
        ```
    """

    PREFIX: str = ""
    LOG_LEVEL: str = "INFO"

    locale: LocaleSettings
    storage: StorageSettings
    loader: LoaderSettings

    @property
    def is_production(self) -> bool:
        """Check if the runtime is running in production.

        Returns:
            True if PREFIX is empty (production), False otherwise.
        """
        return not bool(self.PREFIX)

    def __init__(self, **kwargs):
        """Initialize Settings with automatic subsettings instantiation.

        Args:
            **kwargs: Optional overrides for specific settings sections.
        """
        settings_map = {
            "locale": LocaleSettings,
            "storage": StorageSettings,
            "loader": LoaderSettings,
        }

        for setting_name, setting_class in settings_map.items():
            if setting_name not in kwargs:
                kwargs[setting_name] = setting_class()

        super().__init__(**kwargs)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


settings = Settings()
