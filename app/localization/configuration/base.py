"""Shared base class for localization settings modules."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class LocalizationSettingsBase(BaseSettings):
    """Base class for every localization settings section.

    All sections inherit from this class to ensure consistent configuration
    behavior (env file loading, case sensitivity).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
        populate_by_name=True,
    )
