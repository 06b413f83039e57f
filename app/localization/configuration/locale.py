"""Locale negotiation settings."""

from typing import List, Optional

from pydantic import Field

from localization.configuration.base import LocalizationSettingsBase


class LocaleSettings(LocalizationSettingsBase):
    """Defaults used when resolving the active locale at startup.

    Environment Variables:
        L10N_DEFAULT_LOCALE: Locale used when neither storage nor the host
            environment provides a supported one (default: "en")
        L10N_SUPPORTED_LOCALES: JSON list of supported locale codes
            (default: ["en"])
        L10N_DEFAULT_CURRENCY: ISO 4217 currency used when none is stored

    Example:
        ```python
        from localization.configuration import settings

        supported = settings.locale.supported_locales
        ```
    """

    default_locale: str = Field(default="en", alias="L10N_DEFAULT_LOCALE")
    supported_locales: List[str] = Field(
        default_factory=lambda: ["en"], alias="L10N_SUPPORTED_LOCALES"
    )
    default_currency: Optional[str] = Field(
        default=None, alias="L10N_DEFAULT_CURRENCY"
    )
