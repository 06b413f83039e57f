"""Locale storage settings."""

from typing import Literal, Optional

from pydantic import Field

from localization.configuration.base import LocalizationSettingsBase


class StorageSettings(LocalizationSettingsBase):
    """Persistence of the user's locale and currency choice.

    Environment Variables:
        L10N_STORAGE: Storage strategy - 'disabled', 'cookie', 'session'
            or 'local' (default: 'cookie')
        L10N_COOKIE_EXPIRATION_DAYS: Cookie lifetime in days. Unset means a
            session cookie.
        L10N_LOCAL_STORAGE_PATH: JSON file backing the 'local' medium. Unset
            means the local medium is unavailable and the strategy degrades
            to 'disabled'.

    Strategies:
        - disabled: read always returns nothing, write is a no-op
        - cookie: "name=value; expires=...; path=/" cookie jar
        - session: process-lifetime mapping
        - local: file-backed mapping surviving restarts
    """

    strategy: Literal["disabled", "cookie", "session", "local"] = Field(
        default="cookie", alias="L10N_STORAGE"
    )
    cookie_expiration_days: Optional[int] = Field(
        default=None, alias="L10N_COOKIE_EXPIRATION_DAYS", ge=0
    )
    local_storage_path: Optional[str] = Field(
        default=None, alias="L10N_LOCAL_STORAGE_PATH"
    )
