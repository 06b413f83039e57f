"""Translation loader settings."""

from typing import Literal, Optional

from pydantic import Field

from localization.configuration.base import LocalizationSettingsBase


class LoaderSettings(LocalizationSettingsBase):
    """Translation table loading configuration.

    Environment Variables:
        L10N_TRANSLATION_PREFIX: Prefix of remote translation files. The url
            of a locale is <prefix><language-code>.json, e.g.
            "https://cdn.example.com/i18n/locale-" or "./resources/locale-".
        L10N_EAGER_LOAD: Fetch a locale's table as soon as it becomes active
            instead of on first lookup (default: True)
        L10N_FETCH_TIMEOUT_SECONDS: Timeout for remote fetches (default: 10)
        L10N_BUNDLED_TRANSLATIONS_DIR: Directory of <locale>.yml tables
            registered in direct mode at startup
        L10N_MISSING_TRANSLATION_POLICY: Placeholder returned by translate()
            when a lookup fails - 'key' or 'empty' (default: 'key')
        L10N_DIAGNOSTICS_MAX_ENTRIES: Distinct failed lookups kept for
            diagnostics before the least recently seen is dropped (default: 1000)
    """

    translation_prefix: Optional[str] = Field(
        default=None, alias="L10N_TRANSLATION_PREFIX"
    )
    eager_load: bool = Field(default=True, alias="L10N_EAGER_LOAD")
    fetch_timeout_seconds: float = Field(
        default=10.0, alias="L10N_FETCH_TIMEOUT_SECONDS", gt=0
    )
    bundled_translations_dir: Optional[str] = Field(
        default=None, alias="L10N_BUNDLED_TRANSLATIONS_DIR"
    )
    missing_translation_policy: Literal["key", "empty"] = Field(
        default="key", alias="L10N_MISSING_TRANSLATION_POLICY"
    )
    diagnostics_max_entries: int = Field(
        default=1000, alias="L10N_DIAGNOSTICS_MAX_ENTRIES", ge=1
    )
