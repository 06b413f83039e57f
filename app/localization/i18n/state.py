"""Active locale holder shared by the resolver and the loader."""

from typing import Optional

from localization.errors import LocalizationError
from localization.i18n.models import Locale


class ActiveLocale:
    """The locale currently selected for one runtime instance.

    Created once per application instance and handed by reference to the
    LocaleResolver (the only writer) and the TranslationLoader (a reader).
    """

    def __init__(self) -> None:
        self._locale: Optional[Locale] = None

    @property
    def is_set(self) -> bool:
        return self._locale is not None

    def get(self) -> Locale:
        """Return the active locale.

        Raises:
            LocalizationError: If the resolver has not initialized it yet.
        """
        if self._locale is None:
            raise LocalizationError("Active locale is not initialized")
        return self._locale

    def peek(self) -> Optional[Locale]:
        """Return the active locale, or None before initialization."""
        return self._locale

    def _set(self, locale: Locale) -> None:
        self._locale = locale

    def __repr__(self) -> str:
        return f"ActiveLocale({self._locale!s})"
