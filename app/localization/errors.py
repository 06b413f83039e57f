"""Exceptions for the localization runtime.

Lookup-time failures (missing table, missing key, load failure) are
recoverable: LocalizationService.translate() turns them into a placeholder
and a recorded diagnostic instead of raising into view code.
"""

from typing import Any, Optional


class LocalizationError(Exception):
    """Base exception for all localization errors.

    Example:
        try:
            await resolver.set_current_locale("xx-YYY")
        except LocalizationError as e:
            logger.error("localization_error", error=str(e))
    """

    pass


class StorageUnavailableError(LocalizationError):
    """Raised when a storage medium is absent from the host environment.

    Never reaches callers of the storage factory: the factory degrades to
    DisabledStorage instead.

    Example:
        >>> CookieStorage(jar=None)
        Traceback (most recent call last):
        ...
        StorageUnavailableError: Cookie medium is not available
    """

    pass


class InvalidLocaleError(LocalizationError, ValueError):
    """Raised for a malformed or unsupported locale (or currency) code.

    The active locale is left unchanged.

    Example:
        >>> Locale.from_string("english")
        Traceback (most recent call last):
        ...
        InvalidLocaleError: Malformed locale code: 'english'
    """

    pass


class MissingLocaleTableError(LocalizationError):
    """Raised when no table is loaded yet for the active locale.

    Expected during startup while an async fetch is in flight, or when a
    locale was never registered.
    """

    def __init__(self, locale: Any, message: Optional[str] = None):
        self.locale = locale
        super().__init__(message or f"No translation table loaded for {locale}")


class MissingKeyError(LocalizationError, KeyError):
    """Raised when a loaded table does not contain the requested key."""

    def __init__(self, locale: Any, key: str):
        self.locale = locale
        self.key = key
        super().__init__(f"Translation key {key!r} not found for {locale}")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


class LoadFailureError(LocalizationError):
    """Raised when fetching or parsing a translation table fails.

    The cache entry of the locale holds no table afterwards. No automatic
    retry is performed.
    """

    def __init__(self, locale: Any, message: str):
        self.locale = locale
        super().__init__(message)
