"""Translation models for the localization runtime.

Defines the core data structures: locales, translation tables, per-locale
cache entries and the locale resolution context.
"""

import asyncio
import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, List, Mapping, Optional

from localization.errors import InvalidLocaleError

_LOCALE_PATTERN = re.compile(r"^([A-Za-z]{2,3})(?:[-_]([A-Za-z]{2}))?$")
_LANGUAGE_PATTERN = re.compile(r"^[a-z]{2,3}$")
_COUNTRY_PATTERN = re.compile(r"^[A-Z]{2}$")


@dataclass(frozen=True)
class Locale:
    """Language code plus optional country code.

    Equality and hashing are structural, so a Locale is usable as a cache and
    storage key.

    Attributes:
        language: ISO 639 language code, lowercase (e.g. "en").
        country: ISO 3166 region code, uppercase (e.g. "US"), or None.
    """

    language: str
    country: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.language, str) or not _LANGUAGE_PATTERN.match(
            self.language
        ):
            raise InvalidLocaleError(f"Invalid language code: {self.language!r}")
        if self.country is not None and (
            not isinstance(self.country, str) or not _COUNTRY_PATTERN.match(self.country)
        ):
            raise InvalidLocaleError(f"Invalid country code: {self.country!r}")

    @classmethod
    def from_string(cls, locale_str: str) -> "Locale":
        """Parse "en", "en-US" or "en_US" into a Locale.

        Args:
            locale_str: Locale code.

        Returns:
            Locale with normalized case.

        Raises:
            InvalidLocaleError: If the string is not a locale code.
        """
        match = _LOCALE_PATTERN.match(locale_str.strip()) if locale_str else None
        if not match:
            raise InvalidLocaleError(f"Malformed locale code: {locale_str!r}")
        language, country = match.groups()
        return cls(language=language.lower(), country=country.upper() if country else None)

    @classmethod
    def coerce(cls, value: Any) -> "Locale":
        """Return value as a Locale, parsing strings."""
        if isinstance(value, Locale):
            return value
        if isinstance(value, str):
            return cls.from_string(value)
        raise InvalidLocaleError(f"Not a locale: {value!r}")

    @property
    def language_code(self) -> str:
        """Language part used in remote file names (e.g. "en")."""
        return self.language

    def __str__(self) -> str:
        if self.country:
            return f"{self.language}-{self.country}"
        return self.language


@dataclass(frozen=True)
class TranslationTable:
    """Flat key -> message mapping for exactly one locale.

    Immutable: messages are exposed through a read-only mapping and a table is
    replaced wholesale on reload, never merged.

    Attributes:
        locale: The Locale this table is for.
        messages: Read-only mapping of key to translated string.
    """

    locale: Locale
    messages: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "messages", MappingProxyType(dict(self.messages)))

    @classmethod
    def from_mapping(cls, locale: Locale, data: Any) -> "TranslationTable":
        """Build a table from parsed data, validating its shape.

        Args:
            locale: Locale the data belongs to.
            data: Parsed JSON/YAML document.

        Returns:
            TranslationTable.

        Raises:
            ValueError: If data is not a flat mapping of strings to strings.
        """
        if not isinstance(data, dict):
            raise ValueError(
                f"Translations for {locale} must be an object, got {type(data).__name__}"
            )
        for key, value in data.items():
            if not isinstance(key, str) or not isinstance(value, str):
                raise ValueError(
                    f"Translations for {locale} must map strings to strings (key {key!r})"
                )
        return cls(locale=locale, messages=data)

    def get_message(self, key: str) -> Optional[str]:
        return self.messages.get(key)

    def has_message(self, key: str) -> bool:
        return key in self.messages

    def __len__(self) -> int:
        return len(self.messages)


class LoadState(str, Enum):
    """Lifecycle of one locale's table in the translation cache."""

    NOT_REQUESTED = "not_requested"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass
class CacheEntry:
    """Translation cache slot for one locale.

    Attributes:
        locale: Locale of the slot.
        state: Current LoadState.
        table: Loaded table, only set in LOADED.
        error: Last load failure, only set in FAILED.
        task: In-flight fetch while LOADING.
        generation: Incremented on each fetch; completions carrying an older
            generation are ignored.
    """

    locale: Locale
    state: LoadState = LoadState.NOT_REQUESTED
    table: Optional[TranslationTable] = None
    error: Optional[Exception] = None
    task: Optional["asyncio.Task[TranslationTable]"] = None
    generation: int = 0


@dataclass
class LocaleResolutionContext:
    """Candidate locales for startup resolution.

    Attributes:
        stored_locale: Value read from storage, if valid.
        environment_locale: Locale reported by the host, already truncated.
        default_locale: Configured fallback.
        supported_locales: Locales the application supports.
    """

    default_locale: Locale
    supported_locales: List[Locale] = field(default_factory=list)
    stored_locale: Optional[Locale] = None
    environment_locale: Optional[Locale] = None

    def resolve(self) -> Locale:
        """Resolve the startup locale.

        Resolution order:
        1. Stored locale (any syntactically valid value)
        2. Environment locale, when a supported locale shares its language
        3. Default locale

        Returns:
            Resolved Locale.
        """
        if self.stored_locale is not None:
            return self.stored_locale
        if self.environment_locale is not None:
            match = LanguageNegotiator.find_best_match(
                [self.environment_locale], self.supported_locales
            )
            if match is not None:
                return match
        return self.default_locale


class LanguageNegotiator:
    """Matches requested locales against the supported ones.

    An exact match wins; otherwise a supported locale with the same language
    code is accepted (e.g. requested "it" matches supported "it-IT").
    """

    @staticmethod
    def matches_language(
        requested: Locale,
        available: Locale,
        strict: bool = False,
    ) -> bool:
        """Check if available matches requested.

        Args:
            requested: Requested locale.
            available: Available locale.
            strict: If True, requires exact match. If False, allows language-only match.

        Returns:
            True if the locales match.
        """
        if requested == available:
            return True
        if strict:
            return False
        return requested.language == available.language

    @staticmethod
    def find_best_match(
        requested: List[Locale],
        available: List[Locale],
        default: Optional[Locale] = None,
    ) -> Optional[Locale]:
        """Find the best matching available locale.

        Args:
            requested: Requested locales in preference order.
            available: Available locales.
            default: Returned when nothing matches.

        Returns:
            Matching locale from available, or default.
        """
        for req in requested:
            for avail in available:
                if LanguageNegotiator.matches_language(req, avail, strict=True):
                    return avail
            for avail in available:
                if LanguageNegotiator.matches_language(req, avail, strict=False):
                    return avail
        return default
