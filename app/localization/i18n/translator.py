"""Safe translation lookup for view code.

translate() never raises: lookup failures become a placeholder and a
recorded diagnostic, preserving UI availability over completeness.
"""

from enum import Enum
from typing import Optional

from localization.errors import (
    LoadFailureError,
    LocalizationError,
    MissingKeyError,
    MissingLocaleTableError,
)
from localization.i18n.diagnostics import DiagnosticKind, TranslationDiagnostics
from localization.i18n.loader import TranslationLoader
from localization.logging import get_module_logger

logger = get_module_logger()


class MissingTranslationPolicy(str, Enum):
    """Placeholder returned when a lookup fails."""

    KEY = "key"
    EMPTY = "empty"


class Translator:
    """Translates keys against the active locale.

    Attributes:
        loader: TranslationLoader holding the tables.
        policy: Placeholder policy for failed lookups.
        diagnostics: Record of every failed lookup.
    """

    def __init__(
        self,
        loader: TranslationLoader,
        policy: MissingTranslationPolicy = MissingTranslationPolicy.KEY,
        diagnostics: Optional[TranslationDiagnostics] = None,
    ):
        self.loader = loader
        self.policy = MissingTranslationPolicy(policy)
        self.diagnostics = diagnostics or TranslationDiagnostics()

    def translate(self, key: str) -> str:
        """Return the translation of key, or a placeholder.

        Args:
            key: Translation key.

        Returns:
            The translated string; the key itself or "" (per policy) when
            the table is missing, failed to load, or lacks the key.
        """
        try:
            return self.loader.lookup(key)
        except MissingKeyError as e:
            self._record(DiagnosticKind.MISSING_KEY, e.locale, key, e)
            logger.warning("translation_key_missing", key=key, locale=str(e.locale))
        except LoadFailureError as e:
            self._record(DiagnosticKind.LOAD_FAILURE, e.locale, key, e)
            logger.warning(
                "translation_table_failed", key=key, locale=str(e.locale), error=str(e)
            )
        except MissingLocaleTableError as e:
            self._record(DiagnosticKind.MISSING_LOCALE_TABLE, e.locale, key, e)
            logger.debug("translation_table_not_ready", key=key, locale=str(e.locale))
        except LocalizationError as e:
            self._record(DiagnosticKind.MISSING_LOCALE_TABLE, None, key, e)
            logger.warning("translation_before_initialization", key=key)
        return self.placeholder(key)

    def placeholder(self, key: str) -> str:
        return key if self.policy == MissingTranslationPolicy.KEY else ""

    def _record(self, kind: DiagnosticKind, locale, key: str, error: Exception) -> None:
        self.diagnostics.record(kind=kind, locale=locale, key=key, message=str(error))
