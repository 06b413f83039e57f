"""Record of lookup failures for development diagnostics."""

from collections import OrderedDict
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from localization.i18n.models import Locale

DEFAULT_MAX_ENTRIES = 1000


class DiagnosticKind(str, Enum):
    MISSING_LOCALE_TABLE = "missing_locale_table"
    MISSING_KEY = "missing_key"
    LOAD_FAILURE = "load_failure"


@dataclass(frozen=True)
class Diagnostic:
    """One distinct failed lookup and how often it happened.

    Attributes:
        occurrences: Number of lookups that hit this failure.
        first_seen / last_seen: Time of the first and latest occurrence.
    """

    kind: DiagnosticKind
    locale: Optional[Locale]
    key: str
    message: str
    occurrences: int = 1
    first_seen: datetime = field(default_factory=datetime.now)
    last_seen: datetime = field(default_factory=datetime.now)


DiagnosticId = Tuple[DiagnosticKind, Optional[Locale], str]


class TranslationDiagnostics:
    """Collects every lookup that fell back to a placeholder.

    Repeated failures for the same (kind, locale, key) share one entry whose
    counter is incremented, so rendering the same view over and over does
    not grow the record. At most max_entries distinct failures are kept; the
    least recently seen is dropped first.
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._entries: "OrderedDict[DiagnosticId, Diagnostic]" = OrderedDict()

    @property
    def records(self) -> List[Diagnostic]:
        """Distinct failures, least recently seen first."""
        return list(self._entries.values())

    def record(
        self,
        kind: DiagnosticKind,
        locale: Optional[Locale],
        key: str,
        message: str,
    ) -> Diagnostic:
        diagnostic_id = (kind, locale, key)
        existing = self._entries.pop(diagnostic_id, None)
        if existing is None:
            diagnostic = Diagnostic(kind=kind, locale=locale, key=key, message=message)
        else:
            diagnostic = replace(
                existing,
                message=message,
                occurrences=existing.occurrences + 1,
                last_seen=datetime.now(),
            )
        self._entries[diagnostic_id] = diagnostic
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)
        return diagnostic

    def missing_keys(self, locale: Optional[Locale] = None) -> List[str]:
        """Distinct keys reported missing, optionally for one locale only."""
        keys: List[str] = []
        for diagnostic in self._entries.values():
            if diagnostic.kind != DiagnosticKind.MISSING_KEY:
                continue
            if locale is not None and diagnostic.locale != locale:
                continue
            if diagnostic.key not in keys:
                keys.append(diagnostic.key)
        return keys

    def count(self, kind: Optional[DiagnosticKind] = None) -> int:
        """Total failed lookups, optionally of one kind only."""
        return sum(
            diagnostic.occurrences
            for diagnostic in self._entries.values()
            if kind is None or diagnostic.kind == kind
        )

    def clear(self) -> None:
        self._entries.clear()
