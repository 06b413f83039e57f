"""i18n system - locale resolution and translation loading.

Main components:
- models: Locale, TranslationTable, CacheEntry, LoadState, LanguageNegotiator
- state: ActiveLocale shared by resolver and loader
- resolvers: LocaleResolver and ResolverOptions
- loader: TranslationLoader (direct and async tables)
- translator: Translator with placeholder policy and diagnostics
- service: LocalizationService facade
- factory: create_localization_service()
"""

from localization.i18n.bundled import read_bundled_tables
from localization.i18n.diagnostics import DiagnosticKind, TranslationDiagnostics
from localization.i18n.factory import (
    create_localization_service,
    resolver_options_from_settings,
)
from localization.i18n.fetchers import FileFetcher, HttpFetcher, create_fetcher
from localization.i18n.loader import TranslationLoader, parse_translation_json
from localization.i18n.models import (
    CacheEntry,
    LanguageNegotiator,
    LoadState,
    Locale,
    LocaleResolutionContext,
    TranslationTable,
)
from localization.i18n.resolvers import LocaleResolver, ResolverOptions
from localization.i18n.service import LocalizationService
from localization.i18n.state import ActiveLocale
from localization.i18n.translator import MissingTranslationPolicy, Translator

__all__ = [
    "Locale",
    "TranslationTable",
    "CacheEntry",
    "LoadState",
    "LocaleResolutionContext",
    "LanguageNegotiator",
    "ActiveLocale",
    "LocaleResolver",
    "ResolverOptions",
    "TranslationLoader",
    "parse_translation_json",
    "HttpFetcher",
    "FileFetcher",
    "create_fetcher",
    "read_bundled_tables",
    "Translator",
    "MissingTranslationPolicy",
    "TranslationDiagnostics",
    "DiagnosticKind",
    "LocalizationService",
    "create_localization_service",
    "resolver_options_from_settings",
]
