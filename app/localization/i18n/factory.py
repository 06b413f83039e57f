"""Factory functions for creating localization services.

Builds a fully wired LocalizationService from settings, with sensible
defaults for the host environment and the translation fetcher.
"""

from pathlib import Path
from typing import Optional

from localization.configuration import Settings, settings as default_settings
from localization.events import EventBus
from localization.i18n.bundled import read_bundled_tables
from localization.i18n.diagnostics import TranslationDiagnostics
from localization.i18n.fetchers import Fetcher, HttpFetcher, create_fetcher
from localization.i18n.loader import TranslationLoader
from localization.i18n.models import Locale
from localization.i18n.resolvers import LocaleResolver, ResolverOptions
from localization.i18n.service import LocalizationService
from localization.i18n.state import ActiveLocale
from localization.i18n.translator import MissingTranslationPolicy, Translator
from localization.logging import get_module_logger
from localization.storage import HostEnvironment, create_storage

logger = get_module_logger()


def resolver_options_from_settings(config: Optional[Settings] = None) -> ResolverOptions:
    """Build ResolverOptions from the locale and storage settings."""
    config = config or default_settings
    return ResolverOptions.build(
        default_locale=config.locale.default_locale,
        supported_locales=config.locale.supported_locales,
        cookie_expiration_days=config.storage.cookie_expiration_days,
        default_currency=config.locale.default_currency,
    )


def create_localization_service(
    config: Optional[Settings] = None,
    host: Optional[HostEnvironment] = None,
    fetcher: Optional[Fetcher] = None,
) -> LocalizationService:
    """Create and wire a LocalizationService.

    Every supported locale without a bundled table is registered as async
    when a translation prefix is configured.

    Args:
        config: Settings (default: the module singleton).
        host: Host environment (default: HostEnvironment.from_process()).
        fetcher: Translation fetcher (default: chosen from the prefix scheme).

    Returns:
        LocalizationService ready for start().

    Raises:
        ValueError: If the bundled translations directory is invalid.
    """
    config = config or default_settings
    host = host or HostEnvironment.from_process(config.storage.local_storage_path)

    storage = create_storage(
        config.storage.strategy,
        host,
        cookie_expiration_days=config.storage.cookie_expiration_days,
    )
    active_locale = ActiveLocale()
    events = EventBus()

    prefix = config.loader.translation_prefix
    if fetcher is None and prefix:
        fetcher = create_fetcher(prefix, timeout=config.loader.fetch_timeout_seconds)

    loader = TranslationLoader(
        active_locale,
        events,
        prefix=prefix,
        fetcher=fetcher,
        eager_load=config.loader.eager_load,
    )

    if config.loader.bundled_translations_dir:
        bundled = read_bundled_tables(Path(config.loader.bundled_translations_dir))
        for locale, table in bundled.items():
            loader.register_locale(locale, table)

    if prefix:
        for code in config.locale.supported_locales:
            locale = Locale.from_string(code)
            if loader.get_table(locale) is None:
                loader.register_locale(locale)

    translator = Translator(
        loader,
        policy=MissingTranslationPolicy(config.loader.missing_translation_policy),
        diagnostics=TranslationDiagnostics(
            max_entries=config.loader.diagnostics_max_entries
        ),
    )
    resolver = LocaleResolver(
        storage, active_locale, events, environment_language=host.language
    )

    on_close = fetcher.aclose if isinstance(fetcher, HttpFetcher) else None

    logger.info(
        "localization_service_created",
        storage=storage.strategy.value,
        prefix=prefix,
        languages=[str(locale) for locale in loader.get_languages()],
    )
    return LocalizationService(
        resolver=resolver,
        loader=loader,
        translator=translator,
        events=events,
        active_locale=active_locale,
        on_close=on_close,
    )
