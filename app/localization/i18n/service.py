"""Localization service facade.

Wires one runtime instance together: storage, the shared ActiveLocale, the
event bus, the resolver, the loader and the translator.
"""

from typing import Callable, List, Mapping, Optional, Union

from localization.events import EventBus
from localization.events.bus import Handler
from localization.i18n.diagnostics import TranslationDiagnostics
from localization.i18n.loader import TranslationLoader
from localization.i18n.models import LoadState, Locale, TranslationTable
from localization.i18n.resolvers import LocaleResolver, ResolverOptions
from localization.i18n.state import ActiveLocale
from localization.i18n.translator import Translator
from localization.logging import get_module_logger

logger = get_module_logger()

LocaleLike = Union[Locale, str]


class LocalizationService:
    """Class-based entry point for view and framework code.

    Thin facade: the work is delegated to the resolver, loader and
    translator, which share this instance's ActiveLocale and EventBus.
    Independent instances never interfere with each other.

    Usage:
        service = create_localization_service()
        service.register_locale("en", {"TITLE": "Hello"})
        service.register_locale("it")
        await service.start(ResolverOptions.build("en", ["en", "it"]))

        service.translate("TITLE")
        await service.set_locale("it")
    """

    def __init__(
        self,
        resolver: LocaleResolver,
        loader: TranslationLoader,
        translator: Translator,
        events: EventBus,
        active_locale: ActiveLocale,
        on_close: Optional[Callable] = None,
    ):
        self.resolver = resolver
        self.loader = loader
        self.translator = translator
        self.events = events
        self.active_locale = active_locale
        self._on_close = on_close

    async def start(self, options: ResolverOptions) -> Locale:
        """Resolve the startup locale, then load its table if eager.

        Args:
            options: Resolver options (default/supported locales, ...).

        Returns:
            The active Locale.
        """
        locale = await self.resolver.initialize(options)
        if self.loader.eager_load:
            await self.loader.preload()
        logger.info(
            "localization_started",
            locale=str(locale),
            state=self.loader.state_of(locale).value,
        )
        return locale

    def register_locale(
        self,
        locale: LocaleLike,
        table: Optional[Union[TranslationTable, Mapping[str, str]]] = None,
    ) -> None:
        self.loader.register_locale(locale, table)

    def translate(self, key: str) -> str:
        return self.translator.translate(key)

    def lookup(self, key: str) -> str:
        """Strict lookup raising the typed lookup errors."""
        return self.loader.lookup(key)

    def get_locale(self) -> Locale:
        return self.resolver.get_current_locale()

    async def set_locale(self, locale: LocaleLike) -> bool:
        return await self.resolver.set_current_locale(locale)

    def get_currency(self) -> Optional[str]:
        return self.resolver.get_currency()

    async def set_currency(self, currency: str) -> bool:
        return await self.resolver.set_currency(currency)

    async def load(self, locale: LocaleLike) -> TranslationTable:
        return await self.loader.load(locale)

    async def wait_until_loaded(
        self, locale: Optional[LocaleLike] = None
    ) -> TranslationTable:
        """Wait for a locale's table (default: the active locale)."""
        return await self.loader.wait_until_loaded(locale or self.get_locale())

    def state_of(self, locale: LocaleLike) -> LoadState:
        return self.loader.state_of(locale)

    def get_languages(self) -> List[Locale]:
        return self.loader.get_languages()

    def subscribe(self, event_type: str, handler: Handler) -> Handler:
        return self.events.register(event_type, handler)

    @property
    def diagnostics(self) -> TranslationDiagnostics:
        return self.translator.diagnostics

    async def aclose(self) -> None:
        """Release resources owned by the service (e.g. an HTTP client)."""
        if self._on_close is not None:
            await self._on_close()
