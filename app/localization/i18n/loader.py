"""Translation table loading, caching and lookup.

Each locale is either direct (table supplied in memory at registration) or
async (table fetched from <prefix><language-code>.json on demand). The cache
keeps one CacheEntry per locale and moves it through
NOT_REQUESTED -> LOADING -> LOADED | FAILED. Lookups only ever read the entry
of the active locale, so a fetch finishing for another locale never changes
what the current locale displays.
"""

import asyncio
import json
from typing import Dict, List, Mapping, Optional, Set, Union

from localization.errors import (
    LoadFailureError,
    MissingKeyError,
    MissingLocaleTableError,
)
from localization.events import LOCALE_CHANGED, TRANSLATIONS_LOADED, Event, EventBus
from localization.i18n.fetchers import Fetcher
from localization.i18n.models import CacheEntry, LoadState, Locale, TranslationTable
from localization.i18n.state import ActiveLocale
from localization.logging import get_module_logger

logger = get_module_logger()

LocaleLike = Union[Locale, str]


def parse_translation_json(locale: Locale, raw: str) -> TranslationTable:
    """Parse a remote translation document.

    Args:
        locale: Locale the document was fetched for.
        raw: Document text.

    Returns:
        TranslationTable for locale.

    Raises:
        LoadFailureError: If raw is not a flat JSON object of strings.
    """
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise LoadFailureError(locale, f"Malformed translation JSON for {locale}: {e}") from e
    try:
        return TranslationTable.from_mapping(locale, data)
    except ValueError as e:
        raise LoadFailureError(locale, str(e)) from e


class TranslationLoader:
    """Loads, caches and looks up translation tables.

    Attributes:
        active_locale: Shared ActiveLocale (read only here).
        events: Bus delivering locale.changed and receiving translations.loaded.
        prefix: Remote file prefix; the url of a locale is
            <prefix><language-code>.json.
        fetcher: Callable returning the document text for a url.
        eager_load: Fetch an async locale as soon as it becomes active.
        cache: Locale -> CacheEntry.
        languages: Registered locales in registration order.
    """

    def __init__(
        self,
        active_locale: ActiveLocale,
        events: EventBus,
        prefix: Optional[str] = None,
        fetcher: Optional[Fetcher] = None,
        eager_load: bool = True,
    ):
        self.active_locale = active_locale
        self.events = events
        self.prefix = prefix
        self.fetcher = fetcher
        self.eager_load = eager_load
        self.cache: Dict[Locale, CacheEntry] = {}
        self.languages: List[Locale] = []
        self._async_locales: Set[Locale] = set()

        self.events.register(LOCALE_CHANGED, self.on_locale_changed)
        logger.info("initialized_translation_loader", prefix=prefix, eager_load=eager_load)

    def configure_provider(self, prefix: str, fetcher: Fetcher) -> None:
        """Set the remote prefix and fetcher used by async locales."""
        self.prefix = prefix
        self.fetcher = fetcher
        logger.info("configured_translation_provider", prefix=prefix)

    def register_locale(
        self,
        locale: LocaleLike,
        table: Optional[Union[TranslationTable, Mapping[str, str]]] = None,
    ) -> None:
        """Register a locale in direct or async mode.

        With a table the locale is direct: the table is cached immediately and
        no I/O ever happens for it. Without a table the locale is async and
        its table is fetched on demand.

        Args:
            locale: Locale to register.
            table: Full translation table for direct mode.

        Raises:
            ValueError: If table is not a flat string mapping or belongs to
                another locale.
        """
        locale = Locale.coerce(locale)
        if locale not in self.languages:
            self.languages.append(locale)

        entry = self.cache.setdefault(locale, CacheEntry(locale=locale))

        if table is None:
            self._async_locales.add(locale)
            logger.info("registered_async_locale", locale=str(locale))
            return

        if not isinstance(table, TranslationTable):
            table = TranslationTable.from_mapping(locale, dict(table))
        elif table.locale != locale:
            raise ValueError(f"Table for {table.locale} registered under {locale}")

        self._async_locales.discard(locale)
        # Supersede any fetch still in flight for this locale.
        entry.generation += 1
        entry.state = LoadState.LOADED
        entry.table = table
        entry.error = None
        entry.task = None

        logger.info("registered_direct_locale", locale=str(locale), key_count=len(table))
        self._announce(locale, LoadState.LOADED)

    def get_languages(self) -> List[Locale]:
        return list(self.languages)

    def is_async(self, locale: LocaleLike) -> bool:
        return Locale.coerce(locale) in self._async_locales

    def state_of(self, locale: LocaleLike) -> LoadState:
        entry = self.cache.get(Locale.coerce(locale))
        return entry.state if entry else LoadState.NOT_REQUESTED

    def get_table(self, locale: LocaleLike) -> Optional[TranslationTable]:
        entry = self.cache.get(Locale.coerce(locale))
        return entry.table if entry else None

    def url_for(self, locale: LocaleLike) -> str:
        return f"{self.prefix or ''}{Locale.coerce(locale).language_code}.json"

    async def load(self, locale: LocaleLike) -> TranslationTable:
        """Return the table of a locale, fetching it if needed.

        Concurrent calls for a locale that is loading share one fetch. A
        loaded table is returned without I/O. A failed locale is fetched
        again, since the caller is explicitly asking.

        Args:
            locale: Locale to load.

        Returns:
            The cached TranslationTable.

        Raises:
            MissingLocaleTableError: If locale is neither loaded nor async.
            LoadFailureError: If the fetch or parse fails.
        """
        locale = Locale.coerce(locale)
        entry = self.cache.get(locale)
        if entry is not None and entry.state == LoadState.LOADED:
            return entry.table

        if locale not in self._async_locales:
            raise MissingLocaleTableError(locale, f"Locale {locale} is not registered")

        task = self._ensure_fetch(locale)
        # Shielded so one cancelled waiter does not cancel the shared fetch.
        return await asyncio.shield(task)

    async def wait_until_loaded(self, locale: LocaleLike) -> TranslationTable:
        """Wait for a locale's table to settle.

        Unlike load(), a locale whose last fetch failed is not fetched again:
        the stored failure is raised.

        Raises:
            MissingLocaleTableError: If locale is neither loaded nor async.
            LoadFailureError: If the last fetch failed.
        """
        locale = Locale.coerce(locale)
        entry = self.cache.get(locale)
        if entry is not None and entry.state == LoadState.FAILED:
            raise LoadFailureError(locale, str(entry.error))
        if entry is not None and entry.state == LoadState.LOADING and entry.task:
            return await asyncio.shield(entry.task)
        return await self.load(locale)

    async def preload(self) -> Optional[TranslationTable]:
        """Load the active locale's table if it is async and not cached.

        Failures are logged and reflected in the cache, not raised.
        """
        locale = self.active_locale.get()
        if locale not in self._async_locales:
            return self.get_table(locale)
        try:
            return await self.load(locale)
        except LoadFailureError:
            return None

    def lookup(self, key: str) -> str:
        """Look up a key in the active locale's table.

        For an async locale that was never requested, this starts its fetch
        in the background (when an event loop is running) and still raises
        MissingLocaleTableError for this call.

        Args:
            key: Translation key.

        Returns:
            The translated string.

        Raises:
            MissingLocaleTableError: Table not loaded yet (or never registered).
            LoadFailureError: The last fetch for the locale failed.
            MissingKeyError: The table has no such key.
        """
        locale = self.active_locale.get()
        entry = self.cache.get(locale)

        if entry is None or entry.state in (LoadState.NOT_REQUESTED, LoadState.LOADING):
            if locale in self._async_locales and (
                entry is None or entry.state == LoadState.NOT_REQUESTED
            ):
                self._request_in_background(locale, reason="lookup")
            raise MissingLocaleTableError(locale)

        if entry.state == LoadState.FAILED:
            raise LoadFailureError(locale, str(entry.error))

        message = entry.table.get_message(key)
        if message is None:
            raise MissingKeyError(locale, key)
        return message

    def on_locale_changed(self, event: Event) -> None:
        """Start fetching the new locale's table without blocking delivery."""
        locale = event.metadata.get("locale")
        if not self.eager_load or locale not in self._async_locales:
            return
        if self.state_of(locale) == LoadState.NOT_REQUESTED:
            self._request_in_background(locale, reason="locale_changed")

    def _request_in_background(self, locale: Locale, reason: str) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("no_event_loop_for_fetch", locale=str(locale), reason=reason)
            return
        self._ensure_fetch(locale)
        logger.debug("scheduled_translation_fetch", locale=str(locale), reason=reason)

    def _ensure_fetch(self, locale: Locale) -> "asyncio.Task[TranslationTable]":
        entry = self.cache.setdefault(locale, CacheEntry(locale=locale))
        if entry.state == LoadState.LOADING and entry.task and not entry.task.done():
            return entry.task

        entry.generation += 1
        entry.state = LoadState.LOADING
        entry.error = None
        entry.table = None

        task = asyncio.get_running_loop().create_task(
            self._fetch(locale, entry.generation)
        )
        task.add_done_callback(self._on_task_done(locale, entry.generation))
        entry.task = task
        logger.info("fetching_translations", locale=str(locale), url=self.url_for(locale))
        return task

    async def _fetch(self, locale: Locale, generation: int) -> TranslationTable:
        url = self.url_for(locale)
        try:
            table = await self._fetch_table(locale, url)
        except LoadFailureError as e:
            if self._settle(locale, generation, error=e):
                raise
            return self.cache[locale].table
        if self._settle(locale, generation, table=table):
            return table
        # Superseded by a direct registration; waiters get the direct table.
        return self.cache[locale].table

    async def _fetch_table(self, locale: Locale, url: str) -> TranslationTable:
        if self.fetcher is None or self.prefix is None:
            raise LoadFailureError(
                locale, f"No translation provider configured for {locale}"
            )
        try:
            raw = await self.fetcher(url)
        except LoadFailureError:
            raise
        except Exception as e:
            raise LoadFailureError(locale, f"Failed to fetch {url}: {e}") from e
        return parse_translation_json(locale, raw)

    def _settle(
        self,
        locale: Locale,
        generation: int,
        table: Optional[TranslationTable] = None,
        error: Optional[LoadFailureError] = None,
    ) -> bool:
        entry = self.cache[locale]
        if entry.generation != generation:
            logger.info(
                "discarded_stale_fetch_result",
                locale=str(locale),
                generation=generation,
                current_generation=entry.generation,
            )
            return False

        entry.task = None
        if error is not None:
            entry.state = LoadState.FAILED
            entry.table = None
            entry.error = error
            logger.warning(
                "translation_fetch_failed", locale=str(locale), error=str(error)
            )
        else:
            entry.state = LoadState.LOADED
            entry.table = table
            entry.error = None
            logger.info(
                "loaded_translations", locale=str(locale), key_count=len(table)
            )

        if locale != self.active_locale.peek():
            logger.info(
                "fetch_settled_for_inactive_locale",
                locale=str(locale),
                active_locale=str(self.active_locale.peek()),
            )
        self._announce(locale, entry.state, error)
        return True

    def _on_task_done(self, locale: Locale, generation: int):
        def callback(task: "asyncio.Task[TranslationTable]") -> None:
            if task.cancelled():
                entry = self.cache.get(locale)
                if entry is not None and entry.generation == generation:
                    entry.state = LoadState.NOT_REQUESTED
                    entry.task = None
                logger.info("translation_fetch_cancelled", locale=str(locale))
                return
            # Mark the exception as retrieved; it is already in the cache entry.
            task.exception()

        return callback

    def _announce(
        self,
        locale: Locale,
        state: LoadState,
        error: Optional[Exception] = None,
    ) -> None:
        metadata = {"locale": locale, "status": state.value}
        if error is not None:
            metadata["error"] = str(error)
        self.events.dispatch(Event(event_type=TRANSLATIONS_LOADED, metadata=metadata))
