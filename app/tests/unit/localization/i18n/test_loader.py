"""Tests for localization.i18n.loader."""

import asyncio

import httpx
import pytest

from localization.errors import (
    LoadFailureError,
    LocalizationError,
    MissingKeyError,
    MissingLocaleTableError,
)
from localization.events import LOCALE_CHANGED, Event
from localization.i18n import (
    HttpFetcher,
    Locale,
    LocaleResolver,
    LoadState,
    TranslationLoader,
    parse_translation_json,
)
from tests.factories.localization import (
    EN_MESSAGES,
    IT_MESSAGES,
    PREFIX,
    RecordingStorage,
    drain_loop,
    make_resolver_options,
    make_translation_table,
    translation_document,
)

pytestmark = pytest.mark.unit

IT_URL = f"{PREFIX}it.json"
EN_URL = f"{PREFIX}en.json"


@pytest.fixture
def activate(active_locale):
    def _activate(code):
        active_locale._set(Locale.from_string(code))

    return _activate


class TestParseTranslationJson:
    """parse_translation_json accepts only flat string documents."""

    def test_flat_document(self):
        """A flat JSON object becomes a table for the locale."""
        table = parse_translation_json(Locale("it"), translation_document(IT_MESSAGES))
        assert table.get_message("TITLE") == "Ciao"
        assert table.locale == Locale("it")

    @pytest.mark.parametrize(
        "raw",
        ["not json", "[1, 2]", '{"A": {"B": "nested"}}', '{"A": 1}', "null"],
    )
    def test_rejected_documents(self, raw):
        """Malformed or nested documents raise LoadFailureError."""
        with pytest.raises(LoadFailureError):
            parse_translation_json(Locale("it"), raw)


class TestRegisterLocale:
    """Direct and async locale registration."""

    def test_direct_locale_is_loaded_without_io(self, loader, controlled_fetcher, activate):
        """A direct locale is LOADED at once and never fetched."""
        loader.register_locale("en", EN_MESSAGES)
        activate("en")

        assert loader.state_of("en") == LoadState.LOADED
        assert loader.lookup("TITLE") == "Hello"
        assert controlled_fetcher.calls == []

    def test_async_locale_not_requested(self, loader):
        """An async locale starts NOT_REQUESTED."""
        loader.register_locale("it")
        assert loader.state_of("it") == LoadState.NOT_REQUESTED
        assert loader.is_async("it") is True

    def test_languages_keep_registration_order(self, loader):
        """get_languages keeps first registration order without duplicates."""
        loader.register_locale("it")
        loader.register_locale("en", EN_MESSAGES)
        loader.register_locale("it")
        assert loader.get_languages() == [Locale("it"), Locale("en")]

    def test_nested_table_rejected(self, loader):
        """A direct table with nested values is rejected."""
        with pytest.raises(ValueError):
            loader.register_locale("en", {"TITLE": {"nested": "value"}})

    def test_table_for_other_locale_rejected(self, loader):
        """A TranslationTable built for another locale is rejected."""
        with pytest.raises(ValueError):
            loader.register_locale("it", make_translation_table("en"))

    def test_direct_registration_replaces_table(self, loader, activate):
        """Registering a direct locale again replaces its whole table."""
        loader.register_locale("en", EN_MESSAGES)
        loader.register_locale("en", {"TITLE": "Hi"})
        activate("en")
        assert loader.lookup("TITLE") == "Hi"
        with pytest.raises(MissingKeyError):
            loader.lookup("SUBTITLE")

    def test_url_for(self, loader):
        """url_for joins the prefix and the language code."""
        assert loader.url_for("it") == IT_URL
        assert loader.url_for("en-US") == EN_URL


class TestLookup:
    """Synchronous lookups on the active locale."""

    def test_missing_key(self, loader, activate):
        """An absent key raises MissingKeyError naming the key and locale."""
        loader.register_locale("en", EN_MESSAGES)
        activate("en")
        with pytest.raises(MissingKeyError) as exc_info:
            loader.lookup("NOPE")
        assert exc_info.value.key == "NOPE"
        assert exc_info.value.locale == Locale("en")

    def test_unregistered_active_locale(self, loader, activate):
        """An active locale with no registration has no table."""
        activate("de")
        with pytest.raises(MissingLocaleTableError):
            loader.lookup("TITLE")

    def test_lookup_without_event_loop_does_not_fetch(self, loader, activate):
        """Without a running loop a lookup cannot start a fetch."""
        loader.register_locale("it")
        activate("it")
        with pytest.raises(MissingLocaleTableError):
            loader.lookup("TITLE")
        assert loader.state_of("it") == LoadState.NOT_REQUESTED

    @pytest.mark.asyncio
    async def test_lookup_starts_lazy_fetch(self, active_locale, events, controlled_fetcher):
        """The first lookup of a lazy locale starts exactly one fetch."""
        loader = TranslationLoader(
            active_locale, events, prefix=PREFIX, fetcher=controlled_fetcher, eager_load=False
        )
        loader.register_locale("it")
        active_locale._set(Locale("it"))

        with pytest.raises(MissingLocaleTableError):
            loader.lookup("TITLE")
        with pytest.raises(MissingLocaleTableError):
            loader.lookup("TITLE")
        await drain_loop()

        assert loader.state_of("it") == LoadState.LOADING
        assert controlled_fetcher.calls == [IT_URL]

        controlled_fetcher.resolve(IT_URL, translation_document(IT_MESSAGES))
        await drain_loop()
        assert loader.lookup("TITLE") == "Ciao"


class TestLoad:
    """TranslationLoader.load fetches, caches and deduplicates."""

    @pytest.mark.asyncio
    async def test_concurrent_loads_share_one_fetch(self, loader, controlled_fetcher):
        """Concurrent loads of one locale share a single fetch."""
        loader.register_locale("it")

        first = asyncio.create_task(loader.load("it"))
        second = asyncio.create_task(loader.load("it"))
        await drain_loop()

        assert controlled_fetcher.calls == [IT_URL]
        assert loader.state_of("it") == LoadState.LOADING

        controlled_fetcher.resolve(IT_URL, translation_document(IT_MESSAGES))
        first_table, second_table = await asyncio.gather(first, second)

        assert first_table is second_table
        assert loader.state_of("it") == LoadState.LOADED

    @pytest.mark.asyncio
    async def test_loaded_locale_not_fetched_again(self, loader, controlled_fetcher):
        """A loaded locale is served from the cache."""
        loader.register_locale("it")
        task = asyncio.create_task(loader.load("it"))
        await drain_loop()
        controlled_fetcher.resolve(IT_URL, translation_document(IT_MESSAGES))
        await task

        table = await loader.load("it")

        assert table.get_message("SUBTITLE") == "Benvenuto"
        assert controlled_fetcher.calls == [IT_URL]

    @pytest.mark.asyncio
    async def test_failure_then_explicit_reload(self, loader, controlled_fetcher):
        """An explicit load after a failure fetches again."""
        loader.register_locale("it")

        task = asyncio.create_task(loader.load("it"))
        await drain_loop()
        controlled_fetcher.fail(IT_URL, OSError("connection reset"))
        with pytest.raises(LoadFailureError):
            await task

        assert loader.state_of("it") == LoadState.FAILED
        assert loader.get_table("it") is None

        retry = asyncio.create_task(loader.load("it"))
        await drain_loop()
        controlled_fetcher.resolve(IT_URL, translation_document(IT_MESSAGES))
        table = await retry

        assert table.get_message("TITLE") == "Ciao"
        assert loader.state_of("it") == LoadState.LOADED
        assert controlled_fetcher.calls == [IT_URL, IT_URL]

    @pytest.mark.asyncio
    async def test_malformed_document_fails(self, loader, controlled_fetcher, activate):
        """A nested document leaves the locale FAILED."""
        loader.register_locale("it")
        activate("it")

        task = asyncio.create_task(loader.load("it"))
        await drain_loop()
        controlled_fetcher.resolve(IT_URL, '{"TITLE": {"nested": "value"}}')

        with pytest.raises(LoadFailureError):
            await task
        with pytest.raises(LoadFailureError):
            loader.lookup("TITLE")

    @pytest.mark.asyncio
    async def test_unregistered_locale(self, loader):
        """Loading an unregistered locale raises MissingLocaleTableError."""
        with pytest.raises(MissingLocaleTableError):
            await loader.load("de")

    @pytest.mark.asyncio
    async def test_no_provider_configured(self, active_locale, events):
        """Loading without a provider fails the locale."""
        loader = TranslationLoader(active_locale, events)
        loader.register_locale("it")

        with pytest.raises(LoadFailureError):
            await loader.load("it")
        assert loader.state_of("it") == LoadState.FAILED

    @pytest.mark.asyncio
    async def test_configure_provider_later(self, active_locale, events, controlled_fetcher):
        """A provider configured after registration is used."""
        loader = TranslationLoader(active_locale, events)
        loader.register_locale("it")
        loader.configure_provider(PREFIX, controlled_fetcher)

        task = asyncio.create_task(loader.load("it"))
        await drain_loop()
        controlled_fetcher.resolve(IT_URL, translation_document(IT_MESSAGES))

        assert (await task).get_message("TITLE") == "Ciao"

    @pytest.mark.asyncio
    async def test_cancelled_waiter_keeps_fetch_running(self, loader, controlled_fetcher):
        """Cancelling one waiter does not cancel the shared fetch."""
        loader.register_locale("it")

        waiter = asyncio.create_task(loader.load("it"))
        await drain_loop()
        waiter.cancel()
        await drain_loop()

        assert waiter.cancelled()
        assert loader.state_of("it") == LoadState.LOADING

        controlled_fetcher.resolve(IT_URL, translation_document(IT_MESSAGES))
        await drain_loop()
        assert loader.state_of("it") == LoadState.LOADED

    @pytest.mark.asyncio
    async def test_direct_registration_supersedes_fetch(self, loader, controlled_fetcher, activate):
        """A direct registration during a fetch wins over its result."""
        loader.register_locale("it")
        activate("it")

        waiter = asyncio.create_task(loader.load("it"))
        await drain_loop()
        loader.register_locale("it", IT_MESSAGES)
        controlled_fetcher.resolve(IT_URL, translation_document({"TITLE": "stale"}))

        table = await waiter

        assert table.get_message("TITLE") == "Ciao"
        assert loader.lookup("TITLE") == "Ciao"
        assert loader.is_async("it") is False


class TestWaitUntilLoaded:
    """wait_until_loaded waits without retrying failures."""

    @pytest.mark.asyncio
    async def test_waits_for_in_flight_fetch(self, loader, controlled_fetcher, activate):
        """A waiter joins the fetch already in flight."""
        loader.register_locale("it")
        activate("it")
        fetch = asyncio.create_task(loader.load("it"))
        await drain_loop()

        waiter = asyncio.create_task(loader.wait_until_loaded("it"))
        await drain_loop()
        assert not waiter.done()

        controlled_fetcher.resolve(IT_URL, translation_document(IT_MESSAGES))
        assert (await waiter) is (await fetch)
        assert controlled_fetcher.calls == [IT_URL]

    @pytest.mark.asyncio
    async def test_failed_locale_not_refetched(self, loader, controlled_fetcher):
        """A FAILED locale raises without a new fetch."""
        loader.register_locale("it")
        task = asyncio.create_task(loader.load("it"))
        await drain_loop()
        controlled_fetcher.fail(IT_URL, OSError("offline"))
        with pytest.raises(LoadFailureError):
            await task

        with pytest.raises(LoadFailureError):
            await loader.wait_until_loaded("it")
        assert controlled_fetcher.calls == [IT_URL]

    @pytest.mark.asyncio
    async def test_direct_locale_returns_immediately(self, loader):
        """A direct locale returns its table at once."""
        loader.register_locale("en", EN_MESSAGES)
        table = await loader.wait_until_loaded("en")
        assert table.get_message("ONLY_EN") == "English only"


class TestPreload:
    """preload loads the active locale quietly."""

    @pytest.mark.asyncio
    async def test_preload_swallows_failure(self, loader, controlled_fetcher, activate):
        """A failed preload returns None and marks the locale FAILED."""
        loader.register_locale("it")
        activate("it")

        task = asyncio.create_task(loader.preload())
        await drain_loop()
        controlled_fetcher.fail(IT_URL, OSError("offline"))

        assert await task is None
        assert loader.state_of("it") == LoadState.FAILED

    @pytest.mark.asyncio
    async def test_preload_direct_locale(self, loader, controlled_fetcher, activate):
        """Preloading a direct locale performs no I/O."""
        loader.register_locale("en", EN_MESSAGES)
        activate("en")
        table = await loader.preload()
        assert table.get_message("TITLE") == "Hello"
        assert controlled_fetcher.calls == []


class TestLocaleChanged:
    """Reaction to locale.changed."""

    @pytest.mark.asyncio
    async def test_eager_loader_fetches_on_change(self, loader, events, controlled_fetcher):
        """An eager loader fetches the new locale on change."""
        loader.register_locale("it")

        events.dispatch(Event(event_type=LOCALE_CHANGED, metadata={"locale": Locale("it")}))
        await drain_loop()

        assert loader.state_of("it") == LoadState.LOADING
        assert controlled_fetcher.calls == [IT_URL]

    @pytest.mark.asyncio
    async def test_lazy_loader_waits_for_lookup(self, active_locale, events, controlled_fetcher):
        """A lazy loader does not fetch on change."""
        loader = TranslationLoader(
            active_locale, events, prefix=PREFIX, fetcher=controlled_fetcher, eager_load=False
        )
        loader.register_locale("it")

        events.dispatch(Event(event_type=LOCALE_CHANGED, metadata={"locale": Locale("it")}))
        await drain_loop()

        assert loader.state_of("it") == LoadState.NOT_REQUESTED
        assert controlled_fetcher.calls == []

    @pytest.mark.asyncio
    async def test_failed_locale_not_retried_on_change(self, loader, events, controlled_fetcher):
        """A FAILED locale is not retried by a locale change."""
        loader.register_locale("it")
        task = asyncio.create_task(loader.load("it"))
        await drain_loop()
        controlled_fetcher.fail(IT_URL, OSError("offline"))
        with pytest.raises(LoadFailureError):
            await task

        events.dispatch(Event(event_type=LOCALE_CHANGED, metadata={"locale": Locale("it")}))
        await drain_loop()

        assert loader.state_of("it") == LoadState.FAILED
        assert controlled_fetcher.calls == [IT_URL]

    @pytest.mark.asyncio
    async def test_out_of_order_completion_never_shows_stale_locale(
        self, active_locale, events, loader, controlled_fetcher
    ):
        """Switch it -> en; the it fetch lands first and is never displayed."""
        resolver = LocaleResolver(RecordingStorage(), active_locale, events)
        loader.register_locale("fr", {"TITLE": "Bonjour"})
        loader.register_locale("it")
        loader.register_locale("en")
        await resolver.initialize(
            make_resolver_options(default_locale="fr", supported_locales=("fr", "it", "en"))
        )
        assert loader.lookup("TITLE") == "Bonjour"

        await resolver.set_current_locale("it")
        await resolver.set_current_locale("en")
        await drain_loop()
        assert controlled_fetcher.calls == [IT_URL, EN_URL]

        controlled_fetcher.resolve(IT_URL, translation_document(IT_MESSAGES))
        await drain_loop()
        assert loader.state_of("it") == LoadState.LOADED
        with pytest.raises(MissingLocaleTableError):
            loader.lookup("TITLE")

        controlled_fetcher.resolve(EN_URL, translation_document(EN_MESSAGES))
        await drain_loop()
        assert loader.lookup("TITLE") == "Hello"


class TestTranslationsLoadedEvent:
    """translations.loaded announcements."""

    @pytest.mark.asyncio
    async def test_loaded_and_failed_events(self, loader, controlled_fetcher, loaded_events):
        """Direct registration and fetch failure are both announced."""
        loader.register_locale("en", EN_MESSAGES)
        loader.register_locale("it")

        task = asyncio.create_task(loader.load("it"))
        await drain_loop()
        controlled_fetcher.fail(IT_URL, OSError("offline"))
        with pytest.raises(LoadFailureError):
            await task

        statuses = [(e.metadata["locale"], e.metadata["status"]) for e in loaded_events]
        assert statuses == [(Locale("en"), "loaded"), (Locale("it"), "failed")]
        assert "offline" in loaded_events[-1].metadata["error"]

    @pytest.mark.asyncio
    async def test_stale_result_not_announced(self, loader, controlled_fetcher, loaded_events):
        """A fetch superseded by a direct registration is not announced."""
        loader.register_locale("it")
        waiter = asyncio.create_task(loader.load("it"))
        await drain_loop()
        loader.register_locale("it", IT_MESSAGES)
        controlled_fetcher.resolve(IT_URL, translation_document(IT_MESSAGES))
        await waiter

        assert len(loaded_events) == 1


class TestFetcherErrors:
    """Every fetcher exception ends in FAILED with a failure event."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            LocalizationError("provider misconfigured"),
            MissingKeyError(Locale("it"), "TITLE"),
            RuntimeError("boom"),
        ],
    )
    async def test_error_marks_locale_failed(
        self, loader, controlled_fetcher, loaded_events, activate, error
    ):
        """A fetcher error of any type is stored as a LoadFailureError."""
        loader.register_locale("it")
        activate("it")

        with pytest.raises(MissingLocaleTableError):
            loader.lookup("TITLE")
        await drain_loop()
        controlled_fetcher.fail(IT_URL, error)
        await drain_loop()

        assert loader.state_of("it") == LoadState.FAILED
        with pytest.raises(LoadFailureError):
            loader.lookup("TITLE")
        assert [e.metadata["status"] for e in loaded_events] == ["failed"]
        assert controlled_fetcher.calls == [IT_URL]

    @pytest.mark.asyncio
    async def test_http_status_error_marks_locale_failed(self, active_locale, events):
        """A 404 from the HTTP fetcher surfaces as LoadFailureError."""
        transport = httpx.MockTransport(lambda request: httpx.Response(404))
        async with httpx.AsyncClient(transport=transport) as client:
            loader = TranslationLoader(
                active_locale, events, prefix=PREFIX, fetcher=HttpFetcher(client=client)
            )
            loader.register_locale("it")

            with pytest.raises(LoadFailureError) as exc_info:
                await loader.load("it")

        assert isinstance(exc_info.value.__cause__, httpx.HTTPStatusError)
        assert loader.state_of("it") == LoadState.FAILED
