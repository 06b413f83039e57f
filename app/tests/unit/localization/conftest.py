"""Feature-level fixtures for localization runtime tests."""

import pytest

from localization.events import EventBus, LOCALE_CHANGED, TRANSLATIONS_LOADED
from localization.i18n import (
    ActiveLocale,
    LocaleResolver,
    TranslationLoader,
    Translator,
)
from tests.factories.localization import (
    PREFIX,
    ControlledFetcher,
    RecordingStorage,
)


@pytest.fixture
def events():
    return EventBus()


@pytest.fixture
def active_locale():
    return ActiveLocale()


@pytest.fixture
def storage():
    return RecordingStorage()


@pytest.fixture
def controlled_fetcher():
    return ControlledFetcher()


@pytest.fixture
def loader(active_locale, events, controlled_fetcher):
    """TranslationLoader with a controllable fetcher and eager loading."""
    return TranslationLoader(
        active_locale,
        events,
        prefix=PREFIX,
        fetcher=controlled_fetcher,
        eager_load=True,
    )


@pytest.fixture
def resolver(storage, active_locale, events):
    return LocaleResolver(storage, active_locale, events)


@pytest.fixture
def translator(loader):
    return Translator(loader)


@pytest.fixture
def locale_changes(events):
    """Collect the locales announced through locale.changed."""
    received = []
    events.register(LOCALE_CHANGED, lambda event: received.append(event.metadata["locale"]))
    return received


@pytest.fixture
def loaded_events(events):
    """Collect translations.loaded events."""
    received = []
    events.register(TRANSLATIONS_LOADED, received.append)
    return received
