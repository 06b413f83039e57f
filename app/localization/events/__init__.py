"""Per-instance event bus for localization notifications.

Usage:

    from localization.events import EventBus, LOCALE_CHANGED

    events = EventBus()

    @events.subscribe(LOCALE_CHANGED)
    def on_locale_changed(event):
        print(event.metadata["locale"])
"""

from localization.events.bus import EventBus
from localization.events.models import (
    CURRENCY_CHANGED,
    LOCALE_CHANGED,
    TRANSLATIONS_LOADED,
    Event,
)

__all__ = [
    "Event",
    "EventBus",
    "LOCALE_CHANGED",
    "CURRENCY_CHANGED",
    "TRANSLATIONS_LOADED",
]
