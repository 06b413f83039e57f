"""Tests for localization.events."""

from unittest.mock import MagicMock
from uuid import UUID

import pytest

from localization.events import LOCALE_CHANGED, Event, EventBus
from localization.i18n import Locale

pytestmark = pytest.mark.unit


class TestRegistration:
    """Handler registration on an EventBus."""

    def test_register_returns_handler(self):
        """register() returns the handler it was given."""
        bus = EventBus()
        handler = MagicMock()
        assert bus.register("test.event", handler) is handler
        assert bus.get_handlers_for_event("test.event") == [handler]

    def test_subscribe_decorator(self):
        """subscribe() registers the decorated function."""
        bus = EventBus()

        @bus.subscribe("test.event")
        def handler(event):
            return event.event_type

        assert handler in bus.get_handlers_for_event("test.event")

    def test_unregister(self):
        """unregister() removes a registered handler."""
        bus = EventBus()
        handler = MagicMock()
        bus.register("test.event", handler)
        bus.unregister("test.event", handler)
        assert bus.get_handlers_for_event("test.event") == []

    def test_unregister_unknown_handler_is_noop(self):
        """Unregistering an unknown handler does nothing."""
        EventBus().unregister("test.event", MagicMock())

    def test_instances_do_not_share_handlers(self):
        """Handlers registered on one bus never see another bus's events."""
        first, second = EventBus(), EventBus()
        handler = MagicMock()
        first.register(LOCALE_CHANGED, handler)

        second.dispatch(Event(event_type=LOCALE_CHANGED))

        handler.assert_not_called()

    def test_clear_handlers(self):
        """clear_handlers() drops every registration."""
        bus = EventBus()
        bus.register("test.event", MagicMock())
        bus.clear_handlers()
        assert bus.get_handlers_for_event("test.event") == []


class TestDispatch:
    """Event delivery."""

    def test_handlers_called_in_order(self):
        """Handlers run in registration order."""
        bus = EventBus()
        calls = []
        bus.register("test.event", lambda event: calls.append("first"))
        bus.register("test.event", lambda event: calls.append("second"))

        bus.dispatch(Event(event_type="test.event"))

        assert calls == ["first", "second"]

    def test_dispatch_returns_results(self):
        """dispatch() returns each handler's result."""
        bus = EventBus()
        bus.register("test.event", lambda event: 1)
        bus.register("test.event", lambda event: 2)
        assert bus.dispatch(Event(event_type="test.event")) == [1, 2]

    def test_failing_handler_does_not_stop_others(self):
        """A raising handler is logged and the rest still run."""
        bus = EventBus()
        failing = MagicMock(side_effect=RuntimeError("boom"))
        succeeding = MagicMock(return_value="ok")
        bus.register("test.event", failing)
        bus.register("test.event", succeeding)

        results = bus.dispatch(Event(event_type="test.event"))

        assert results == ["ok"]
        succeeding.assert_called_once()

    def test_dispatch_without_handlers(self):
        """Dispatching with no handlers returns an empty list."""
        assert EventBus().dispatch(Event(event_type="nobody.listens")) == []


class TestEvent:
    """Event model."""

    def test_defaults(self):
        """An Event gets empty metadata and a correlation id."""
        event = Event(event_type=LOCALE_CHANGED)
        assert event.metadata == {}
        assert isinstance(event.correlation_id, UUID)

    def test_to_dict_stringifies_metadata(self):
        """to_dict() renders metadata values as strings."""
        event = Event(event_type=LOCALE_CHANGED, metadata={"locale": Locale("it")})
        data = event.to_dict()
        assert data["event_type"] == LOCALE_CHANGED
        assert data["metadata"] == {"locale": "it"}
        assert data["correlation_id"] == str(event.correlation_id)
