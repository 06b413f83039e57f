"""Event bus for localization notifications.

Handlers are registered per bus instance and called synchronously, in
registration order, when an event is dispatched. Handler failures are logged
and never reach the publisher.
"""

from typing import Any, Callable, Dict, List

from localization.events.models import Event
from localization.logging import get_module_logger

logger = get_module_logger()

Handler = Callable[[Event], Any]


class EventBus:
    """In-process publish/subscribe registry owned by one runtime instance."""

    def __init__(self) -> None:
        self.handlers: Dict[str, List[Handler]] = {}

    def register(self, event_type: str, handler: Handler) -> Handler:
        """Register a handler for an event type.

        Args:
            event_type: The type of event to handle (e.g., 'locale.changed').
            handler: Callable receiving the Event.

        Returns:
            The handler, so the method can back a decorator.
        """
        self.handlers.setdefault(event_type, []).append(handler)
        logger.debug(
            "registered_event_handler",
            handler=getattr(handler, "__name__", "unknown"),
            event_type=event_type,
            total_handlers=len(self.handlers[event_type]),
        )
        return handler

    def subscribe(self, event_type: str) -> Callable[[Handler], Handler]:
        """Decorator form of register()."""

        def decorator(handler: Handler) -> Handler:
            return self.register(event_type, handler)

        return decorator

    def unregister(self, event_type: str, handler: Handler) -> None:
        handlers = self.handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def dispatch(self, event: Event) -> List[Any]:
        """Dispatch event synchronously to all registered handlers.

        If a handler raises, the failure is logged and the remaining
        handlers still run.

        Args:
            event: The event to dispatch.

        Returns:
            List of return values from the handlers that succeeded.
        """
        results = []
        handlers = list(self.handlers.get(event.event_type, []))

        logger.debug(
            "dispatching_event",
            event_type=event.event_type,
            handler_count=len(handlers),
            correlation_id=str(event.correlation_id),
        )

        for handler in handlers:
            try:
                results.append(handler(event))
            except Exception as e:
                logger.error(
                    "event_handler_failed",
                    handler=getattr(handler, "__name__", "unknown"),
                    event_type=event.event_type,
                    error=str(e),
                    correlation_id=str(event.correlation_id),
                )

        return results

    def get_handlers_for_event(self, event_type: str) -> List[Handler]:
        return list(self.handlers.get(event_type, []))

    def clear_handlers(self) -> None:
        self.handlers.clear()
