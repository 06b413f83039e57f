"""Event models for localization notifications."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict
from uuid import UUID, uuid4

LOCALE_CHANGED = "locale.changed"
CURRENCY_CHANGED = "currency.changed"
TRANSLATIONS_LOADED = "translations.loaded"


@dataclass(frozen=True)
class Event:
    """Immutable record of something that happened in the runtime.

    Events are delivered to the subscribers of one EventBus instance.
    """

    event_type: str
    """The type of event (e.g., 'locale.changed')."""

    metadata: Dict[str, Any] = field(default_factory=dict)
    """Event payload, e.g. {"locale": Locale("it")}."""

    timestamp: datetime = field(default_factory=datetime.now)
    """When the event occurred."""

    correlation_id: UUID = field(default_factory=uuid4)
    """Unique ID to track the event in logs."""

    def to_dict(self) -> Dict[str, Any]:
        """Serialize event to a log-friendly dictionary.

        Returns:
            Dictionary with ISO timestamp, string correlation id and
            stringified metadata values.
        """
        return {
            "event_type": self.event_type,
            "timestamp": self.timestamp.isoformat(),
            "correlation_id": str(self.correlation_id),
            "metadata": {key: str(value) for key, value in self.metadata.items()},
        }
