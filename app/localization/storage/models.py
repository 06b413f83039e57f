"""Storage strategy and slot names."""

from enum import Enum
from typing import Union


class StorageStrategy(str, Enum):
    """Persistence medium used for the locale and currency choice."""

    DISABLED = "disabled"
    COOKIE = "cookie"
    SESSION = "session"
    LOCAL = "local"


class StorageName(str, Enum):
    """Names of the values kept in storage."""

    DEFAULT_LOCALE = "defaultLocale"
    CURRENCY = "currency"


def slot_name(name: Union[StorageName, str]) -> str:
    """Return the raw slot name for an enum member or plain string."""
    return name.value if isinstance(name, StorageName) else name
