"""Pluggable persistence of the user's locale and currency choice.

Main components:
- models: StorageStrategy, StorageName
- host: HostEnvironment and the media it exposes (CookieJar, JsonFileStorage)
- backends: LocaleStorage contract and its four strategies
- factory: create_storage() with degradation to DisabledStorage
"""

from localization.storage.backends import (
    CookieStorage,
    DisabledStorage,
    LocalStorage,
    LocaleStorage,
    SessionStorage,
)
from localization.storage.factory import create_storage
from localization.storage.host import CookieJar, HostEnvironment, JsonFileStorage
from localization.storage.models import StorageName, StorageStrategy

__all__ = [
    "StorageStrategy",
    "StorageName",
    "HostEnvironment",
    "CookieJar",
    "JsonFileStorage",
    "LocaleStorage",
    "DisabledStorage",
    "CookieStorage",
    "SessionStorage",
    "LocalStorage",
    "create_storage",
]
