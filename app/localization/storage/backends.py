"""Locale storage contract and strategies.

Each strategy binds to exactly one medium, checked for availability when
the backend is constructed. Backends never try a second medium.
"""

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from typing import Callable, MutableMapping, Optional, Union

from localization.errors import StorageUnavailableError
from localization.logging import get_module_logger
from localization.storage.host import CookieJar
from localization.storage.models import StorageName, StorageStrategy, slot_name

logger = get_module_logger()

Name = Union[StorageName, str]


class LocaleStorage(ABC):
    """Abstract base for locale storage backends.

    Implementations persist a small set of named string values
    (StorageName.DEFAULT_LOCALE, StorageName.CURRENCY).
    """

    strategy: StorageStrategy

    @abstractmethod
    async def read(self, name: Name) -> Optional[str]:
        """Read a stored value.

        Args:
            name: Slot name (e.g. "defaultLocale").

        Returns:
            The stored value, or None when absent.
        """
        pass

    @abstractmethod
    async def write(
        self,
        name: Name,
        value: str,
        *,
        expiration_days: Optional[int] = None,
    ) -> None:
        """Write a value.

        Args:
            name: Slot name.
            value: Value to store.
            expiration_days: Lifetime hint, only meaningful for cookies.
        """
        pass


class DisabledStorage(LocaleStorage):
    """Storage that remembers nothing."""

    strategy = StorageStrategy.DISABLED

    async def read(self, name: Name) -> Optional[str]:
        return None

    async def write(
        self,
        name: Name,
        value: str,
        *,
        expiration_days: Optional[int] = None,
    ) -> None:
        return None


class CookieStorage(LocaleStorage):
    """Cookie-backed storage.

    Cookies are written as "name=value; expires=<RFC 1123 date>; path=/".
    Without expiration days the expires attribute is omitted and the cookie
    lives for the session.

    Attributes:
        jar: Cookie medium.
        expiration_days: Default lifetime when write() is given none.
    """

    strategy = StorageStrategy.COOKIE

    def __init__(
        self,
        jar: Optional[CookieJar],
        expiration_days: Optional[int] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if jar is None or not jar.enabled:
            raise StorageUnavailableError("Cookie medium is not available")
        self.jar = jar
        self.expiration_days = expiration_days
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def read(self, name: Name) -> Optional[str]:
        prefix = f"{slot_name(name)}="
        for chunk in self.jar.cookie.split(";"):
            chunk = chunk.lstrip(" ")
            if chunk.startswith(prefix):
                return chunk[len(prefix) :]
        return None

    async def write(
        self,
        name: Name,
        value: str,
        *,
        expiration_days: Optional[int] = None,
    ) -> None:
        self.jar.set_cookie(self.serialize(name, value, expiration_days))

    def serialize(
        self,
        name: Name,
        value: str,
        expiration_days: Optional[int] = None,
    ) -> str:
        """Build the cookie string for a value.

        Args:
            name: Slot name.
            value: Value to store.
            expiration_days: Lifetime in days, falls back to the backend default.

        Returns:
            Cookie string ready for the jar.
        """
        days = expiration_days if expiration_days is not None else self.expiration_days
        expires = ""
        if days is not None:
            expiration_date = self._clock() + timedelta(days=days)
            expires = "; expires=" + format_datetime(expiration_date, usegmt=True)
        return f"{slot_name(name)}={value}{expires}; path=/"


class SessionStorage(LocaleStorage):
    """Storage in the host's session mapping."""

    strategy = StorageStrategy.SESSION

    def __init__(self, mapping: Optional[MutableMapping[str, str]]):
        if mapping is None:
            raise StorageUnavailableError("Session storage is not available")
        self.mapping = mapping

    async def read(self, name: Name) -> Optional[str]:
        return self.mapping.get(slot_name(name))

    async def write(
        self,
        name: Name,
        value: str,
        *,
        expiration_days: Optional[int] = None,
    ) -> None:
        self.mapping[slot_name(name)] = value


class LocalStorage(LocaleStorage):
    """Storage in the host's persistent mapping.

    The mapping may write through to disk, so access runs in a worker thread.
    Writes are serialised: at most one worker touches the medium at a time.
    """

    strategy = StorageStrategy.LOCAL

    def __init__(self, mapping: Optional[MutableMapping[str, str]]):
        if mapping is None:
            raise StorageUnavailableError("Local storage is not available")
        self.mapping = mapping
        self._write_lock = asyncio.Lock()

    async def read(self, name: Name) -> Optional[str]:
        return await asyncio.to_thread(self.mapping.get, slot_name(name))

    async def write(
        self,
        name: Name,
        value: str,
        *,
        expiration_days: Optional[int] = None,
    ) -> None:
        async with self._write_lock:
            await asyncio.to_thread(self.mapping.__setitem__, slot_name(name), value)
