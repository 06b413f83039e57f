"""Persistence media exposed by the host environment.

A HostEnvironment bundles the three media a storage strategy can bind to
plus the language the environment reports. Any medium may be None, meaning
it is not available on this host.
"""

import contextlib
import json
import os
import tempfile
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from pathlib import Path
from typing import Callable, Dict, Iterator, Mapping, MutableMapping, Optional, Tuple

from localization.logging import get_module_logger

logger = get_module_logger()

LANGUAGE_VARIABLES = ("LC_ALL", "LC_MESSAGES", "LANG")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CookieJar:
    """Cookie medium with document.cookie semantics.

    Writes take a full cookie string ("name=value; expires=...; path=/");
    reads return every live cookie joined as "a=1; b=2".

    Attributes:
        enabled: False when the host has cookies disabled.
    """

    def __init__(
        self,
        enabled: bool = True,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.enabled = enabled
        self._clock = clock
        self._cookies: Dict[str, Tuple[str, Optional[datetime]]] = {}

    @property
    def cookie(self) -> str:
        """All live cookies as a single "name=value; ..." string."""
        self._purge_expired()
        return "; ".join(f"{name}={value}" for name, (value, _) in self._cookies.items())

    def set_cookie(self, cookie_string: str) -> None:
        """Store one cookie from its serialized form.

        A cookie whose expiration is already past is removed.
        """
        segments = cookie_string.split(";")
        name, _, value = segments[0].strip().partition("=")
        if not name:
            return

        expires: Optional[datetime] = None
        for segment in segments[1:]:
            attribute, _, attribute_value = segment.strip().partition("=")
            if attribute.lower() == "expires":
                expires = parsedate_to_datetime(attribute_value)

        if expires is not None and expires <= self._clock():
            self._cookies.pop(name, None)
            return
        self._cookies[name] = (value, expires)

    def expiration_of(self, name: str) -> Optional[datetime]:
        """Expiration of a cookie, None for session cookies or unknown names."""
        entry = self._cookies.get(name)
        return entry[1] if entry else None

    def _purge_expired(self) -> None:
        now = self._clock()
        expired = [
            name
            for name, (_, expires) in self._cookies.items()
            if expires is not None and expires <= now
        ]
        for name in expired:
            del self._cookies[name]


class JsonFileStorage(MutableMapping[str, str]):
    """String mapping persisted to a JSON file, written through on change.

    Backs the "local" strategy: values survive process restarts. Each change
    rewrites a temporary file next to the target and renames it into place,
    so readers never observe a partially written document.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()
        if self.path.exists():
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    data = json.load(f)
            except (OSError, ValueError) as e:
                logger.warning(
                    "local_storage_unreadable", path=str(self.path), error=str(e)
                )
                data = {}
            if isinstance(data, dict):
                self._data = {str(k): str(v) for k, v in data.items()}

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __setitem__(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value
            self._flush()

    def __delitem__(self, key: str) -> None:
        with self._lock:
            del self._data[key]
            self._flush()

    def __iter__(self) -> Iterator[str]:
        return iter(dict(self._data))

    def __len__(self) -> int:
        return len(self._data)

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except Exception:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise


@dataclass
class HostEnvironment:
    """Media and language reported by the host.

    Attributes:
        language: Raw environment locale (e.g. "it_IT.UTF-8", "en-US").
        cookies: Cookie medium, None when absent.
        session_storage: Mapping living for the session, None when absent.
        local_storage: Persistent mapping, None when absent.
    """

    language: Optional[str] = None
    cookies: Optional[CookieJar] = field(default_factory=CookieJar)
    session_storage: Optional[MutableMapping[str, str]] = field(default_factory=dict)
    local_storage: Optional[MutableMapping[str, str]] = None

    @classmethod
    def from_process(
        cls,
        local_storage_path: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "HostEnvironment":
        """Build the host environment of the current process.

        The language comes from LC_ALL, LC_MESSAGES or LANG (first one set,
        ignoring the "C" and "POSIX" locales). The local medium exists only
        when a file path is configured.

        Args:
            local_storage_path: JSON file backing local storage.
            environ: Environment mapping (default: os.environ).

        Returns:
            HostEnvironment for this process.
        """
        environ = os.environ if environ is None else environ

        language = None
        for variable in LANGUAGE_VARIABLES:
            value = environ.get(variable)
            if value and value not in ("C", "POSIX"):
                language = value
                break

        local_storage = (
            JsonFileStorage(Path(local_storage_path)) if local_storage_path else None
        )
        return cls(language=language, local_storage=local_storage)
