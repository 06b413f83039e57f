"""Storage backend factory."""

from typing import Optional, Union

from localization.errors import StorageUnavailableError
from localization.logging import get_module_logger
from localization.storage.backends import (
    CookieStorage,
    DisabledStorage,
    LocalStorage,
    LocaleStorage,
    SessionStorage,
)
from localization.storage.host import HostEnvironment
from localization.storage.models import StorageStrategy

logger = get_module_logger()


def create_storage(
    strategy: Union[StorageStrategy, str],
    host: HostEnvironment,
    cookie_expiration_days: Optional[int] = None,
) -> LocaleStorage:
    """Create the storage backend for a strategy.

    When the medium of the strategy is missing from the host, the backend
    degrades to DisabledStorage and the condition is only logged.

    Args:
        strategy: Storage strategy (enum member or its value).
        host: Host environment providing the media.
        cookie_expiration_days: Default cookie lifetime, None for session cookies.

    Returns:
        LocaleStorage bound to exactly one medium.
    """
    strategy = StorageStrategy(strategy)

    try:
        if strategy == StorageStrategy.COOKIE:
            storage: LocaleStorage = CookieStorage(
                host.cookies, expiration_days=cookie_expiration_days
            )
        elif strategy == StorageStrategy.SESSION:
            storage = SessionStorage(host.session_storage)
        elif strategy == StorageStrategy.LOCAL:
            storage = LocalStorage(host.local_storage)
        else:
            storage = DisabledStorage()
    except StorageUnavailableError as e:
        logger.warning(
            "storage_unavailable",
            strategy=strategy.value,
            error=str(e),
            fallback=StorageStrategy.DISABLED.value,
        )
        return DisabledStorage()

    logger.info("initialized_locale_storage", strategy=strategy.value)
    return storage
