"""Locale resolution and mutation of the active locale.

The resolver decides the locale at startup (stored preference, then host
environment, then configured default), persists it, and is the only code
path that changes the active locale afterwards.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

from localization.errors import InvalidLocaleError
from localization.events import CURRENCY_CHANGED, LOCALE_CHANGED, Event, EventBus
from localization.i18n.models import Locale, LocaleResolutionContext
from localization.i18n.state import ActiveLocale
from localization.logging import get_module_logger
from localization.storage import LocaleStorage, StorageName

logger = get_module_logger()

_CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")

LocaleLike = Union[Locale, str]


@dataclass
class ResolverOptions:
    """Startup options for LocaleResolver.initialize().

    Attributes:
        default_locale: Locale used when storage and environment give nothing.
        supported_locales: Locales the application offers. The default locale
            is always added when missing.
        cookie_expiration_days: Lifetime of the persisted choice when the
            storage is cookie based. None means a session cookie.
        default_currency: ISO 4217 code used when no currency is stored.
    """

    default_locale: Locale
    supported_locales: List[Locale] = field(default_factory=list)
    cookie_expiration_days: Optional[int] = None
    default_currency: Optional[str] = None

    def __post_init__(self):
        self.default_locale = Locale.coerce(self.default_locale)
        supported = [Locale.coerce(locale) for locale in self.supported_locales]
        if self.default_locale not in supported:
            supported.append(self.default_locale)
        self.supported_locales = supported
        if self.default_currency is not None:
            self.default_currency = normalize_currency(self.default_currency)

    @classmethod
    def build(
        cls,
        default_locale: LocaleLike,
        supported_locales: Sequence[LocaleLike],
        cookie_expiration_days: Optional[int] = None,
        default_currency: Optional[str] = None,
    ) -> "ResolverOptions":
        """Build options from plain locale codes."""
        return cls(
            default_locale=Locale.coerce(default_locale),
            supported_locales=[Locale.coerce(locale) for locale in supported_locales],
            cookie_expiration_days=cookie_expiration_days,
            default_currency=default_currency,
        )


def normalize_currency(code: str) -> str:
    """Validate an ISO 4217 currency code.

    Raises:
        InvalidLocaleError: If code is not three letters.
    """
    normalized = code.strip().upper() if isinstance(code, str) else ""
    if not _CURRENCY_PATTERN.match(normalized):
        raise InvalidLocaleError(f"Malformed currency code: {code!r}")
    return normalized


class LocaleResolver:
    """Resolves and owns the active locale.

    Attributes:
        storage: Backend persisting the choice.
        active_locale: Shared ActiveLocale, written only here.
        events: Bus receiving locale.changed / currency.changed.
        environment_language: Raw locale reported by the host (e.g. "it-IT").
    """

    def __init__(
        self,
        storage: LocaleStorage,
        active_locale: ActiveLocale,
        events: EventBus,
        environment_language: Optional[str] = None,
    ):
        self.storage = storage
        self.active_locale = active_locale
        self.events = events
        self.environment_language = environment_language
        self.options: Optional[ResolverOptions] = None
        self._currency: Optional[str] = None
        self._locale_changes = 0
        self._currency_changes = 0
        self.log = logger.bind(storage=storage.strategy.value)

    @property
    def supported_locales(self) -> Tuple[Locale, ...]:
        if self.options is None:
            return ()
        return tuple(self.options.supported_locales)

    async def initialize(self, options: ResolverOptions) -> Locale:
        """Resolve the startup locale and persist it.

        Precedence: stored value (if syntactically valid), then the host
        environment language truncated to two characters (if supported),
        then options.default_locale. The result is written back to storage
        so a first-run detection is remembered.

        Args:
            options: Default/supported locales and persistence options.

        Returns:
            The resolved active Locale.
        """
        self.options = options

        context = LocaleResolutionContext(
            default_locale=options.default_locale,
            supported_locales=list(options.supported_locales),
            stored_locale=await self._read_stored_locale(),
            environment_locale=self._environment_locale(),
        )
        resolved = context.resolve()
        self.active_locale._set(resolved)

        await self.storage.write(
            StorageName.DEFAULT_LOCALE,
            str(resolved),
            expiration_days=options.cookie_expiration_days,
        )

        await self._initialize_currency(options)

        self.log.info(
            "resolved_startup_locale",
            locale=str(resolved),
            from_storage=context.stored_locale is not None,
            environment_language=self.environment_language,
            currency=self._currency,
        )
        return resolved

    def get_current_locale(self) -> Locale:
        """Return the active locale."""
        return self.active_locale.get()

    async def set_current_locale(self, locale: LocaleLike) -> bool:
        """Change the active locale.

        No-op when locale equals the active one. Otherwise the active locale
        is updated, written to storage, and locale.changed is emitted with the
        new Locale. If another change lands while the storage write is
        pending, this call's notification is dropped and the active locale
        is written again, even when the later calls switched back to the
        same value.

        Args:
            locale: New locale, as Locale or code string.

        Returns:
            True if the active locale changed, False for a no-op.

        Raises:
            InvalidLocaleError: If locale is malformed or not supported.
        """
        new_locale = self._validate(locale)
        previous = self.active_locale.peek()

        if new_locale == previous:
            self.log.debug("locale_unchanged", locale=str(new_locale))
            return False

        self.active_locale._set(new_locale)
        self._locale_changes += 1
        change = self._locale_changes
        await self.storage.write(
            StorageName.DEFAULT_LOCALE,
            str(new_locale),
            expiration_days=self._expiration_days(),
        )

        # A later call may have switched away and back, so compare changes,
        # not locale values.
        if change != self._locale_changes:
            current = self.active_locale.peek()
            self.log.info(
                "locale_change_superseded",
                locale=str(new_locale),
                active_locale=str(current),
            )
            # Our write may have landed after the newer one.
            await self.storage.write(
                StorageName.DEFAULT_LOCALE,
                str(current),
                expiration_days=self._expiration_days(),
            )
            return True

        self.log.info(
            "locale_changed",
            locale=str(new_locale),
            previous_locale=str(previous) if previous else None,
        )
        self.events.dispatch(
            Event(
                event_type=LOCALE_CHANGED,
                metadata={"locale": new_locale, "previous": previous},
            )
        )
        return True

    def get_currency(self) -> Optional[str]:
        """Return the active ISO 4217 currency, if any."""
        return self._currency

    async def set_currency(self, currency: str) -> bool:
        """Change the active currency.

        Same contract as set_current_locale(): no-op when unchanged,
        otherwise persisted and announced with currency.changed.

        Raises:
            InvalidLocaleError: If currency is not a three-letter code.
        """
        try:
            code = normalize_currency(currency)
        except InvalidLocaleError:
            self.log.warning("invalid_currency_code", currency=currency)
            raise

        if code == self._currency:
            return False

        previous = self._currency
        self._currency = code
        self._currency_changes += 1
        change = self._currency_changes
        await self.storage.write(
            StorageName.CURRENCY, code, expiration_days=self._expiration_days()
        )
        if change != self._currency_changes:
            self.log.info(
                "currency_change_superseded", currency=code, active_currency=self._currency
            )
            await self.storage.write(
                StorageName.CURRENCY,
                self._currency,
                expiration_days=self._expiration_days(),
            )
            return True

        self.log.info("currency_changed", currency=code, previous_currency=previous)
        self.events.dispatch(
            Event(
                event_type=CURRENCY_CHANGED,
                metadata={"currency": code, "previous": previous},
            )
        )
        return True

    def _validate(self, locale: LocaleLike) -> Locale:
        try:
            parsed = Locale.coerce(locale)
        except InvalidLocaleError:
            self.log.warning("invalid_locale_string", locale=str(locale))
            raise

        if parsed not in self.supported_locales:
            self.log.warning(
                "unsupported_locale",
                locale=str(parsed),
                supported=[str(item) for item in self.supported_locales],
            )
            raise InvalidLocaleError(f"Unsupported locale: {parsed}")
        return parsed

    async def _read_stored_locale(self) -> Optional[Locale]:
        stored = await self.storage.read(StorageName.DEFAULT_LOCALE)
        if not stored:
            return None
        try:
            return Locale.from_string(stored)
        except InvalidLocaleError:
            self.log.warning("ignored_invalid_stored_locale", stored=stored)
            return None

    def _environment_locale(self) -> Optional[Locale]:
        # "it-IT", "it_IT.UTF-8" and "it" all reduce to "it"
        if not self.environment_language:
            return None
        code = self.environment_language[:2].lower()
        try:
            return Locale.from_string(code)
        except InvalidLocaleError:
            self.log.debug(
                "ignored_environment_language", language=self.environment_language
            )
            return None

    async def _initialize_currency(self, options: ResolverOptions) -> None:
        stored = await self.storage.read(StorageName.CURRENCY)
        currency = None
        if stored:
            try:
                currency = normalize_currency(stored)
            except InvalidLocaleError:
                self.log.warning("ignored_invalid_stored_currency", stored=stored)
        if currency is None:
            currency = options.default_currency
        if currency is None:
            return

        self._currency = currency
        await self.storage.write(
            StorageName.CURRENCY,
            currency,
            expiration_days=options.cookie_expiration_days,
        )

    def _expiration_days(self) -> Optional[int]:
        return self.options.cookie_expiration_days if self.options else None
