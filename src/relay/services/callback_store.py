"""In-memory store of callback registrations keyed by provider order code.

Entries expire a fixed time after registration and the store is bounded: when
full, the least recently used entry is evicted. Nothing survives a restart.
"""

from collections import OrderedDict
from collections.abc import Callable
from datetime import datetime, timedelta

from relay.models.callback import CallbackRegistration
from relay.services.token_cache import utc_now
from relay.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TTL_SECONDS = 86400
DEFAULT_MAX_ENTRIES = 10000


def normalize_order_code(order_code: int | str) -> str:
    """Canonical key for an order code (numeric codes are stringified)."""
    return str(order_code).strip()


class CallbackStore:
    """Order code -> CallbackRegistration map with TTL and LRU bounds."""

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize an empty store.

        Args:
            ttl_seconds: Lifetime of a registration after it is (re-)registered
            max_entries: Capacity before least recently used entries are evicted
            clock: Source of the current UTC time (injectable for tests)
        """
        if ttl_seconds <= 0 or max_entries <= 0:
            raise ValueError("ttl_seconds and max_entries must be positive")
        self._ttl = timedelta(seconds=ttl_seconds)
        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, tuple[CallbackRegistration, datetime]] = OrderedDict()

    def register(self, order_code: int | str, registration: CallbackRegistration) -> None:
        """Store a registration, replacing any existing one for the order (last write wins)."""
        key = normalize_order_code(order_code)
        self._entries.pop(key, None)
        self._entries[key] = (registration, self._clock() + self._ttl)

        # Expired entries go before any live one is evicted
        if len(self._entries) > self._max_entries:
            self.purge_expired()
        while len(self._entries) > self._max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.warning("Callback store full, evicted registration for order %s", evicted)

        logger.info("Registered callback for order %s", key)

    def get(self, order_code: int | str) -> CallbackRegistration | None:
        """Get the live registration for an order, or None if absent or expired."""
        key = normalize_order_code(order_code)
        entry = self._entries.get(key)
        if entry is None:
            return None

        registration, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            logger.info("Callback registration for order %s expired", key)
            return None

        self._entries.move_to_end(key)
        return registration

    def remove(self, order_code: int | str) -> bool:
        """Delete the registration for an order.

        Returns:
            True if a registration was removed.
        """
        return self._entries.pop(normalize_order_code(order_code), None) is not None

    def purge_expired(self) -> int:
        """Drop every expired registration.

        Returns:
            Number of registrations removed.
        """
        now = self._clock()
        expired = [key for key, (_, expires_at) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.info("Purged %d expired callback registrations", len(expired))
        return len(expired)

    def __contains__(self, order_code: object) -> bool:
        if not isinstance(order_code, (int, str)):
            return False
        return self.get(order_code) is not None

    def __len__(self) -> int:
        return len(self._entries)
