"""Azure Data Cache Module - Scoped TTL caching for Azure CLI results.

Philosophy:
- One TTLCache per logical scope, all sharing one TTL and one clock
- Process-lifetime, in-memory only
- Single-threaded asyncio use: no locks

Public API (the "studs"):
    AzureDataCache: Scoped cache owned by a session
    CacheScope: Logical scopes (subscription info, cost data, directory lists...)
    cost_cache_key: Cache key for a cost date range

Scopes:
- SUBSCRIPTION_INFO / BILLING_CURRENCY: single value under the default key
- COST_DATA: one entry per "<start>_<end>" date range
- APP_REGISTRATIONS / USERS / GROUPS / ROLE_ASSIGNMENTS: one list each
"""

import logging
import time
from collections.abc import Callable
from enum import StrEnum
from typing import Any

from nimure.cache.ttl_cache import DEFAULT_TTL_SECONDS, TTLCache

logger = logging.getLogger(__name__)

DEFAULT_KEY = "default"


class CacheScope(StrEnum):
    """Logical cache namespaces."""

    SUBSCRIPTION_INFO = "subscription_info"
    BILLING_CURRENCY = "billing_currency"
    COST_DATA = "cost_data"
    APP_REGISTRATIONS = "app_registrations"
    USERS = "users"
    GROUPS = "groups"
    ROLE_ASSIGNMENTS = "role_assignments"


def cost_cache_key(start_date: str, end_date: str) -> str:
    """Create cache key for a cost date range.

    Example:
        >>> cost_cache_key("2024-01-01", "2024-01-31")
        '2024-01-01_2024-01-31'
    """
    return f"{start_date}_{end_date}"


class AzureDataCache:
    """Scoped TTL cache for subscription, currency, cost and directory data.

    Example:
        >>> cache = AzureDataCache(ttl_seconds=300)
        >>> cache.set(CacheScope.USERS, users)
        >>> cache.get(CacheScope.USERS) is users
        True
        >>> cache.clear()
        >>> cache.get(CacheScope.USERS) is None
        True
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        auto_cleanup: bool = True,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize scoped cache.

        Args:
            ttl_seconds: Time-to-live shared by every scope
            auto_cleanup: Sweep expired cost entries on each cost request
            clock: Returns the current time in epoch seconds
        """
        self.ttl_seconds = ttl_seconds
        self.auto_cleanup = auto_cleanup
        self._scopes: dict[CacheScope, TTLCache[Any]] = {
            scope: TTLCache(ttl_seconds=ttl_seconds, clock=clock) for scope in CacheScope
        }

    def scope(self, scope: CacheScope) -> TTLCache[Any]:
        """Return the underlying TTLCache for a scope."""
        return self._scopes[scope]

    def get(self, scope: CacheScope, key: str = DEFAULT_KEY) -> Any | None:
        """Return a valid cached value or None."""
        value = self._scopes[scope].get(key)
        if value is not None:
            logger.debug(f"Cache hit: {scope}/{key}")
        return value

    def set(self, scope: CacheScope, value: Any, key: str = DEFAULT_KEY) -> None:
        """Store a value in a scope."""
        self._scopes[scope].set(key, value)

    def clear(self, scope: CacheScope | None = None) -> None:
        """Clear one scope, or every scope when scope is None.

        The next read of any cleared key is a hard miss.
        """
        if scope is not None:
            self._scopes[scope].clear()
            return

        for cache in self._scopes.values():
            cache.clear()
        logger.info("Azure data cache cleared")

    def cleanup_cost_data(self) -> int:
        """Remove expired cost entries when auto cleanup is enabled.

        Returns:
            Number of entries removed
        """
        if not self.auto_cleanup:
            return 0
        return self._scopes[CacheScope.COST_DATA].cleanup_expired()


__all__ = ["DEFAULT_KEY", "AzureDataCache", "CacheScope", "cost_cache_key"]
