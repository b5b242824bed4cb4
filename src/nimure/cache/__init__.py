"""Cache Module - Caching infrastructure for nimure.

Philosophy:
- In-memory, process-lifetime caching
- TTL-based expiration with lazy invalidation
- Optional sweeping of expired cost entries

Public API (the "studs"):
    From ttl_cache:
        TTLCache: Keyed store with time-to-live
        CacheEntry: Cached value and timestamp

    From azure_data_cache:
        AzureDataCache: Scoped cache for Azure CLI results
        CacheScope: Logical cache scopes
        cost_cache_key: Cache key for a cost date range
"""

from nimure.cache.azure_data_cache import AzureDataCache, CacheScope, cost_cache_key
from nimure.cache.ttl_cache import CacheEntry, TTLCache

__all__ = [
    "AzureDataCache",
    "CacheEntry",
    "CacheScope",
    "TTLCache",
    "cost_cache_key",
]
