"""Read-through cache keyed by query tuples.

Keys are tuples such as ``("countries",)`` or ``("countryDetail", country_id)``.
Invalidation works on prefixes: invalidating ``("countryDetail",)`` drops
every country detail entry.
"""

from typing import Any, Awaitable, Callable, Dict, Hashable, Optional, Tuple, TypeVar, Union

from loguru import logger

from permitsy.constants import CacheKeys

T = TypeVar("T")

CacheKey = Tuple[Hashable, ...]
KeyLike = Union[str, CacheKey]

# Country scoped views refreshed after any country edit
COUNTRY_LIST_KEYS = (
    CacheKeys.ADMIN_COUNTRIES,
    CacheKeys.COUNTRY_DETAIL,
    CacheKeys.COUNTRIES,
    CacheKeys.COUNTRY_VISA_PACKAGE,
    CacheKeys.DOCUMENTS,
    CacheKeys.POPULAR_DESTINATIONS,
)
COUNTRY_ITEM_KEYS = (
    CacheKeys.COUNTRY,
    CacheKeys.COUNTRY_DETAIL,
    CacheKeys.DOCUMENTS,
    CacheKeys.COUNTRY_VISA_PACKAGE,
)


def as_key(key: KeyLike) -> CacheKey:
    """Normalise a string or tuple into a cache key tuple."""
    if isinstance(key, tuple):
        return key
    return (key,)


class QueryCache:
    """In-process cache shared by views and mutations."""

    def __init__(self) -> None:
        self._entries: Dict[CacheKey, Any] = {}

    def __contains__(self, key: KeyLike) -> bool:
        return as_key(key) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: KeyLike, default: Optional[Any] = None) -> Any:
        return self._entries.get(as_key(key), default)

    def set(self, key: KeyLike, value: Any) -> None:
        self._entries[as_key(key)] = value

    async def fetch(self, key: KeyLike, loader: Callable[[], Awaitable[T]]) -> T:
        """
        Return the cached value or load and store it.

        Args:
            key: Cache key
            loader: Coroutine function producing the value

        Returns:
            Cached or freshly loaded value
        """
        normalized = as_key(key)
        if normalized in self._entries:
            return self._entries[normalized]
        value = await loader()
        self._entries[normalized] = value
        return value

    def invalidate(self, key: KeyLike) -> int:
        """
        Drop every entry whose key starts with ``key``.

        Args:
            key: Key prefix

        Returns:
            Number of dropped entries
        """
        prefix = as_key(key)
        stale = [k for k in self._entries if k[: len(prefix)] == prefix]
        for k in stale:
            del self._entries[k]
        if stale:
            logger.debug(f"Invalidated {len(stale)} cache entries for {prefix}")
        return len(stale)

    def invalidate_country(self, country_id: Optional[str] = None) -> None:
        """
        Drop the country views, plus the entries of one country when given.

        Args:
            country_id: Country whose item entries are dropped as well
        """
        for name in COUNTRY_LIST_KEYS:
            self.invalidate(name)
        if country_id:
            for name in COUNTRY_ITEM_KEYS:
                self.invalidate((name, country_id))

    def clear(self) -> None:
        self._entries.clear()
