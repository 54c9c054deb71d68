"""
Per-tenant read cache for list queries.

Mutations never patch cached lists, they drop them, so the next read is a full
re-fetch from Supabase.
"""
import time
from typing import Dict, Any, Optional, Callable, Tuple


class Cache:
    """Simple in-memory cache with expiration."""

    def __init__(self, default_ttl: int = 30):
        self._cache: Dict[str, Tuple[Any, float]] = {}
        self._default_ttl = default_ttl

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache if it exists and is not expired."""
        entry = self._cache.get(key)
        if entry is None:
            return None

        value, expiry = entry
        if expiry < time.time():
            self._cache.pop(key, None)
            return None

        return value

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        ttl = ttl if ttl is not None else self._default_ttl
        if ttl <= 0:
            return
        self._cache[key] = (value, time.time() + ttl)

    def delete(self, key: str) -> None:
        self._cache.pop(key, None)

    def invalidate(self, *keys: str) -> None:
        """Drop the given keys, used after every mutation."""
        for key in keys:
            self.delete(key)

    def clear(self) -> None:
        self._cache.clear()

    def get_or_set(self, key: str, getter: Callable[[], Any], ttl: Optional[int] = None) -> Any:
        """Get value from cache or set it if not exists."""
        value = self.get(key)
        if value is None:
            value = getter()
            self.set(key, value, ttl)
        return value


def tenant_key(kind: str, restaurant_id: str) -> str:
    return f"{kind}:{restaurant_id}"


cache = Cache()
