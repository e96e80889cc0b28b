"""
Simple in-memory TTL cache.

Owned by the persistence layer (see ``InventoryRepository``); the calculation
services never read from or write to it.
"""
from datetime import datetime, timedelta
from typing import Any, Optional
import logging

logger = logging.getLogger(__name__)


class TTLCache:
    """In-memory cache with TTL support, size limit and prefix invalidation."""

    MAX_ENTRIES = 10000  # Prevent unbounded memory growth

    def __init__(self, default_ttl_seconds: int = 300, max_entries: Optional[int] = None):
        self.default_ttl_seconds = default_ttl_seconds
        self.max_entries = max_entries or self.MAX_ENTRIES
        self._cache: dict = {}
        self._expiry: dict = {}
        self._hits = 0
        self._misses = 0

    def _evict_expired(self):
        """Remove expired entries to reclaim memory."""
        now = datetime.now()
        expired = [k for k, exp in self._expiry.items() if exp <= now]
        for k in expired:
            self._cache.pop(k, None)
            self._expiry.pop(k, None)

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache if not expired."""
        if key in self._cache:
            if datetime.now() < self._expiry.get(key, datetime.min):
                self._hits += 1
                return self._cache[key]
            # Expired
            del self._cache[key]
            del self._expiry[key]
        self._misses += 1
        return None

    def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None):
        """Set value in cache with TTL."""
        if ttl_seconds is None:
            ttl_seconds = self.default_ttl_seconds
        # Evict expired entries if approaching limit
        if len(self._cache) >= self.max_entries:
            self._evict_expired()
        # If still at limit after eviction, remove oldest entries
        if len(self._cache) >= self.max_entries:
            oldest_keys = sorted(self._expiry, key=self._expiry.get)[: max(1, self.max_entries // 100)]
            for k in oldest_keys:
                self._cache.pop(k, None)
                self._expiry.pop(k, None)
        self._cache[key] = value
        self._expiry[key] = datetime.now() + timedelta(seconds=ttl_seconds)

    def delete(self, key: str):
        """Delete key from cache."""
        self._cache.pop(key, None)
        self._expiry.pop(key, None)

    def invalidate(self, prefix: str = "") -> int:
        """Drop every key starting with ``prefix``; returns how many were dropped."""
        keys_to_delete = [k for k in self._cache.keys() if k.startswith(prefix)]
        for key in keys_to_delete:
            self.delete(key)
        if keys_to_delete:
            logger.debug(f"Invalidated {len(keys_to_delete)} cache keys with prefix '{prefix}'")
        return len(keys_to_delete)

    def clear(self):
        """Clear entire cache."""
        self._cache.clear()
        self._expiry.clear()

    def stats(self) -> dict:
        """Get cache statistics."""
        now = datetime.now()
        valid = sum(1 for exp in self._expiry.values() if exp > now)
        return {
            "total_keys": len(self._cache),
            "valid_keys": valid,
            "expired_keys": len(self._cache) - valid,
            "hits": self._hits,
            "misses": self._misses,
        }
