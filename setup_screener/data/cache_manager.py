"""
Cache manager for storing and retrieving market data.

Implements file-based caching with TTL (time-to-live) support so repeated
screens of the same universe do not refetch history from the data source.
"""
import hashlib
import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DIR = Path.home() / ".cache" / "setup_screener"


@dataclass
class CacheEntry:
    """Single cache entry with data and metadata."""
    data: Any
    timestamp: str  # ISO format datetime
    ttl_hours: float
    key: str

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check if this cache entry has expired."""
        cached_time = datetime.fromisoformat(self.timestamp)
        return (now or datetime.now()) >= cached_time + timedelta(hours=self.ttl_hours)

    def age_hours(self, now: Optional[datetime] = None) -> float:
        """Get the age of this cache entry in hours."""
        age = (now or datetime.now()) - datetime.fromisoformat(self.timestamp)
        return age.total_seconds() / 3600


class CacheManager:
    """
    File-based JSON cache with automatic expiration handling.

    Unreadable or expired entries count as misses and are removed.

    Usage:
        cache = CacheManager()
        cache.set('ohlcv:AAPL:1d:2y:2024-06-28', candles, ttl=4)
        candles = cache.get('ohlcv:AAPL:1d:2y:2024-06-28')
    """

    def __init__(
        self,
        cache_dir: Optional[Path] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        """
        Args:
            cache_dir: Directory for cache files (defaults to ~/.cache/setup_screener)
            clock: Source of the current time
        """
        self.cache_dir = Path(cache_dir) if cache_dir is not None else DEFAULT_CACHE_DIR
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.clock = clock

        self.hits = 0
        self.misses = 0
        self.sets = 0

        self.clear_expired()

    def _get_cache_file(self, key: str) -> Path:
        # Hash the key to create a safe filename
        key_hash = hashlib.md5(key.encode()).hexdigest()
        return self.cache_dir / f"{key_hash}.json"

    def _read_entry(self, cache_file: Path) -> CacheEntry:
        with open(cache_file, 'r') as f:
            return CacheEntry(**json.load(f))

    def get(self, key: str) -> Optional[Any]:
        """
        Retrieve data from cache.

        Args:
            key: Cache key (e.g., 'ohlcv:AAPL:1d:2y:2024-06-28')

        Returns:
            Cached data if found and not expired, None otherwise
        """
        cache_file = self._get_cache_file(key)

        if not cache_file.exists():
            self.misses += 1
            return None

        try:
            entry = self._read_entry(cache_file)
        except (OSError, ValueError, TypeError) as e:
            logger.debug("Discarding unreadable cache entry %s: %s", key, e)
            cache_file.unlink(missing_ok=True)
            self.misses += 1
            return None

        if entry.is_expired(self.clock()):
            cache_file.unlink(missing_ok=True)
            self.misses += 1
            return None

        self.hits += 1
        return entry.data

    def set(self, key: str, data: Any, ttl: float = 24) -> bool:
        """
        Store data in cache.

        Args:
            key: Cache key
            data: Data to cache (must be JSON-serializable)
            ttl: Time-to-live in hours (default 24)

        Returns:
            True if successful, False otherwise
        """
        entry = CacheEntry(
            data=data,
            timestamp=self.clock().isoformat(),
            ttl_hours=ttl,
            key=key
        )
        try:
            payload = json.dumps(asdict(entry))
            with open(self._get_cache_file(key), 'w') as f:
                f.write(payload)
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Cache write error for key '%s': %s", key, e)
            return False

        self.sets += 1
        return True

    def invalidate(self, key: str) -> bool:
        """Remove a specific cache entry; False if it was not cached."""
        cache_file = self._get_cache_file(key)
        if cache_file.exists():
            cache_file.unlink()
            return True
        return False

    def clear_expired(self) -> int:
        """
        Remove all expired (or unreadable) cache entries.

        Returns:
            Number of entries removed
        """
        removed = 0
        now = self.clock()

        for cache_file in self.cache_dir.glob('*.json'):
            try:
                expired = self._read_entry(cache_file).is_expired(now)
            except (OSError, ValueError, TypeError):
                expired = True
            if expired:
                cache_file.unlink(missing_ok=True)
                removed += 1

        if removed:
            logger.debug("Removed %d expired cache entries from %s", removed, self.cache_dir)
        return removed

    def clear_all(self) -> int:
        """Remove all cache entries and return how many there were."""
        removed = 0
        for cache_file in self.cache_dir.glob('*.json'):
            cache_file.unlink()
            removed += 1
        return removed

    def get_stats(self) -> Dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dict with hits, misses, hit rate, and total entries
        """
        total_entries = len(list(self.cache_dir.glob('*.json')))
        total_requests = self.hits + self.misses
        hit_rate = (self.hits / total_requests * 100) if total_requests > 0 else 0.0

        return {
            "hits": self.hits,
            "misses": self.misses,
            "sets": self.sets,
            "hit_rate": hit_rate,
            "total_entries": total_entries,
            "cache_dir": str(self.cache_dir)
        }


# Global cache instance
_global_cache = None


def get_cache() -> CacheManager:
    """Get the global cache instance."""
    global _global_cache
    if _global_cache is None:
        _global_cache = CacheManager()
    return _global_cache
