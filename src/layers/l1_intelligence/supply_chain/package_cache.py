"""In-memory package info cache with TTL and LRU eviction."""

import time
from collections import OrderedDict
from collections.abc import Callable

from src.core.logger.logger import get_logger
from src.layers.l1_intelligence.supply_chain.models import PackageInfo

logger = get_logger(__name__)


class PackageInfoCache:
    """Bounded cache of deps.dev lookups keyed by ``ecosystem:name@version``.

    Entries expire ``ttl`` seconds after insertion. When full, the least
    recently used entry is evicted. A ttl of 0 disables caching.
    """

    def __init__(
        self,
        ttl: float = 3600,
        max_entries: int = 1024,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            ttl: Entry lifetime in seconds.
            max_entries: Maximum number of entries.
            clock: Monotonic time source.
        """
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, PackageInfo]] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> PackageInfo | None:
        """Get a live entry, refreshing its recency.

        Args:
            key: Cache key.

        Returns:
            Cached package info, or None if absent or expired.
        """
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None

        expires_at, info = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            self.misses += 1
            return None

        self._entries.move_to_end(key)
        self.hits += 1
        return info

    def set(self, key: str, info: PackageInfo) -> None:
        """Store an entry, evicting the least recently used if full."""
        if self.ttl <= 0:
            return

        self._entries[key] = (self._clock() + self.ttl, info)
        self._entries.move_to_end(key)

        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Evicted {evicted} from package cache")

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str) or key not in self._entries:
            return False
        return self._clock() < self._entries[key][0]
