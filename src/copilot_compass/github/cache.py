"""TTL cache for raw Copilot metrics responses.

Entries are keyed by "scope_type:scope_id:from:to" (e.g.
"enterprise:acme:2026-01-01:2026-01-31"); the key format is relied on by
anything reading ``stats()``.

Design decisions:
- one cache per application instance, passed to the client explicitly
- lazy expiry on read plus explicit clear(); no LRU and no size bound,
  the key space (scopes x requested ranges) is small
- no request coalescing: two concurrent misses for the same key both fetch
- plain dict, no lock: only ever touched from the event loop thread
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from ..observability.metrics import record_cache_hit, record_cache_miss

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300

SCOPE_TYPES = ("enterprise", "org")


def make_key(scope_type: str, scope_id: str, date_from: str, date_to: str) -> str:
    """Build the cache key for a metrics request."""
    if scope_type not in SCOPE_TYPES:
        raise ValueError(f"Unknown scope type: {scope_type!r}")
    return f"{scope_type}:{scope_id}:{date_from}:{date_to}"


@dataclass
class CacheEntry:
    """A cached response with its storage and expiry times (clock seconds)."""
    data: Any
    stored_at: float
    expires_at: float


@dataclass(frozen=True)
class CacheStats:
    size: int
    keys: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"size": self.size, "keys": list(self.keys)}


class MetricsCache:
    """In-memory key-value store with time-based expiry.

    ``clock`` returns seconds and defaults to ``time.monotonic``; tests
    inject a fake clock to step over the TTL.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Optional[Callable[[], float]] = None,
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self._clock = clock or time.monotonic
        self._entries: Dict[str, CacheEntry] = {}

        # Metrics counters
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Optional[Any]:
        """Return cached data, or None on a miss.

        An expired entry counts as a miss and is removed.
        """
        entry = self._entries.get(key)
        if entry is not None:
            if self._clock() < entry.expires_at:
                self.hits += 1
                record_cache_hit()
                logger.debug("Cache hit for %s", key)
                return entry.data
            del self._entries[key]
            logger.debug("Cache entry expired for %s", key)

        self.misses += 1
        record_cache_miss()
        return None

    def put(self, key: str, data: Any) -> None:
        """Store data for the TTL, replacing any previous entry."""
        now = self._clock()
        self._entries[key] = CacheEntry(
            data=data,
            stored_at=now,
            expires_at=now + self.ttl_seconds,
        )
        logger.debug("Cached %s (size: %d)", key, len(self._entries))

    def clear(self) -> None:
        """Remove every entry."""
        self._entries.clear()
        logger.debug("Cache cleared")

    def stats(self) -> CacheStats:
        """Current entry count and keys, expired-but-unread entries included."""
        return CacheStats(size=len(self._entries), keys=list(self._entries))

    @property
    def size(self) -> int:
        return len(self._entries)
