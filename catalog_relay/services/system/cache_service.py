"""In-memory TTL cache handed to services explicitly (no module level instance)."""
from __future__ import annotations

import threading
import time
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

from catalog_relay.services.system.logger_service import get_logger

logger = get_logger(__name__)


class TTLCache:
    """key -> (value, expires_at). Expired entries are dropped when read."""

    def __init__(self, ttl_seconds: float = 300, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[Hashable, Tuple[Any, float]] = {}
        self._stats: Dict[str, int] = {
            "hits": 0,
            "misses": 0,
            "writes": 0,
            "expired": 0,
        }

    def is_enabled(self) -> bool:
        return self.ttl_seconds > 0

    def get(self, key: Hashable) -> Optional[Any]:
        with self._lock:
            item = self._entries.get(key)
            if item is None:
                self._stats["misses"] += 1
                return None
            value, expires_at = item
            if self._clock() >= expires_at:
                del self._entries[key]
                self._stats["expired"] += 1
                self._stats["misses"] += 1
                return None
            self._stats["hits"] += 1
            return value

    def set(self, key: Hashable, value: Any, ttl_seconds: Optional[float] = None) -> bool:
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        if ttl <= 0:
            return False
        with self._lock:
            self._entries[key] = (value, self._clock() + ttl)
            self._stats["writes"] += 1
        logger.debug("Cache entry stored", extra={"key": str(key), "ttl_seconds": ttl})
        return True

    def delete(self, key: Hashable) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> int:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        return count

    def __len__(self) -> int:
        return len(self._entries)

    def get_stats(self) -> Dict[str, int]:
        return dict(self._stats)
