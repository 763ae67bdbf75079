# Idemark v1.0.0 - Platform Config Cache
"""
Process-lifetime cache for discovered platform backend configs.

Entries never expire on a timer; they are dropped only when a query made
with them fails. Concurrent imports may race to fill or drop an entry,
which costs at most a redundant discovery, so no locking is done.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from idemark_backend.core.logging import get_logger
from idemark_backend.models import PlatformConfig

logger = get_logger(__name__)


class PlatformConfigCache:
    """
    In-memory store of PlatformConfig keyed by platform base URL.

    Example:
        cache = PlatformConfigCache()
        config = cache.get(base_url)
        if config is None:
            config = await discover()
            cache.set(base_url, config)
    """

    def __init__(self) -> None:
        self._data: Dict[str, PlatformConfig] = {}
        self._hits = 0
        self._misses = 0
        self._stores = 0
        self._invalidations = 0

    @staticmethod
    def _key(base_url: str) -> str:
        return base_url.strip().lower().rstrip("/")

    def get(self, base_url: str) -> Optional[PlatformConfig]:
        config = self._data.get(self._key(base_url))
        if config is None:
            self._misses += 1
        else:
            self._hits += 1
        return config

    def set(self, base_url: str, config: PlatformConfig) -> None:
        self._data[self._key(base_url)] = config
        self._stores += 1
        logger.info(f"Platform config cached for {base_url}: {config.api_base_url}")

    def invalidate(self, base_url: str) -> None:
        """Drop the entry for ``base_url``; a missing entry is not an error."""
        if self._data.pop(self._key(base_url), None) is not None:
            self._invalidations += 1
            logger.info(f"Platform config invalidated for {base_url}")

    def clear(self) -> int:
        count = len(self._data)
        self._data.clear()
        return count

    def stats(self) -> Dict[str, Any]:
        return {
            "entries": len(self._data),
            "hits": self._hits,
            "misses": self._misses,
            "discoveries": self._stores,
            "invalidations": self._invalidations,
        }
