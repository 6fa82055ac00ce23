"""
Response cache backed by Redis.

Only internal-only responses are cached; anything that includes external
boards is always recomputed. The cache is strictly best effort: when Redis is
not configured or not reachable every call behaves like a miss.
"""

import json
import logging
from typing import Any, Optional

import redis

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300


class ResponseCache:
    """
    JSON response cache with a fixed TTL.

    Args:
        redis_url: Redis connection URL; None disables the cache
        ttl_seconds: Expiry applied on every write
        client: Pre-built client (tests)
    """

    def __init__(
        self,
        redis_url: Optional[str] = None,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        client: Optional[redis.Redis] = None,
    ):
        self.ttl_seconds = ttl_seconds
        self._redis = client
        if self._redis is None and redis_url:
            self._redis = redis.Redis.from_url(
                redis_url,
                decode_responses=True,
                socket_timeout=1.0,
                socket_connect_timeout=1.0,
            )

    @property
    def enabled(self) -> bool:
        return self._redis is not None

    def get(self, key: str) -> Optional[dict[str, Any]]:
        if self._redis is None:
            return None
        try:
            cached = self._redis.get(key)
        except redis.RedisError as e:
            logger.warning("Cache get failed", extra={"key": key, "error": str(e)})
            return None

        if cached is None:
            return None
        try:
            return json.loads(cached)
        except ValueError:
            logger.warning("Discarding unreadable cache entry", extra={"key": key})
            return None

    def set(self, key: str, value: dict[str, Any]) -> None:
        if self._redis is None:
            return
        try:
            self._redis.setex(key, self.ttl_seconds, json.dumps(value))
        except redis.RedisError as e:
            logger.warning("Cache set failed", extra={"key": key, "error": str(e)})

    def invalidate(self, pattern: str = "jobs:*") -> int:
        """Delete every key matching ``pattern``; returns the number deleted."""
        if self._redis is None:
            return 0
        deleted = 0
        try:
            batch = []
            for key in self._redis.scan_iter(match=pattern, count=500):
                batch.append(key)
                if len(batch) >= 500:
                    deleted += self._redis.delete(*batch)
                    batch = []
            if batch:
                deleted += self._redis.delete(*batch)
        except redis.RedisError as e:
            logger.warning("Cache invalidation failed", extra={"pattern": pattern, "error": str(e)})
        return deleted
