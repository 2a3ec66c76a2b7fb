"""
Redis read-through cache for service pricing and the admin dashboard stats

Values are stored as JSON. Redis being down or erroring is treated as a miss, so
callers always fall back to the database.
"""
import json
import logging
from functools import wraps
from typing import Any, Callable, Optional

from .redis_client import get_redis_client

logger = logging.getLogger(__name__)

SERVICE_PRICING_PREFIX = "service_pricing"
ANALYTICS_STATS_KEY = "analytics:stats"

# Keys deleted per DEL call when invalidating a namespace
DELETE_BATCH_SIZE = 500


class Cache:
    """JSON cache over a lazily created Redis client"""

    def __init__(self, client_factory: Callable = get_redis_client):
        self.redis_client = None
        self._client_factory = client_factory

    def _get_client(self):
        if self.redis_client is None:
            try:
                self.redis_client = self._client_factory()
            except Exception as e:
                logger.debug(f"⚠️ Redis cache unavailable: {e}")
                return None
        return self.redis_client

    def get(self, key: str) -> Optional[Any]:
        client = self._get_client()
        if not client:
            return None

        try:
            value = client.get(key)
        except Exception as e:
            logger.error(f"❌ Cache get error for {key}: {e}")
            return None
        if not value:
            return None
        return json.loads(value)

    def set(self, key: str, value: Any, ttl: int) -> bool:
        client = self._get_client()
        if not client:
            return False

        try:
            client.setex(key, ttl, json.dumps(value, default=str))
            return True
        except Exception as e:
            logger.error(f"❌ Cache set error for {key}: {e}")
            return False

    def get_or_load(self, key: str, loader: Callable[[], Any], ttl: int) -> Any:
        """Return the cached value for key, or call loader and cache a non-None result"""
        value = self.get(key)
        if value is not None:
            logger.debug(f"✅ Cache HIT: {key}")
            return value

        value = loader()
        if value is not None and self.set(key, value, ttl):
            logger.debug(f"💾 Cached {key} for {ttl}s")
        return value

    def delete_pattern(self, pattern: str) -> int:
        """Delete every key matching a glob pattern, walking the keyspace with SCAN"""
        client = self._get_client()
        if not client:
            return 0

        deleted = 0
        batch = []
        try:
            for key in client.scan_iter(match=pattern, count=DELETE_BATCH_SIZE):
                batch.append(key)
                if len(batch) >= DELETE_BATCH_SIZE:
                    deleted += client.delete(*batch)
                    batch = []
            if batch:
                deleted += client.delete(*batch)
        except Exception as e:
            logger.error(f"❌ Cache invalidation failed for {pattern}: {e}")
            return deleted

        if deleted:
            logger.info(f"🧹 Invalidated {deleted} cached key(s) matching {pattern}")
        return deleted


cache = Cache()


def cached(key_builder: Callable[..., str], ttl: int):
    """
    Cache a method's JSON-serializable result under the key built from its arguments.

    None results are never stored, so a missing row is looked up again next time.
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            key = key_builder(*args, **kwargs)
            return cache.get_or_load(key, lambda: func(*args, **kwargs), ttl)

        return wrapper

    return decorator


def build_pricing_lookup_key(service_type: str, method: Optional[str]) -> str:
    return f"{SERVICE_PRICING_PREFIX}:lookup:{service_type}:{method or 'none'}"


def build_pricing_list_key() -> str:
    return f"{SERVICE_PRICING_PREFIX}:list"


def invalidate_service_pricing_cache() -> int:
    """Drop every cached pricing list and lookup after an admin change"""
    return cache.delete_pattern(f"{SERVICE_PRICING_PREFIX}:*")
