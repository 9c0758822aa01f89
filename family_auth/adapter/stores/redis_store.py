import json
import logging
from typing import Any, Dict, Optional

import redis.asyncio as redis

from family_auth.app.services.key_value_store import IKeyValueStore

logger = logging.getLogger(__name__)


class RedisKeyValueStore(IKeyValueStore):
    """
    Redis-backed key/value store for multi-instance deployments.

    Values are stored as JSON strings under a namespace prefix. Unlike the
    in-memory store, ttl_ms is honoured with PX so abandoned entries expire
    on their own.
    """

    def __init__(self, redis_url: str, namespace: str = "family-auth", client=None):
        self._redis_url = redis_url
        self._namespace = namespace
        self._redis = client

    def _get_redis(self):
        if self._redis is None:
            self._redis = redis.from_url(
                self._redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._redis

    def _key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        raw = await self._get_redis().get(self._key(key))
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning(f"Discarding unreadable store entry: {self._key(key)}")
            return None

    async def set(
        self, key: str, value: Dict[str, Any], ttl_ms: Optional[int] = None
    ) -> None:
        payload = json.dumps(value, separators=(",", ":"))
        if ttl_ms is not None and ttl_ms > 0:
            await self._get_redis().set(self._key(key), payload, px=ttl_ms)
        else:
            await self._get_redis().set(self._key(key), payload)

    async def delete(self, key: str) -> None:
        await self._get_redis().delete(self._key(key))

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
