"""Persistent key-value store - low-level Redis primitives."""

import asyncio
import json
from typing import Any

from upstash_redis.asyncio import Redis

from statsgames.core.config import get_settings
from statsgames.core.exceptions import CacheError
from statsgames.core.logging import get_logger

logger = get_logger(__name__)


class KeyValueStore:
    """String key-value store backed by Upstash Redis.

    When Redis is not configured the store is unavailable: reads miss,
    writes report ``False`` and nothing raises. When it is configured,
    client failures surface as ``CacheError`` so callers decide how to
    degrade.
    """

    def __init__(self, client: Redis | None = None) -> None:
        """Initialize the store from settings unless a client is injected."""
        self._client: Redis | None = client
        if client is not None:
            return

        settings = get_settings()
        if settings.redis_available:
            try:
                self._client = Redis(
                    url=settings.upstash_redis_rest_url,
                    token=settings.upstash_redis_rest_token,
                )
                logger.info("Redis key-value store initialized")
            except Exception as e:
                logger.warning("Failed to initialize Redis key-value store", error=str(e))
                self._client = None
        else:
            logger.info("Redis not configured, persistent cache disabled")

    @property
    def is_available(self) -> bool:
        """Check if the store is backed by a client."""
        return self._client is not None

    @staticmethod
    def make_key(prefix: str, *parts: str | int) -> str:
        """Create a key from prefix and parts."""
        return f"{prefix}:{':'.join(str(p) for p in parts)}"

    # ========== String operations ==========

    async def get(self, key: str) -> str | None:
        """Get a value, ``None`` when absent."""
        if not self.is_available:
            return None

        try:
            result = await self._client.get(key)  # type: ignore[union-attr]
        except Exception as e:
            logger.debug("Store get failed", key=key, error=str(e))
            raise CacheError(f"get failed for {key}: {e}") from e
        return result if isinstance(result, str) else None

    async def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        """Set a value with an optional expiry in seconds."""
        if not self.is_available:
            return False

        try:
            if ttl:
                await self._client.set(key, value, ex=ttl)  # type: ignore[union-attr]
            else:
                await self._client.set(key, value)  # type: ignore[union-attr]
        except Exception as e:
            logger.debug("Store set failed", key=key, error=str(e))
            raise CacheError(f"set failed for {key}: {e}") from e
        return True

    async def delete(self, key: str) -> bool:
        """Delete a single key."""
        if not self.is_available:
            return False

        try:
            await self._client.delete(key)  # type: ignore[union-attr]
        except Exception as e:
            logger.debug("Store delete failed", key=key, error=str(e))
            raise CacheError(f"delete failed for {key}: {e}") from e
        return True

    # ========== Enumeration and bulk delete ==========

    async def list_keys(self, pattern: str = "*") -> list[str]:
        """List keys matching a glob pattern.

        Note: Upstash REST API doesn't support SCAN, so this uses KEYS.
        Keep patterns narrow.
        """
        if not self.is_available:
            return []

        try:
            keys = await self._client.keys(pattern)  # type: ignore[union-attr]
        except Exception as e:
            logger.debug("Store list_keys failed", pattern=pattern, error=str(e))
            raise CacheError(f"list_keys failed for {pattern}: {e}") from e
        return list(keys or [])

    async def delete_many(self, keys: list[str]) -> int:
        """Delete several keys in one round trip."""
        if not self.is_available or not keys:
            return 0

        try:
            await self._client.delete(*keys)  # type: ignore[union-attr]
        except Exception as e:
            logger.debug("Store delete_many failed", count=len(keys), error=str(e))
            raise CacheError(f"delete_many failed: {e}") from e
        return len(keys)

    # ========== JSON operations ==========

    async def get_json(self, key: str) -> Any:
        """Get and deserialize JSON, ``None`` when absent or corrupt."""
        data = await self.get(key)
        if data is None:
            return None
        try:
            return json.loads(data)
        except json.JSONDecodeError:
            logger.debug("Store JSON decode failed", key=key)
            return None

    async def set_json(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """Serialize and store JSON."""
        return await self.set(key, json.dumps(value), ttl)

    # ========== Health check ==========

    async def check_health(self, timeout: float = 5.0) -> bool:
        """Check Redis connectivity with timeout."""
        if not self.is_available:
            return False

        try:
            result = await asyncio.wait_for(
                self._client.ping(),  # type: ignore[union-attr]
                timeout=timeout,
            )
            return bool(result)
        except asyncio.TimeoutError:
            logger.error("Redis health check timed out", timeout=timeout)
            return False
        except Exception as e:
            logger.error("Redis health check failed", error=str(e))
            return False
