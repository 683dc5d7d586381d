"""Read-through cache in front of the rate-limited player stats API."""

import json
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx

from statsgames.core.config import get_settings
from statsgames.core.exceptions import NetworkError, UpstreamHTTPError, ValidationError
from statsgames.core.logging import get_logger
from statsgames.services.cache.base import KeyValueStore
from statsgames.services.cache.constants import CACHE_PREFIX, KEY_PREFIX_PLAYER, TTL_PLAYER_DATA
from statsgames.services.results import FetchResult, UpstreamHealth

logger = get_logger(__name__)


def normalize_player_tag(player_tag: str) -> str:
    """Canonical form of a player tag: ``#`` + upper-case body, no whitespace.

    ``" #abc 123"``, ``"ABC123"`` and ``"#ABC123"`` all normalize to ``"#ABC123"``.
    """
    body = "".join(player_tag.split()).lstrip("#").upper()
    return f"#{body}"


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class CacheEntry:
    """Cached upstream response with its write time in epoch milliseconds."""

    payload: Any
    stored_at: int

    def is_fresh(self, now_ms: int, ttl_ms: int) -> bool:
        return now_ms - self.stored_at < ttl_ms

    def dumps(self) -> str:
        return json.dumps({"data": self.payload, "stored_at": self.stored_at})

    @classmethod
    def loads(cls, raw: str) -> "CacheEntry | None":
        try:
            item = json.loads(raw)
            return cls(payload=item["data"], stored_at=int(item["stored_at"]))
        except (ValueError, TypeError, KeyError):
            return None


class PlayerStatsCache:
    """Fetch player stats through a TTL cache keyed by normalized player tag.

    Every public method returns a result object; nothing raises. Concurrent
    misses for the same tag are not coalesced: each goes upstream and the
    last write wins.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        base_url: str | None = None,
        ttl_seconds: int | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        settings = get_settings()
        self._store = store
        self._base_url = (base_url or settings.stats_api_base_url).rstrip("/")
        self._ttl_seconds = ttl_seconds or settings.player_cache_ttl_seconds or TTL_PLAYER_DATA
        self._timeout = timeout or settings.stats_api_timeout
        self._client = client
        self._clock = clock

    @property
    def ttl_ms(self) -> int:
        return self._ttl_seconds * 1000

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the persistent upstream HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout, connect=min(self._timeout, 5.0)),
                limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
                headers={"Accept": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @staticmethod
    def cache_key(player_tag: str) -> str:
        """Key for a tag; equivalent spellings of a tag share one key."""
        normalized = normalize_player_tag(player_tag)
        return KeyValueStore.make_key(CACHE_PREFIX, KEY_PREFIX_PLAYER, quote(normalized, safe=""))

    # ========== Cache entries ==========

    async def _read_fresh(self, key: str) -> CacheEntry | None:
        """Return the entry if it is still within TTL; evict it otherwise."""
        try:
            raw = await self._store.get(key)
        except Exception as e:
            logger.warning("Error reading from cache", key=key, error=str(e))
            return None

        if raw is None:
            return None

        entry = CacheEntry.loads(raw)
        if entry is not None and entry.is_fresh(self._clock(), self.ttl_ms):
            return entry

        try:
            await self._store.delete(key)
        except Exception as e:
            logger.warning("Error evicting stale cache entry", key=key, error=str(e))
        return None

    async def _write(self, key: str, payload: Any) -> None:
        entry = CacheEntry(payload=payload, stored_at=self._clock())
        try:
            # Redis expiry only reclaims storage; freshness is decided by stored_at
            await self._store.set(key, entry.dumps(), ttl=self._ttl_seconds)
        except Exception as e:
            logger.warning("Error writing to cache", key=key, error=str(e))

    # ========== Public operations ==========

    async def fetch(self, player_tag: str, force_refresh: bool = False) -> FetchResult:
        """Fetch player data, serving a fresh cache entry when there is one.

        Args:
            player_tag: The player tag (e.g. ``#ABC123XYZ``)
            force_refresh: Skip the cache lookup; the result still refreshes the cache

        Returns:
            FetchResult with ``cached=True`` only when served from cache
        """
        if not player_tag or not player_tag.strip().lstrip("#").strip():
            return FetchResult(error=ValidationError("Player tag is required"))

        tag = normalize_player_tag(player_tag)
        key = self.cache_key(tag)

        if not force_refresh:
            entry = await self._read_fresh(key)
            if entry is not None:
                return FetchResult(data=entry.payload, cached=True)

        try:
            client = await self._get_client()
            response = await client.get(f"{self._base_url}/player", params={"tag": tag})
        except httpx.HTTPError as e:
            logger.error("Error fetching player data", player_tag=tag, error=str(e))
            return FetchResult(error=NetworkError(str(e) or "Network error"))

        if not response.is_success:
            body = _json_or_empty(response)
            message = body.get("error") or f"HTTP error {response.status_code}"
            logger.warning(
                "Upstream rejected player request",
                player_tag=tag,
                status_code=response.status_code,
                message=message,
            )
            return FetchResult(
                error=UpstreamHTTPError(response.status_code, message, body.get("details"))
            )

        try:
            data = response.json()
        except ValueError:
            logger.error("Upstream returned invalid JSON", player_tag=tag)
            return FetchResult(
                error=UpstreamHTTPError(response.status_code, "Invalid JSON in upstream response")
            )

        await self._write(key, data)
        return FetchResult(data=data, cached=False)

    async def clear(self) -> None:
        """Delete every player entry. Best effort: failures are only logged."""
        try:
            keys = await self._store.list_keys(f"{CACHE_PREFIX}:*")
            if keys:
                await self._store.delete_many(keys)
            logger.info("Player cache cleared", count=len(keys))
        except Exception as e:
            logger.error("Error clearing cache", error=str(e))

    async def check_upstream_health(self) -> UpstreamHealth:
        """Ping the upstream root endpoint; any 2xx means available."""
        try:
            client = await self._get_client()
            response = await client.get(f"{self._base_url}/")
        except httpx.HTTPError as e:
            logger.error("Error checking API health", error=str(e))
            return UpstreamHealth(
                available=False,
                error=NetworkError(str(e) or "Cannot reach backend API"),
            )

        return UpstreamHealth(available=response.is_success)


def _json_or_empty(response: httpx.Response) -> dict[str, Any]:
    """Best-effort parse of an error body."""
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}
