"""Read-through caching for the upstream player stats API.

- ``KeyValueStore``: persistent string store on Upstash Redis, disabled
  gracefully when Redis is not configured
- ``PlayerStatsCache``: TTL cache keyed by normalized player tag, wrapping
  the upstream HTTP API and returning result objects instead of raising
"""

from statsgames.services.cache.base import KeyValueStore
from statsgames.services.cache.constants import CACHE_PREFIX, KEY_PREFIX_PLAYER, TTL_PLAYER_DATA
from statsgames.services.cache.player import CacheEntry, PlayerStatsCache, normalize_player_tag
from statsgames.services.cache.service import get_key_value_store, get_player_stats_cache

__all__ = [
    # Constants
    "CACHE_PREFIX",
    "KEY_PREFIX_PLAYER",
    "TTL_PLAYER_DATA",
    # Store
    "KeyValueStore",
    "get_key_value_store",
    # Player cache
    "CacheEntry",
    "PlayerStatsCache",
    "get_player_stats_cache",
    "normalize_player_tag",
]
