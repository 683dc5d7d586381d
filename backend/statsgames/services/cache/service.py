"""Process-wide cache service instances."""

from functools import lru_cache

from statsgames.services.cache.base import KeyValueStore
from statsgames.services.cache.player import PlayerStatsCache


@lru_cache
def get_key_value_store() -> KeyValueStore:
    """Get or create the shared key-value store (cached)."""
    return KeyValueStore()


@lru_cache
def get_player_stats_cache() -> PlayerStatsCache:
    """Get or create the shared player stats cache (cached)."""
    return PlayerStatsCache(get_key_value_store())
