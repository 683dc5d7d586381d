"""Cache TTL and key namespace constants."""

# Cache TTL constants (in seconds)
TTL_PLAYER_DATA = 300  # 5 minutes - upstream API is rate limited

# Cache key namespace: {CACHE_PREFIX}:{KEY_PREFIX_PLAYER}:{normalized tag}
CACHE_PREFIX = "statsgames:cache"
KEY_PREFIX_PLAYER = "player"
