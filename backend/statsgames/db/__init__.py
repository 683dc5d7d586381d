"""Database module exports."""

from statsgames.db.models import (
    Base,
    Game,
    GameStats,
    Profile,
    ShareToken,
    UserGame,
    ensure_utc,
    utc_now,
)
from statsgames.db.session import (
    check_db_health,
    close_db,
    get_engine,
    get_session_factory,
    init_db,
    make_session_factory,
    session_scope,
)
from statsgames.db.store import RecordStore, is_unique_violation

__all__ = [
    # Models
    "Base",
    "Profile",
    "Game",
    "UserGame",
    "GameStats",
    "ShareToken",
    "ensure_utc",
    "utc_now",
    # Session management
    "check_db_health",
    "close_db",
    "get_engine",
    "get_session_factory",
    "init_db",
    "make_session_factory",
    "session_scope",
    # Store
    "RecordStore",
    "is_unique_violation",
]
