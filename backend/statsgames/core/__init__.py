"""Core module exports."""

from statsgames.core.config import Settings, get_settings
from statsgames.core.exceptions import (
    AppError,
    CacheError,
    ConflictError,
    DatabaseError,
    NetworkError,
    NotFoundError,
    TokenExpiredError,
    TokenNotFoundError,
    UpstreamHTTPError,
    ValidationError,
)
from statsgames.core.logging import get_logger, setup_logging
from statsgames.core.tasks import create_background_task

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Logging
    "get_logger",
    "setup_logging",
    # Tasks
    "create_background_task",
    # Errors
    "AppError",
    "CacheError",
    "ConflictError",
    "DatabaseError",
    "NetworkError",
    "NotFoundError",
    "TokenExpiredError",
    "TokenNotFoundError",
    "UpstreamHTTPError",
    "ValidationError",
]
