"""Result shapes returned by every public service operation.

Callers branch on ``error`` (or ``ok``) instead of catching exceptions.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict

from statsgames.core.exceptions import AppError, DatabaseError
from statsgames.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class Result(Generic[T]):
    """Data or an error, never both."""

    data: T | None = None
    error: AppError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class FetchResult:
    """Outcome of a read-through cache fetch."""

    data: Any = None
    error: AppError | None = None
    cached: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class UpstreamHealth:
    available: bool
    error: AppError | None = None


@dataclass
class ShareTokenResult:
    """A freshly minted share token, or the reason it could not be minted."""

    token: str | None = None
    url: str | None = None
    expires_at: datetime | None = None
    error: AppError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class PublicProfile(BaseModel):
    """Projection of a profile that is safe to show to whoever holds a token."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str | None = None
    avatar_url: str | None = None


@dataclass
class ResolvedProfile:
    """What a share token resolves to."""

    user: PublicProfile | None = None
    stats: list[Any] | None = None
    error: AppError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class LinkStatus:
    is_linked: bool = False
    error: AppError | None = None


def backend_error(event: str, exc: Exception, **context: Any) -> AppError:
    """Log a store failure and convert it to the error carried in results.

    Errors the store already classified (e.g. ``ConflictError``) pass
    through unchanged; anything else becomes a ``DatabaseError``.
    """
    if isinstance(exc, AppError):
        logger.warning(event, code=exc.code, error=exc.message, **context)
        return exc
    logger.error(event, error=str(exc), **context)
    return DatabaseError(str(exc) or "Database operation failed")
