"""Time-boxed profile share tokens carried by NFC tags and deep links.

A token moves one way: issued -> resolvable (while now < expires_at) ->
expired. Resolution does not consume it; any holder can resolve it until
it expires. Expired rows are removed lazily by ``sweep_expired_for_owner``.
"""

import re
import secrets
import string
from collections.abc import Callable
from datetime import datetime, timedelta
from functools import lru_cache

from statsgames.core.config import get_settings
from statsgames.core.exceptions import (
    NotFoundError,
    TokenExpiredError,
    TokenNotFoundError,
    ValidationError,
)
from statsgames.core.logging import get_logger
from statsgames.db.models import Profile, ShareToken, ensure_utc, utc_now
from statsgames.db.session import get_session_factory
from statsgames.db.store import RecordStore
from statsgames.services.results import (
    PublicProfile,
    ResolvedProfile,
    ShareTokenResult,
    backend_error,
)
from statsgames.services.stats import StatsRepository, get_stats_repository

logger = get_logger(__name__)

TOKEN_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits
TOKEN_LENGTH = 32
SHARE_PATH = "nfc"

# Matches https://statsgames.app/nfc/{token} and statsgames://nfc/{token}
_SHARE_TOKEN_RE = re.compile(rf"/{SHARE_PATH}/([a-zA-Z0-9]+)")


def generate_token(length: int = TOKEN_LENGTH) -> str:
    """Random alphanumeric token from a cryptographically secure source."""
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


def build_share_url(base_url: str, token: str) -> str:
    return f"{base_url.rstrip('/')}/{SHARE_PATH}/{token}"


def extract_share_token(url: str | None) -> str | None:
    """Pull the token out of a share link, or ``None`` if it is not one."""
    if not url:
        return None
    match = _SHARE_TOKEN_RE.search(url)
    return match.group(1) if match else None


class ShareTokenService:
    """Mint, resolve and sweep share tokens."""

    def __init__(
        self,
        tokens: RecordStore[ShareToken],
        profiles: RecordStore[Profile],
        stats: StatsRepository,
        *,
        app_url: str | None = None,
        default_ttl_minutes: int | None = None,
        clock: Callable[[], datetime] = utc_now,
        token_factory: Callable[[], str] = generate_token,
    ) -> None:
        settings = get_settings()
        self._tokens = tokens
        self._profiles = profiles
        self._stats = stats
        self._app_url = app_url or settings.app_url
        self._default_ttl_minutes = default_ttl_minutes or settings.share_token_ttl_minutes
        self._clock = clock
        self._token_factory = token_factory

    async def create_token(
        self, owner_id: str, ttl_minutes: int | None = None
    ) -> ShareTokenResult:
        """Mint a new token for ``owner_id``.

        Live tokens the owner already holds are left alone; several may be
        valid at once.

        Args:
            owner_id: The user being shared
            ttl_minutes: Token lifetime, defaults to the configured 15 minutes

        Returns:
            ShareTokenResult with token, share URL and expiry
        """
        ttl = self._default_ttl_minutes if ttl_minutes is None else ttl_minutes
        if not owner_id:
            return ShareTokenResult(error=ValidationError("userId is required"))
        if ttl <= 0:
            return ShareTokenResult(error=ValidationError("ttlMinutes must be positive"))

        expires_at = self._clock() + timedelta(minutes=ttl)
        try:
            row = await self._tokens.insert({
                "user_id": owner_id,
                "token": self._token_factory(),
                "expires_at": expires_at,
            })
        except Exception as e:
            return ShareTokenResult(
                error=backend_error("Error creating share token", e, owner_id=owner_id)
            )

        logger.info("Share token created", owner_id=owner_id, ttl_minutes=ttl)
        return ShareTokenResult(
            token=row.token,
            url=build_share_url(self._app_url, row.token),
            expires_at=ensure_utc(row.expires_at),
        )

    async def resolve_token(self, token: str) -> ResolvedProfile:
        """Resolve a token to its owner's public profile and stats.

        Expiry is checked at read time; an expired row is not deleted here.
        A stats failure degrades to an empty list, a profile failure is fatal.
        """
        if not token or not token.strip():
            return ResolvedProfile(error=ValidationError("Token is required"))

        try:
            share = await self._tokens.select_one(ShareToken.token == token)
        except Exception as e:
            return ResolvedProfile(error=backend_error("Error fetching share token", e))

        if share is None:
            return ResolvedProfile(error=TokenNotFoundError())

        if self._clock() >= ensure_utc(share.expires_at):
            return ResolvedProfile(error=TokenExpiredError())

        try:
            profile = await self._profiles.select_one(Profile.id == share.user_id)
        except Exception as e:
            return ResolvedProfile(
                error=backend_error("Error fetching profile", e, owner_id=share.user_id)
            )

        if profile is None:
            return ResolvedProfile(error=NotFoundError("Profile"))

        stats = await self._stats.fetch_all_for_user(share.user_id)
        if stats.error is not None:
            # The profile is still worth showing without stats
            logger.warning(
                "Resolving share token without stats",
                owner_id=share.user_id,
                error=stats.error.message,
            )

        return ResolvedProfile(
            user=PublicProfile.model_validate(profile),
            stats=stats.data or [],
        )

    async def sweep_expired_for_owner(self, owner_id: str) -> int:
        """Delete the owner's expired tokens. Best effort: never raises."""
        try:
            removed = await self._tokens.delete(
                ShareToken.user_id == owner_id,
                ShareToken.expires_at < self._clock(),
            )
        except Exception as e:
            logger.error("Error cleaning up expired tokens", owner_id=owner_id, error=str(e))
            return 0

        if removed:
            logger.info("Expired share tokens removed", owner_id=owner_id, count=removed)
        return removed


@lru_cache
def get_share_token_service() -> ShareTokenService:
    """Get or create the share token service bound to the app database."""
    session_factory = get_session_factory()
    return ShareTokenService(
        tokens=RecordStore(ShareToken, session_factory),
        profiles=RecordStore(Profile, session_factory),
        stats=get_stats_repository(),
    )
