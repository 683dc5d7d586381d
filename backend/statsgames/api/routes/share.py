"""Profile sharing over NFC tags and deep links.

``router`` carries the versioned API (minting, resolving a scanned link);
``nfc_router`` serves the short ``/nfc/{token}`` path that share URLs and
NFC tags point at.
"""

from fastapi import APIRouter, Query, status

from statsgames.api.deps import ShareTokensDep, raise_for_error
from statsgames.api.schemas import (
    GameStatsResponse,
    ShareTokenCreate,
    ShareTokenResponse,
    SharedProfileResponse,
)
from statsgames.core.exceptions import ValidationError
from statsgames.core.logging import get_logger
from statsgames.core.tasks import create_background_task
from statsgames.services.results import ResolvedProfile
from statsgames.services.share import extract_share_token

logger = get_logger(__name__)

router = APIRouter(tags=["Share"])
nfc_router = APIRouter(tags=["Share"])


def _shared_profile(result: ResolvedProfile) -> SharedProfileResponse:
    raise_for_error(result)
    return SharedProfileResponse(
        user=result.user,
        stats=[GameStatsResponse.model_validate(row) for row in result.stats or []],
    )


@router.post(
    "/users/{user_id}/share-tokens",
    response_model=ShareTokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Mint a share token",
)
async def create_share_token(
    user_id: str,
    tokens: ShareTokensDep,
    request: ShareTokenCreate | None = None,
) -> ShareTokenResponse:
    """
    Mint a time-boxed token for the user's profile.

    The user's expired tokens are swept in the background; the sweep never
    delays or fails the mint.
    """
    create_background_task(
        tokens.sweep_expired_for_owner(user_id),
        name=f"sweep-share-tokens:{user_id}",
    )

    ttl_minutes = request.ttl_minutes if request else None
    result = await tokens.create_token(user_id, ttl_minutes=ttl_minutes)
    raise_for_error(result)

    return ShareTokenResponse(
        token=result.token,
        url=result.url,
        expires_at=result.expires_at,
    )


@router.get(
    "/share/resolve",
    response_model=SharedProfileResponse,
    summary="Resolve a scanned share link",
    responses={
        404: {"description": "Unknown token, or its profile is gone"},
        410: {"description": "Token expired"},
        422: {"description": "Not a share link"},
    },
)
async def resolve_share_link(
    tokens: ShareTokensDep,
    link: str = Query(description="Share URL or deep link read from an NFC tag"),
) -> SharedProfileResponse:
    token = extract_share_token(link)
    if token is None:
        raise ValidationError("Not a share link", {"link": link})
    return _shared_profile(await tokens.resolve_token(token))


@nfc_router.get(
    "/nfc/{token}",
    response_model=SharedProfileResponse,
    summary="Resolve a share token",
    responses={
        404: {"description": "Unknown token, or its profile is gone"},
        410: {"description": "Token expired"},
    },
)
async def resolve_share_token(token: str, tokens: ShareTokensDep) -> SharedProfileResponse:
    """Public profile and stats of whoever minted the token."""
    return _shared_profile(await tokens.resolve_token(token))
