"""Pydantic schemas for API requests and responses."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from statsgames.services.results import PublicProfile


# ============================================================
# Game Schemas
# ============================================================

class GameResponse(BaseModel):
    """Catalog game."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    slug: str
    icon_url: str | None = None


class GameCatalogEntry(GameResponse):
    """Catalog game with the hints needed to collect its player tag."""

    requires_tag: bool = False
    tag_label: str
    tag_placeholder: str
    tag_description: str


class LinkCreate(BaseModel):
    """Schema for linking a game."""

    game_id: str = Field(..., min_length=1)
    game_tag: str | None = Field(default=None, max_length=255)


class TagUpdate(BaseModel):
    """Schema for changing a linked game's tag. Empty string is allowed."""

    game_tag: str = Field(..., max_length=255)


class UserGameResponse(BaseModel):
    """A user's linked game."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    game_id: str
    game_tag: str | None = None
    installed_at: datetime
    game: GameResponse | None = None


class LinkStatusResponse(BaseModel):
    is_linked: bool


# ============================================================
# Stats Schemas
# ============================================================

class GameStatsResponse(BaseModel):
    """Stats snapshot for one game."""

    model_config = ConfigDict(from_attributes=True)

    game_id: str
    stats: dict[str, Any]
    updated_at: datetime
    game: GameResponse | None = None


class PlayerDataResponse(BaseModel):
    """Upstream player data, possibly served from cache."""

    data: Any
    cached: bool


# ============================================================
# Share Token Schemas
# ============================================================

class ShareTokenCreate(BaseModel):
    """Schema for minting a share token."""

    ttl_minutes: int | None = Field(default=None, ge=1, le=1440)


class ShareTokenResponse(BaseModel):
    """Freshly minted share token."""

    token: str
    url: str
    expires_at: datetime


class SharedProfileResponse(BaseModel):
    """What a share link resolves to."""

    user: PublicProfile
    stats: list[GameStatsResponse]


# ============================================================
# Generic Schemas
# ============================================================

class SuccessResponse(BaseModel):
    """Generic success response."""

    success: bool = True
    message: str | None = None


class ErrorResponse(BaseModel):
    """Schema for error responses."""

    error: dict[str, Any]


# ============================================================
# Health Check Schemas
# ============================================================

class ServiceHealth(BaseModel):
    """Health of a single dependency."""

    status: str = Field(..., pattern=r"^(healthy|degraded|unhealthy)$")
    latency_ms: float | None = None
    details: dict[str, Any] | None = None


class HealthResponse(BaseModel):
    """Aggregate health of the application."""

    status: str = Field(..., pattern=r"^(healthy|degraded|unhealthy)$")
    timestamp: datetime
    version: str
    services: dict[str, ServiceHealth]
