"""Health check and monitoring endpoints."""

import asyncio
import time
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from statsgames.api.deps import KeyValueStoreDep, PlayerCacheDep
from statsgames.api.schemas import HealthResponse, ServiceHealth
from statsgames.core.config import get_settings
from statsgames.db.session import check_db_health

router = APIRouter(tags=["Health"])


@router.get(
    "/",
    summary="Root endpoint",
    response_description="API information and basic health status",
)
async def root() -> dict[str, Any]:
    """Basic API metadata: name, version, environment and server time."""
    settings = get_settings()

    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "healthy",
        "environment": settings.environment,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "documentation": "/docs",
    }


async def _timed_health_check(
    name: str,
    check_fn: Any,
    timeout: float = 5.0
) -> tuple[str, bool, float, str | None]:
    """Execute a health check and measure its latency with timeout.

    Returns:
        Tuple of (name, healthy, latency_ms, error_message)
    """
    start = time.perf_counter()
    try:
        result = await asyncio.wait_for(check_fn(), timeout=timeout)
        latency = (time.perf_counter() - start) * 1000
        return (name, bool(result), latency, None)
    except asyncio.TimeoutError:
        latency = (time.perf_counter() - start) * 1000
        return (name, False, latency, f"Health check timed out after {timeout}s")
    except Exception as e:
        latency = (time.perf_counter() - start) * 1000
        return (name, False, latency, str(e))


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Comprehensive health check",
    response_description="Detailed health status of all services",
)
async def health_check(
    store: KeyValueStoreDep,
    player_cache: PlayerCacheDep,
) -> HealthResponse:
    """
    Health of every dependency, checked in parallel.

    - **Database**: a failure makes the service unhealthy
    - **Cache**: optional, a failure only degrades
    - **Upstream**: the player stats API, a failure only degrades
    """
    settings = get_settings()
    services: dict[str, ServiceHealth] = {}
    overall_status = "healthy"

    async def _upstream() -> bool:
        health = await player_cache.check_upstream_health()
        if health.error is not None:
            raise health.error
        return health.available

    tasks = [
        _timed_health_check("database", check_db_health),
        _timed_health_check("upstream", _upstream),
    ]
    if store.is_available:
        tasks.append(_timed_health_check("cache", store.check_health))

    results = await asyncio.gather(*tasks)

    for name, healthy, latency, error in results:
        details: dict[str, Any]
        if name == "database":
            details = {"type": "postgresql"}
            service_status = "healthy" if healthy else "unhealthy"
            if not healthy:
                overall_status = "unhealthy"
        else:
            details = (
                {"type": "redis", "provider": "upstash"}
                if name == "cache"
                else {"url": settings.stats_api_base_url}
            )
            service_status = "healthy" if healthy else "degraded"
            if not healthy and overall_status == "healthy":
                overall_status = "degraded"

        if error:
            details["error"] = error
        services[name] = ServiceHealth(
            status=service_status,
            latency_ms=round(latency, 2),
            details=details,
        )

    if "cache" not in services:
        services["cache"] = ServiceHealth(
            status="degraded",
            details={"type": "redis", "provider": "not configured"},
        )
        if overall_status == "healthy":
            overall_status = "degraded"

    return HealthResponse(
        status=overall_status,
        timestamp=datetime.now(timezone.utc),
        version=settings.app_version,
        services=services,
    )


@router.get(
    "/health/live",
    summary="Liveness probe",
    response_description="Simple liveness check for orchestrators",
)
async def liveness() -> dict[str, str]:
    """Returns 200 while the process is running. Checks no dependencies."""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get(
    "/health/ready",
    summary="Readiness probe",
    response_description="Readiness check for load balancers",
)
async def readiness() -> JSONResponse:
    """
    Returns 200 when the database answers, 503 otherwise.

    The cache and the upstream API are optional for serving traffic.
    """
    try:
        db_healthy = await asyncio.wait_for(check_db_health(), timeout=5.0)
    except asyncio.TimeoutError:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "database_timeout",
                "message": "Database health check timed out after 5s",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )

    if not db_healthy:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "database_unavailable",
                "message": "Database connection failed",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "status": "ready",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


@router.get(
    "/health/upstream",
    summary="Upstream API health check",
    response_description="Reachability of the player stats API",
)
async def upstream_health(player_cache: PlayerCacheDep) -> JSONResponse:
    """Probe the player stats API root. Never served from cache."""
    health = await player_cache.check_upstream_health()

    response_data: dict[str, Any] = {
        "service": "upstream",
        "available": health.available,
        "status": "healthy" if health.available else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if health.error is not None:
        response_data["error"] = health.error.to_dict()

    status_code = (
        status.HTTP_200_OK if health.available else status.HTTP_503_SERVICE_UNAVAILABLE
    )
    return JSONResponse(status_code=status_code, content=response_data)
