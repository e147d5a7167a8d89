"""Health check endpoints for monitoring and deployment verification."""

import time

from fastapi import APIRouter, Response, status

from src.api.deps import CurrentUser
from src.core.config import get_settings
from src.core.supabase import check_database_connection
from src.schemas.auth import AuthenticatedResponse
from src.schemas.common import CheckResult, HealthResponse, HealthStatus, ReadinessResponse

router = APIRouter(tags=["health"])


async def _check_table(name: str, table: str) -> CheckResult:
    start_time = time.perf_counter()
    result = await check_database_connection(table)
    latency_ms = (time.perf_counter() - start_time) * 1000

    return CheckResult(
        name=name,
        healthy=result["healthy"],
        latency_ms=round(latency_ms, 2),
        error=result.get("error"),
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness check",
    description="Basic health check to verify the service is running. Used for liveness probes.",
)
async def health_check() -> HealthResponse:
    """Return basic health status without touching dependencies."""
    return HealthResponse(status=HealthStatus.HEALTHY)


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    responses={
        200: {"description": "Profile and listing tables reachable"},
        503: {"description": "A table could not be read"},
    },
    summary="Readiness check",
    description="Reads one row id from the profile and listing tables. Used for readiness probes.",
)
async def readiness_check(response: Response) -> ReadinessResponse:
    """Check that both tables the API writes to answer.

    Args:
        response: FastAPI response object for setting status code.

    Returns:
        ReadinessResponse: One check per table.
    """
    settings = get_settings()
    checks = [
        await _check_table("profiles", settings.profiles_table),
        await _check_table("listings", settings.listings_table),
    ]

    all_healthy = all(check.healthy for check in checks)
    if not all_healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return ReadinessResponse(
        status=HealthStatus.HEALTHY if all_healthy else HealthStatus.UNHEALTHY,
        checks=checks,
    )


@router.get(
    "/health/auth",
    response_model=AuthenticatedResponse,
    summary="Authenticated health check",
    description="Protected endpoint to verify token verification is working.",
    responses={
        200: {"description": "Successfully authenticated"},
        401: {"description": "Authentication required or invalid token"},
    },
)
async def authenticated_check(user: CurrentUser) -> AuthenticatedResponse:
    """Echo the identity decoded from the caller's token."""
    return AuthenticatedResponse(
        authenticated=True,
        user_id=str(user.user_id),
        email=user.email,
        role=user.role,
    )
