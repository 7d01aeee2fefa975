"""
Health check router for observability.
"""
from fastapi import APIRouter

from reelview.api.dependencies import get_read_circuit_breaker, get_session_registry
from reelview.config import get_settings

router = APIRouter(tags=["health"])


@router.get("/health", summary="Health Check")
async def health_check() -> dict:
    """Basic health check endpoint."""
    return {"status": "healthy"}


@router.get("/health/ready", summary="Readiness Check")
async def readiness_check() -> dict:
    """
    Readiness check for Kubernetes.
    Returns backend kind, read circuit state and open session count.
    """
    circuit_breaker = get_read_circuit_breaker()
    settings = get_settings()

    return {
        "status": "ready",
        "backend": settings.BACKEND,
        "circuit_breaker": {
            "name": circuit_breaker.name,
            "state": circuit_breaker.state.value,
        },
        "sessions": len(get_session_registry()),
    }
