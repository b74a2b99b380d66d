from __future__ import annotations

from fastapi import APIRouter, Request

from app.core.config import settings

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(request: Request) -> dict:
    """Health check endpoint.

    Returns a simple status response to verify the API is operational,
    plus the environment name and whether simulated latency is active.

    Returns:
        dict: ``status`` is always "ok" while the process serves requests.
    """

    services = request.app.state.services
    return {
        "status": "ok",
        "environment": settings.app_env,
        "latency_simulated": services.simulator.latency_enabled,
        "users": services.users.count(),
    }
