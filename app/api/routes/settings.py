from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status

from app.core.auth import CurrentPrincipal, require_roles
from app.core.container import Services, get_services
from app.core.rate_limit import app_config, enforce_rate_limit, get_rate_limiter
from app.schemas.common import ApiResponse
from app.schemas.settings import (
    ApiKey,
    ApiKeyCreate,
    ApiKeyPublic,
    RateLimitStatus,
    SystemSettings,
    SystemSettingsUpdate,
)
from app.services.navigation_service import ADMIN_ONLY

router = APIRouter(prefix="/settings", tags=["Settings"], dependencies=[Depends(enforce_rate_limit)])

ServicesDep = Annotated[Services, Depends(get_services)]
AdminOnly = Depends(require_roles(*ADMIN_ONLY))


@router.get("")
async def get_settings(services: ServicesDep) -> ApiResponse[SystemSettings]:
    return ApiResponse[SystemSettings](data=await services.system_settings.get())


@router.patch("", dependencies=[AdminOnly])
async def update_settings(body: SystemSettingsUpdate, services: ServicesDep) -> ApiResponse[SystemSettings]:
    """Partially update the system settings.

    Changing ``rate_limit_requests`` or ``rate_limit_window`` takes effect on
    the next request and starts every caller from a fresh budget.
    """
    updated = await services.system_settings.update(body)
    return ApiResponse[SystemSettings](data=updated, message="Settings saved successfully")


@router.get("/rate-limit")
async def get_rate_limit_status(
    request: Request,
    principal: CurrentPrincipal,
    services: ServicesDep,
) -> ApiResponse[RateLimitStatus]:
    """Report the caller's remaining request budget without consuming any."""
    limiter = get_rate_limiter(request, services)
    result = limiter.peek(principal.rate_limit_key)
    return ApiResponse[RateLimitStatus](
        data=RateLimitStatus(
            limit=result.limit,
            remaining=result.remaining,
            window_seconds=int(limiter.window_seconds),
            reset_at=result.reset_at,
            enabled=app_config(request).app.rate_limit_enabled,
        )
    )


@router.get("/api-keys", dependencies=[AdminOnly])
async def list_api_keys(services: ServicesDep) -> ApiResponse[list[ApiKeyPublic]]:
    return ApiResponse[list[ApiKeyPublic]](data=await services.api_keys.list())


@router.post("/api-keys", status_code=status.HTTP_201_CREATED, dependencies=[AdminOnly])
async def create_api_key(body: ApiKeyCreate, services: ServicesDep) -> ApiResponse[ApiKey]:
    """Create a key. The full key is returned here and by the reveal endpoint only."""
    api_key = await services.api_keys.create(body.name, body.permissions)
    return ApiResponse[ApiKey](data=api_key, message="API key created successfully")


@router.get("/api-keys/{key_id}/reveal", dependencies=[AdminOnly])
async def reveal_api_key(key_id: str, services: ServicesDep) -> ApiResponse[ApiKey]:
    return ApiResponse[ApiKey](data=await services.api_keys.reveal(key_id))


@router.post("/api-keys/{key_id}/revoke", dependencies=[AdminOnly])
async def revoke_api_key(key_id: str, services: ServicesDep) -> ApiResponse[ApiKeyPublic]:
    revoked = await services.api_keys.revoke(key_id)
    return ApiResponse[ApiKeyPublic](data=revoked, message="API key revoked successfully")
