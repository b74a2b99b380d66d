from __future__ import annotations

from fastapi import APIRouter

from app.core.auth import CurrentPrincipal
from app.schemas.common import ApiResponse
from app.schemas.notification import NavItem
from app.services.navigation_service import navigation_for

router = APIRouter(tags=["Navigation"])


@router.get("/navigation")
async def get_navigation(principal: CurrentPrincipal) -> ApiResponse[list[NavItem]]:
    """Sidebar items the caller's role may open."""
    return ApiResponse[list[NavItem]](data=navigation_for(principal.role))
