from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from app.core.auth import require_roles
from app.core.container import Services, get_services
from app.core.rate_limit import enforce_rate_limit
from app.schemas.common import ApiResponse, Paginated, PaginationMeta
from app.schemas.user import BulkDeleteRequest, BulkDeleteResult, User, UserCreate, UserUpdate
from app.services.navigation_service import ADMIN_AND_MODERATOR
from app.utils.query_engine import QueryParams

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    dependencies=[Depends(require_roles(*ADMIN_AND_MODERATOR)), Depends(enforce_rate_limit)],
)

ServicesDep = Annotated[Services, Depends(get_services)]


@router.get("")
async def list_users(
    services: ServicesDep,
    page: int = 1,
    limit: int = 10,
    search: str | None = None,
    sort_by: str | None = None,
    sort_order: str = "asc",
    role: Annotated[list[str] | None, Query()] = None,
    user_status: Annotated[list[str] | None, Query(alias="status")] = None,
) -> ApiResponse[Paginated[User]]:
    """List users with search, filters, sorting and pagination.

    ``role`` and ``status`` may be repeated to allow several values.
    Invalid paging or an unknown sort field yields a 400.
    """
    filters: dict[str, list[str]] = {}
    if role:
        filters["role"] = role
    if user_status:
        filters["status"] = user_status

    params = QueryParams(
        page=page,
        limit=limit,
        sort_by=sort_by or None,
        sort_order=sort_order,
        search=search,
        filters=filters,
    )
    result = await services.users.list_users(params)
    meta = PaginationMeta(
        page=result.meta.page,
        limit=result.meta.limit,
        total=result.meta.total,
        total_pages=result.meta.total_pages,
    )
    return ApiResponse[Paginated[User]](data=Paginated[User](items=result.items, meta=meta))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(body: UserCreate, services: ServicesDep) -> ApiResponse[User]:
    user = await services.users.create_user(body)
    return ApiResponse[User](data=user, message="User created successfully")


@router.post("/bulk-delete")
async def bulk_delete_users(body: BulkDeleteRequest, services: ServicesDep) -> ApiResponse[BulkDeleteResult]:
    result = await services.users.bulk_delete(body.ids)
    return ApiResponse[BulkDeleteResult](data=result, message=f"{len(result.deleted)} users deleted")


@router.get("/{user_id}")
async def get_user(user_id: str, services: ServicesDep) -> ApiResponse[User]:
    return ApiResponse[User](data=await services.users.get_user(user_id))


@router.patch("/{user_id}")
async def update_user(user_id: str, body: UserUpdate, services: ServicesDep) -> ApiResponse[User]:
    user = await services.users.update_user(user_id, body)
    return ApiResponse[User](data=user, message="User updated successfully")


@router.delete("/{user_id}")
async def delete_user(user_id: str, services: ServicesDep) -> ApiResponse[User]:
    user = await services.users.delete_user(user_id)
    return ApiResponse[User](data=user, message="User deleted successfully")
