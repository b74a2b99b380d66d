from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status

from app.core.container import Services, get_services
from app.core.rate_limit import enforce_rate_limit
from app.schemas.common import ApiResponse
from app.schemas.notification import Notification, NotificationCreate

router = APIRouter(prefix="/notifications", tags=["Notifications"], dependencies=[Depends(enforce_rate_limit)])

ServicesDep = Annotated[Services, Depends(get_services)]


@router.get("")
async def list_notifications(services: ServicesDep, unread_only: bool = False) -> ApiResponse[list[Notification]]:
    """Toast feed, newest first."""
    return ApiResponse[list[Notification]](data=await services.notifications.list(unread_only=unread_only))


@router.post("", status_code=status.HTTP_201_CREATED)
async def push_notification(body: NotificationCreate, services: ServicesDep) -> ApiResponse[Notification]:
    notification = services.notifications.push(
        body.type, body.message, title=body.title, duration=body.duration
    )
    return ApiResponse[Notification](data=notification)


@router.post("/{notification_id}/read")
async def mark_notification_read(notification_id: str, services: ServicesDep) -> ApiResponse[Notification]:
    return ApiResponse[Notification](data=await services.notifications.mark_read(notification_id))


@router.delete("/{notification_id}")
async def dismiss_notification(notification_id: str, services: ServicesDep) -> ApiResponse[None]:
    await services.notifications.dismiss(notification_id)
    return ApiResponse[None](data=None, message="Notification dismissed")


@router.delete("")
async def clear_notifications(services: ServicesDep) -> ApiResponse[dict[str, int]]:
    cleared = await services.notifications.clear_all()
    return ApiResponse[dict[str, int]](data={"cleared": cleared})
