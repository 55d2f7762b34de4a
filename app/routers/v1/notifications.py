"""In-app notification router for procurement users."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from app.core.response import DataResponse
from app.routers.deps import get_actor, get_services
from app.schemas.notification import MarkedRead, NotificationOut, UnreadCount
from app.services.factory import Services

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=DataResponse[list[NotificationOut]])
async def list_notifications(
    unread_only: bool = Query(default=False, alias="unreadOnly"),
    services: Services = Depends(get_services),
    actor: str = Depends(get_actor),
):
    """Notifications addressed to the acting user, newest first."""
    if unread_only:
        items = await services.notifications.list_unread(actor)
    else:
        items = await services.notifications.list_for_user(actor)
    return {"data": [NotificationOut.model_validate(n) for n in items]}


@router.get("/unread-count", response_model=DataResponse[UnreadCount])
async def unread_count(
    services: Services = Depends(get_services),
    actor: str = Depends(get_actor),
):
    return {"data": UnreadCount(count=await services.notifications.count_unread(actor))}


@router.post("/read-all", response_model=DataResponse[MarkedRead])
async def mark_all_read(
    services: Services = Depends(get_services),
    actor: str = Depends(get_actor),
):
    return {"data": MarkedRead(updated=await services.notifications.mark_all_read(actor))}


@router.post("/{notification_id}/read", response_model=DataResponse[NotificationOut])
async def mark_read(notification_id: str, services: Services = Depends(get_services)):
    notification = await services.notifications.mark_read(notification_id)
    return {"data": NotificationOut.model_validate(notification)}
