"""
Notification routes
"""
from fastapi import APIRouter, Depends, Query

from ...config import settings
from ...domain.models import User
from ...schemas import (
    NotificationResponse, UnreadCount, DataResponse, ListResponse, MessageResponse
)
from ...application.notification_service import NotificationService
from ...application.pagination import build_pagination
from ..dependencies import get_notification_service, get_current_user


router = APIRouter(prefix="/api/notifications", tags=["Notifications"])


@router.get("", response_model=ListResponse[NotificationResponse])
async def list_notifications(
    page: int = Query(1),
    limit: int = Query(settings.NOTIFICATION_PAGE_SIZE),
    current_user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service)
):
    """The current user's notifications, newest first"""
    notifications, total = await notification_service.list_notifications(current_user.id, page, limit)
    return ListResponse[NotificationResponse](
        data=notifications, pagination=build_pagination(page, limit, total)
    )


@router.get("/unread-count", response_model=DataResponse[UnreadCount])
async def unread_count(
    current_user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service)
):
    count = await notification_service.unread_count(current_user.id)
    return DataResponse[UnreadCount](data=UnreadCount(count=count))


@router.put("/mark-all-read", response_model=MessageResponse)
async def mark_all_read(
    current_user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service)
):
    await notification_service.mark_all_read(current_user.id)
    return MessageResponse(message="All notifications marked as read")


@router.put("/{notification_id}/read", response_model=MessageResponse)
async def mark_read(
    notification_id: str,
    current_user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service)
):
    await notification_service.mark_read(notification_id, current_user.id)
    return MessageResponse(message="Notification marked as read")


@router.delete("/{notification_id}", response_model=MessageResponse)
async def delete_notification(
    notification_id: str,
    current_user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service)
):
    await notification_service.delete(notification_id, current_user.id)
    return MessageResponse(message="Notification deleted")


@router.delete("", response_model=MessageResponse)
async def delete_all_notifications(
    current_user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service)
):
    await notification_service.delete_all(current_user.id)
    return MessageResponse(message="All notifications deleted")
