"""Notification API endpoints

Provides:
- GET /notifications: caller's inbox, newest first (max 50)
- GET /notifications/unread-count
- POST /notifications/{id}/read
- POST /notifications/read-all
"""

from typing import Annotated, List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from auth.dependencies import CurrentUser, get_current_user
from dependencies import get_notification_service
from .schemas import MarkAllReadResult, NotificationResponse, UnreadCount
from .service import DEFAULT_NOTIFICATION_LIMIT, NotificationNotFoundError, NotificationService

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
    unread_only: Annotated[bool, Query(alias="unreadOnly")] = False,
    limit: Annotated[int, Query(ge=1, le=DEFAULT_NOTIFICATION_LIMIT)] = DEFAULT_NOTIFICATION_LIMIT,
):
    notifications = await service.list_notifications(current_user, unread_only=unread_only, limit=limit)
    return [NotificationResponse.from_stored(n) for n in notifications]


@router.get("/unread-count", response_model=UnreadCount)
async def get_unread_count(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
):
    return UnreadCount(unread_count=await service.unread_count(current_user))


@router.post("/read-all", response_model=MarkAllReadResult)
async def mark_all_read(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
):
    return MarkAllReadResult(updated_count=await service.mark_all_read(current_user))


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
):
    try:
        notification = await service.mark_read(current_user, notification_id)
    except NotificationNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    return NotificationResponse.from_stored(notification)
