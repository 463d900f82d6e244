from fastapi import APIRouter, Depends
from typing import List

from fridgy.database import get_db
from fridgy.dependencies import get_current_user
from fridgy.models.notification import Notification
from fridgy.models.user import CurrentUser
from fridgy.schemas.notification import TopicRequest, UnreadCountResponse
from fridgy.schemas.result import Result
from fridgy.services.notification_service import NotificationService

router = APIRouter()


@router.get("", response_model=Result[List[Notification]])
async def get_notifications(
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """The caller's most recent notifications, newest first."""
    service = NotificationService(db)
    return Result.successful(data=service.get_notifications(current_user.uid))


@router.get("/unread-count", response_model=Result[UnreadCountResponse])
async def get_unread_count(
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    service = NotificationService(db)
    return Result.successful(data={"count": service.get_unread_count(current_user.uid)})


@router.post("/read-all", response_model=Result[dict])
async def mark_all_as_read(
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    service = NotificationService(db)
    updated = service.mark_all_as_read(current_user.uid)
    return Result.successful(data={"updated": updated})


@router.post("/topics/subscribe", response_model=Result[dict])
async def subscribe_to_topic(
    topic_data: TopicRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    service = NotificationService(db)
    service.subscribe_to_topic(current_user.uid, topic_data.topic)
    return Result.acknowledged(f"Subscribed to {topic_data.topic}")


@router.post("/topics/unsubscribe", response_model=Result[dict])
async def unsubscribe_from_topic(
    topic_data: TopicRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    service = NotificationService(db)
    service.unsubscribe_from_topic(current_user.uid, topic_data.topic)
    return Result.acknowledged(f"Unsubscribed from {topic_data.topic}")


@router.post("/{notification_id}/read", response_model=Result[dict])
async def mark_as_read(
    notification_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    service = NotificationService(db)
    service.mark_as_read(notification_id, current_user.uid)
    return Result.acknowledged("Notification marked as read")


@router.delete("/{notification_id}", response_model=Result[dict])
async def delete_notification(
    notification_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    service = NotificationService(db)
    service.delete_notification(notification_id, current_user.uid)
    return Result.acknowledged("Notification deleted")
