import logging
from typing import List

from fridgy.core.exception import (
    AuthorizationException,
    BadRequestException,
    InternalServerException,
    ResourceNotFoundException,
)
from fridgy.models.notification import Notification
from fridgy.repositories.notification_repository import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationService:
    """Service layer for a user's in-app notifications and device token."""

    def __init__(self, db):
        self.db = db
        self.notification_repo = NotificationRepository(db)

    def _owned(self, notification_id: str, user_id: str) -> Notification:
        notification = self.notification_repo.get(notification_id)
        if notification is None:
            raise ResourceNotFoundException("Notification", notification_id)
        if notification.user_id != user_id:
            raise AuthorizationException("This notification belongs to another user")
        return notification

    def get_notifications(self, user_id: str) -> List[Notification]:
        return self.notification_repo.get_notifications(user_id)

    def get_unread_count(self, user_id: str) -> int:
        return self.notification_repo.get_unread_count(user_id)

    def mark_as_read(self, notification_id: str, user_id: str) -> None:
        self._owned(notification_id, user_id)
        if not self.notification_repo.mark_as_read(notification_id):
            raise InternalServerException("Could not update notification")

    def mark_all_as_read(self, user_id: str) -> int:
        return self.notification_repo.mark_all_as_read(user_id)

    def delete_notification(self, notification_id: str, user_id: str) -> None:
        self._owned(notification_id, user_id)
        if not self.notification_repo.delete_notification(notification_id):
            raise InternalServerException("Could not delete notification")

    def save_fcm_token(self, user_id: str, token: str) -> None:
        if not self.notification_repo.save_fcm_token(user_id, token):
            raise InternalServerException("Could not save device token")

    def subscribe_to_topic(self, user_id: str, topic: str) -> None:
        if not self.notification_repo.subscribe_to_topic(user_id, topic):
            raise BadRequestException("Could not subscribe; register a device token first")

    def unsubscribe_from_topic(self, user_id: str, topic: str) -> None:
        if not self.notification_repo.unsubscribe_from_topic(user_id, topic):
            raise BadRequestException("Could not unsubscribe; register a device token first")
