import logging
from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from typing import List, Optional

from fridgy.config import settings
from fridgy.constants import Collections, Fields
from fridgy.models.notification import FcmToken, Notification, NotificationType
from fridgy.repositories.repository import BaseRepository
from fridgy.services import messaging_service

logger = logging.getLogger(__name__)


class NotificationRepository(BaseRepository[Notification]):
    """In-app notifications plus the FCM device tokens used to push them."""

    def __init__(self, db):
        super().__init__(Notification, db, Collections.NOTIFICATIONS)

    @property
    def tokens(self):
        return self.db.collection(Collections.FCM_TOKENS)

    def save_fcm_token(self, user_id: str, token: str) -> bool:
        data = FcmToken(user_id=user_id, token=token).to_document(exclude_none=True)
        data[Fields.UPDATED_AT] = firestore.SERVER_TIMESTAMP
        try:
            self.tokens.document(user_id).set(data)
            return True
        except Exception as ex:
            logger.error("Error saving FCM token for %s: %s", user_id, ex)
            return False

    def get_fcm_token(self, user_id: str) -> Optional[str]:
        try:
            token = FcmToken.from_snapshot(self.tokens.document(user_id).get())
        except Exception as ex:
            logger.error("Error reading FCM token for %s: %s", user_id, ex)
            return None
        return token.token if token and token.token else None

    def notifications_query(self, user_id: str, limit: Optional[int] = None):
        return (
            self.collection
            .where(filter=FieldFilter(Fields.USER_ID, "==", user_id))
            .order_by(Fields.CREATED_AT, direction=firestore.Query.DESCENDING)
            .limit(limit or settings.NOTIFICATIONS_LIMIT)
        )

    def get_notifications(self, user_id: str, limit: Optional[int] = None) -> List[Notification]:
        """Most recent notifications first."""
        return self.query(self.notifications_query(user_id, limit))

    def _unread_query(self, user_id: str):
        return (
            self.collection
            .where(filter=FieldFilter(Fields.USER_ID, "==", user_id))
            .where(filter=FieldFilter(Fields.IS_READ, "==", False))
        )

    def get_unread_count(self, user_id: str) -> int:
        try:
            return sum(1 for _ in self._unread_query(user_id).stream())
        except Exception as ex:
            logger.error("Error counting unread notifications for %s: %s", user_id, ex)
            return 0

    def mark_as_read(self, notification_id: str) -> bool:
        return self.update(notification_id, {Fields.IS_READ: True})

    def mark_all_as_read(self, user_id: str) -> int:
        """Mark every unread notification read. Returns how many changed."""
        try:
            unread = list(self._unread_query(user_id).stream())
            if not unread:
                return 0
            batch = self.db.batch()
            for doc in unread:
                batch.update(doc.reference, {Fields.IS_READ: True})
            batch.commit()
            return len(unread)
        except Exception as ex:
            logger.error("Error marking notifications read for %s: %s", user_id, ex)
            return 0

    def delete_notification(self, notification_id: str) -> bool:
        return self.delete(notification_id)

    def send_in_app_notification(
        self,
        user_id: str,
        title: str,
        body: str,
        type: NotificationType = NotificationType.GENERAL,
        related_fridge_id: Optional[str] = None,
        related_item_id: Optional[str] = None,
    ) -> Optional[Notification]:
        """
        Store a notification for ``user_id`` and push it to their device if
        they have registered one.
        """
        ref = self.document()
        notification = Notification(
            id=ref.id,
            user_id=user_id,
            title=title,
            body=body,
            type=type,
            related_fridge_id=related_fridge_id,
            related_item_id=related_item_id,
        )
        data = notification.to_document()
        data[Fields.CREATED_AT] = firestore.SERVER_TIMESTAMP
        try:
            ref.set(data)
        except Exception as ex:
            logger.error("Error storing notification for %s: %s", user_id, ex)
            return None

        token = self.get_fcm_token(user_id)
        if token:
            messaging_service.send_push(notification, token)
        return notification

    def subscribe_to_topic(self, user_id: str, topic: str) -> bool:
        token = self.get_fcm_token(user_id)
        return bool(token) and messaging_service.subscribe_to_topic(token, topic)

    def unsubscribe_from_topic(self, user_id: str, topic: str) -> bool:
        token = self.get_fcm_token(user_id)
        return bool(token) and messaging_service.unsubscribe_from_topic(token, topic)
