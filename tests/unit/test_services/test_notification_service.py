import pytest
from datetime import datetime, timedelta, timezone

from fridgy.core.exception import AuthorizationException, BadRequestException, ResourceNotFoundException
from fridgy.models.notification import NotificationType
from fridgy.repositories.notification_repository import NotificationRepository
from fridgy.services.notification_service import NotificationService

BASE = datetime(2024, 5, 1, tzinfo=timezone.utc)


@pytest.fixture
def inbox(db):
    for i in range(3):
        db.seed(f"notifications/n{i}", {
            "userId": "u1",
            "title": f"Note {i}",
            "body": "",
            "type": "GENERAL",
            "read": i == 0,
            "createdAt": BASE + timedelta(minutes=i),
        })
    db.seed("notifications/theirs", {"userId": "u2", "title": "Not yours", "read": False, "createdAt": BASE})
    return db


@pytest.mark.unit
class TestNotificationService:
    """Unit tests for NotificationService."""

    def test_newest_first(self, inbox):
        notifications = NotificationService(inbox).get_notifications("u1")

        assert [n.id for n in notifications] == ["n2", "n1", "n0"]
        assert notifications[2].is_read is True
        assert notifications[0].type == NotificationType.GENERAL

    def test_limit(self, db):
        for i in range(60):
            db.seed(f"notifications/x{i:02d}", {"userId": "u1", "createdAt": BASE + timedelta(seconds=i)})
        assert len(NotificationService(db).get_notifications("u1")) == 50

    def test_unread_count(self, inbox):
        assert NotificationService(inbox).get_unread_count("u1") == 2

    def test_mark_as_read(self, inbox):
        NotificationService(inbox).mark_as_read("n1", "u1")
        assert inbox.data("notifications/n1")["read"] is True

    def test_cannot_touch_others_notifications(self, inbox):
        with pytest.raises(AuthorizationException):
            NotificationService(inbox).mark_as_read("theirs", "u1")
        with pytest.raises(AuthorizationException):
            NotificationService(inbox).delete_notification("theirs", "u1")

    def test_missing_notification(self, inbox):
        with pytest.raises(ResourceNotFoundException):
            NotificationService(inbox).delete_notification("nope", "u1")

    def test_mark_all_as_read(self, inbox):
        service = NotificationService(inbox)
        assert service.mark_all_as_read("u1") == 2
        assert service.get_unread_count("u1") == 0
        assert inbox.data("notifications/theirs")["read"] is False
        assert service.mark_all_as_read("u1") == 0

    def test_delete(self, inbox):
        NotificationService(inbox).delete_notification("n0", "u1")
        assert inbox.data("notifications/n0") is None

    def test_save_fcm_token(self, db):
        NotificationService(db).save_fcm_token("u1", "device-1")

        stored = db.data("fcmTokens/u1")
        assert stored["userId"] == "u1"
        assert stored["token"] == "device-1"
        assert stored["updatedAt"] is not None

    def test_topics_need_a_token(self, db, fake_messaging):
        service = NotificationService(db)
        with pytest.raises(BadRequestException):
            service.subscribe_to_topic("u1", "deals")

        service.save_fcm_token("u1", "device-1")
        service.subscribe_to_topic("u1", "deals")
        service.unsubscribe_from_topic("u1", "deals")

        assert fake_messaging.subscriptions == [
            ("subscribe", ["device-1"], "deals"),
            ("unsubscribe", ["device-1"], "deals"),
        ]

    def test_send_without_token_stores_only(self, db, fake_messaging):
        notification = NotificationRepository(db).send_in_app_notification("u3", "Hello", "World")

        stored = db.data(f"notifications/{notification.id}")
        assert stored["title"] == "Hello"
        assert stored["read"] is False
        assert stored["createdAt"] is not None
        assert fake_messaging.sent == []
