"""
Push notification payloads.

Outgoing pushes carry both a notification block and a data map so the client
can show something while in the background and deep-link when tapped.
``route_incoming_message`` mirrors what the client does with a received
message and is what the routing tests and the debug endpoint exercise.
"""
import logging
from firebase_admin import messaging
from pydantic import BaseModel, Field
from typing import Dict, List, Mapping, Optional

from fridgy.models.notification import Notification

logger = logging.getLogger(__name__)

APP_NAME = "Fridgy"
DEFAULT_DATA_BODY = "You have a new notification"

# Data map keys shared with the client.
DATA_TYPE = "type"
DATA_FRIDGE_ID = "fridgeId"
DATA_ITEM_ID = "itemId"
DATA_TITLE = "title"
DATA_BODY = "body"

# Deep-link extras keyed from the data map.
EXTRA_KEYS = {
    DATA_TYPE: "notificationType",
    DATA_FRIDGE_ID: "fridgeId",
    DATA_ITEM_ID: "itemId",
}


class NotificationBlock(BaseModel):
    title: Optional[str] = None
    body: Optional[str] = None


class LocalNotification(BaseModel):
    """A notification as the client would display it."""

    title: str
    body: str
    extras: Dict[str, str] = Field(default_factory=dict)


def build_data_payload(notification: Notification) -> Dict[str, str]:
    """FCM data values must be strings; absent values are left out."""
    candidates = {
        DATA_TYPE: notification.type.value if notification.type else None,
        DATA_FRIDGE_ID: notification.related_fridge_id,
        DATA_ITEM_ID: notification.related_item_id,
        DATA_TITLE: notification.title,
        DATA_BODY: notification.body,
    }
    return {key: str(value) for key, value in candidates.items() if value}


def build_push_message(notification: Notification, token: str) -> messaging.Message:
    return messaging.Message(
        token=token,
        notification=messaging.Notification(
            title=notification.title or APP_NAME,
            body=notification.body,
        ),
        data=build_data_payload(notification),
        android=messaging.AndroidConfig(priority="high"),
    )


def send_push(notification: Notification, token: str) -> Optional[str]:
    """Send a push to one device. Returns the FCM message ID, or None on failure."""
    try:
        return messaging.send(build_push_message(notification, token))
    except Exception as ex:
        logger.error("Push to user %s failed: %s", notification.user_id, ex)
        return None


def build_extras(data: Mapping[str, str]) -> Dict[str, str]:
    return {extra: data[key] for key, extra in EXTRA_KEYS.items() if data.get(key)}


def route_incoming_message(
    notification_block: Optional[NotificationBlock],
    data: Optional[Mapping[str, str]],
) -> List[LocalNotification]:
    """
    Work out which local notifications a received message produces.

    A notification block yields one notification (a missing title becomes the
    app name, a missing body ""). A non-empty data map yields another, with its
    own fallbacks. Only absent values fall back; empty strings are shown as sent.
    Both carry the same deep-link extras.
    """
    data = dict(data or {})
    extras = build_extras(data)
    shown = []

    if notification_block is not None:
        shown.append(LocalNotification(
            title=notification_block.title if notification_block.title is not None else APP_NAME,
            body=notification_block.body if notification_block.body is not None else "",
            extras=extras,
        ))

    if data:
        logger.debug(
            "Handling data payload: type=%s fridgeId=%s itemId=%s",
            data.get(DATA_TYPE), data.get(DATA_FRIDGE_ID), data.get(DATA_ITEM_ID),
        )
        shown.append(LocalNotification(
            title=data.get(DATA_TITLE, APP_NAME),
            body=data.get(DATA_BODY, DEFAULT_DATA_BODY),
            extras=extras,
        ))

    return shown


def subscribe_to_topic(token: str, topic: str) -> bool:
    try:
        response = messaging.subscribe_to_topic([token], topic)
        return response.failure_count == 0
    except Exception as ex:
        logger.error("Topic subscribe to %s failed: %s", topic, ex)
        return False


def unsubscribe_from_topic(token: str, topic: str) -> bool:
    try:
        response = messaging.unsubscribe_from_topic([token], topic)
        return response.failure_count == 0
    except Exception as ex:
        logger.error("Topic unsubscribe from %s failed: %s", topic, ex)
        return False
