from datetime import datetime
from enum import Enum
from pydantic import Field
from typing import Optional

from fridgy.models.base import DocumentModel


class NotificationType(str, Enum):
    GENERAL = "GENERAL"
    FRIDGE_INVITE = "FRIDGE_INVITE"
    ITEM_ADDED = "ITEM_ADDED"
    ITEM_REMOVED = "ITEM_REMOVED"
    ITEM_LOW_STOCK = "ITEM_LOW_STOCK"
    MEMBER_JOINED = "MEMBER_JOINED"
    MEMBER_LEFT = "MEMBER_LEFT"

    @classmethod
    def from_string(cls, value: Optional[str]) -> "NotificationType":
        try:
            return cls((value or "").upper())
        except ValueError:
            return cls.GENERAL


class Notification(DocumentModel):
    """In-app notification stored at ``notifications/{id}``."""

    id: str = ""
    user_id: str = ""
    title: str = ""
    body: str = ""
    type: NotificationType = NotificationType.GENERAL
    related_fridge_id: Optional[str] = None
    related_item_id: Optional[str] = None
    # Stored as "read", not "isRead".
    is_read: bool = Field(default=False, alias="read")
    created_at: Optional[datetime] = None


class FcmToken(DocumentModel):
    """A device registration token, one per user at ``fcmTokens/{uid}``."""

    id_field = "user_id"

    user_id: str = ""
    token: str = ""
    updated_at: Optional[datetime] = None

    def to_document(self, exclude_none: bool = False):
        # userId is queried on, so it is stored in the body as well.
        document = super().to_document(exclude_none=exclude_none)
        document["userId"] = self.user_id
        return document
