from pydantic import BaseModel, Field
from typing import Dict, Optional

from fridgy.services.messaging_service import NotificationBlock


class FcmTokenUpdate(BaseModel):
    token: str = Field(..., min_length=1)


class TopicRequest(BaseModel):
    topic: str = Field(..., min_length=1, max_length=900, pattern=r"^[a-zA-Z0-9-_.~%]+$")


class UnreadCountResponse(BaseModel):
    count: int


class IncomingMessage(BaseModel):
    """A received FCM message, as handed to the client."""
    notification: Optional[NotificationBlock] = None
    data: Dict[str, str] = Field(default_factory=dict)
