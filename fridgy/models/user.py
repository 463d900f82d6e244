from datetime import datetime
from typing import Optional

from fridgy.models.base import DocumentModel


class User(DocumentModel):
    """Private account data stored at ``users/{uid}``."""

    id_field = "uid"

    uid: str = ""
    email: str = ""
    created_at: Optional[datetime] = None


class UserProfile(DocumentModel):
    """Public profile at ``userProfiles/{uid}``, readable by any signed-in user."""

    id_field = "uid"

    uid: str = ""
    username: str = ""


class CurrentUser(DocumentModel):
    """The authenticated caller, as decoded from a Firebase ID token."""

    id_field = "uid"

    uid: str
    email: Optional[str] = None
    is_admin: bool = False
