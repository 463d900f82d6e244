from pydantic import Field
from typing import Optional

from fridgy.models.base import DocumentModel
from fridgy.models.item import now_ms

# No I, O, 0 or 1; they are easy to misread when shared verbally.
INVITE_CODE_CHARS = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


class InviteCode(DocumentModel):
    """
    Shareable code for joining a household, stored at ``inviteCodes/{code}``.

    Codes are single-use and may carry an expiry (epoch ms).
    """

    id_field = "code"

    code: str = ""
    household_id: str = ""
    household_name: str = ""
    created_by: str = ""
    created_at: int = Field(default_factory=now_ms)
    expires_at: Optional[int] = None
    used_by: Optional[str] = None
    used_at: Optional[int] = None
    active: bool = True

    def is_expired(self, now: Optional[int] = None) -> bool:
        now = now_ms() if now is None else now
        return self.expires_at is not None and now > self.expires_at

    def is_valid(self, now: Optional[int] = None) -> bool:
        if not self.active:
            return False
        if self.used_by is not None:
            return False
        return not self.is_expired(now)
