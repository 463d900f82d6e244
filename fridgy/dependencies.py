import logging
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from firebase_admin import auth
from typing import Optional

from .core.exception import AuthenticationException, AuthorizationException
from .database import get_bucket, get_db, get_firebase_app
from .models.user import CurrentUser
from .repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def verify_token(token: Optional[str], db) -> CurrentUser:
    """
    Decode a Firebase ID token into the calling user.
    Raises CustomException instead of HTTPException for consistent error handling.
    """
    if not token:
        raise AuthenticationException("Could not validate credentials")

    try:
        claims = auth.verify_id_token(token, app=get_firebase_app())
    except Exception as ex:
        logger.info("Rejected ID token: %s", ex)
        raise AuthenticationException("Could not validate credentials")

    uid = claims.get("uid") or claims.get("sub")
    if not uid:
        raise AuthenticationException("Invalid token format")

    return CurrentUser(
        uid=uid,
        email=claims.get("email"),
        is_admin=UserRepository(db).is_admin(uid),
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db=Depends(get_db),
) -> CurrentUser:
    """
    Dependency to get the current authenticated user from a Firebase ID token.

    Example:
        @router.get("/protected")
        async def protected_route(current_user: CurrentUser = Depends(get_current_user)):
            return {"user_id": current_user.uid}
    """
    return verify_token(credentials.credentials if credentials else None, db)


async def get_current_admin(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """
    Dependency for routes that require an admin (a document in ``admins``).
    """
    if not current_user.is_admin:
        raise AuthorizationException("Admin access required")
    return current_user


def get_storage_bucket():
    """Cloud Storage bucket, or None when no bucket is configured."""
    try:
        return get_bucket()
    except Exception as ex:
        logger.warning("Storage bucket unavailable: %s", ex)
        return None
