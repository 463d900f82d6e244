from fastapi import APIRouter, Depends, Query, status

from fridgy.database import get_db
from fridgy.dependencies import get_current_user
from fridgy.models.user import CurrentUser, User, UserProfile
from fridgy.schemas.notification import FcmTokenUpdate
from fridgy.schemas.result import Result
from fridgy.schemas.user import UsernameAvailability, UsernameUpdate, UserRegister
from fridgy.services.notification_service import NotificationService
from fridgy.services.user_service import UserService

router = APIRouter()


@router.post("/register", response_model=Result[UserProfile], status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """Create the account documents for a user who just signed up with Firebase Auth."""
    service = UserService(db)
    return Result.successful(data=service.register(current_user, user_data))


@router.get("/me", response_model=Result[User])
async def get_me(
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    service = UserService(db)
    return Result.successful(data=service.get_me(current_user.uid))


@router.get("/username-available", response_model=Result[UsernameAvailability])
async def username_available(
    username: str = Query(..., min_length=3, max_length=30),
    db=Depends(get_db)
):
    """Check a username before sign-up. Reports unavailable if the check fails."""
    service = UserService(db)
    return Result.successful(data={"username": username, "available": service.is_username_available(username)})


@router.put("/me/username", response_model=Result[UserProfile])
async def update_username(
    username_data: UsernameUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    service = UserService(db)
    return Result.successful(data=service.update_username(current_user.uid, username_data.username))


@router.put("/me/fcm-token", response_model=Result[dict])
async def save_fcm_token(
    token_data: FcmTokenUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """Register the device token used for push notifications."""
    service = NotificationService(db)
    service.save_fcm_token(current_user.uid, token_data.token)
    return Result.acknowledged("Device token saved")


@router.delete("/me", response_model=Result[dict])
async def delete_account(
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """Delete the account, its memberships, device tokens and Auth user."""
    service = UserService(db)
    service.delete_account(current_user.uid)
    return Result.acknowledged("Account deleted successfully")


@router.get("/{user_id}", response_model=Result[UserProfile])
async def get_profile(
    user_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_db)
):
    """Public profile of any user."""
    service = UserService(db)
    return Result.successful(data=service.get_profile(user_id))
