import logging

from fridgy.core.exception import DuplicateResourceException, ResourceNotFoundException
from fridgy.models.user import CurrentUser, User, UserProfile
from fridgy.repositories.user_repository import UserRepository
from fridgy.schemas.user import UserRegister

logger = logging.getLogger(__name__)


class UserService:
    """Service layer for accounts and public profiles."""

    def __init__(self, db):
        self.db = db
        self.user_repo = UserRepository(db)

    def register(self, current_user: CurrentUser, data: UserRegister) -> UserProfile:
        """
        Create the Firestore documents for a freshly signed-up Firebase user.

        Raises:
            DuplicateResourceException: If the profile exists or the username is taken
        """
        if self.user_repo.get_user_profile(current_user.uid) is not None:
            raise DuplicateResourceException("User", current_user.uid)
        if self.user_repo.is_username_taken(data.username):
            raise DuplicateResourceException("Username", data.username)

        self.user_repo.create_user_documents(current_user.uid, data.email, data.username)
        return UserProfile(uid=current_user.uid, username=data.username)

    def get_me(self, user_id: str) -> User:
        user = self.user_repo.get(user_id)
        if user is None:
            raise ResourceNotFoundException("User", user_id)
        return user

    def get_profile(self, user_id: str) -> UserProfile:
        profile = self.user_repo.get_user_profile(user_id)
        if profile is None:
            raise ResourceNotFoundException("User profile", user_id)
        return profile

    def is_username_available(self, username: str) -> bool:
        return not self.user_repo.is_username_taken(username)

    def update_username(self, user_id: str, new_username: str) -> UserProfile:
        profile = self.get_profile(user_id)
        if profile.username == new_username:
            return profile
        if self.user_repo.is_username_taken(new_username):
            raise DuplicateResourceException("Username", new_username)

        self.user_repo.update_username(user_id, new_username)
        return UserProfile(uid=user_id, username=new_username)

    def delete_account(self, user_id: str) -> None:
        self.user_repo.delete_account(user_id)
