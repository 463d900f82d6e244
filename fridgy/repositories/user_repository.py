import logging
from firebase_admin import auth, firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from typing import Dict, Iterable, Optional

from fridgy.constants import Collections, Fields
from fridgy.models.user import User, UserProfile
from fridgy.repositories.repository import BaseRepository

logger = logging.getLogger(__name__)

# Firestore limits "in" filters to 10 values per query.
IN_QUERY_CHUNK = 10


class UserRepository(BaseRepository[User]):
    """
    Repository for user accounts and public profiles.

    Private data (email) lives in ``users``; the username lives in
    ``userProfiles`` so other members can resolve it.
    """

    _profile_cache: Dict[str, UserProfile] = {}

    def __init__(self, db):
        super().__init__(User, db, Collections.USERS)

    @property
    def profiles(self):
        return self.db.collection(Collections.USER_PROFILES)

    def is_username_taken(self, username: str) -> bool:
        """Fails closed: any error reports the name as taken."""
        try:
            matches = (
                self.profiles.where(filter=FieldFilter(Fields.USERNAME, "==", username))
                .limit(1)
                .stream()
            )
            return any(True for _ in matches)
        except Exception as ex:
            logger.error("Error checking username availability: %s", ex)
            return True

    def create_user_documents(self, uid: str, email: str, username: str) -> None:
        self.document(uid).set({
            Fields.EMAIL: email,
            Fields.CREATED_AT: firestore.SERVER_TIMESTAMP,
        })
        self.profiles.document(uid).set({Fields.USERNAME: username})
        self._profile_cache[uid] = UserProfile(uid=uid, username=username)
        logger.info("Created user documents for %s", uid)

    def get_user_profile(self, user_id: str) -> Optional[UserProfile]:
        if user_id in self._profile_cache:
            return self._profile_cache[user_id]
        try:
            profile = UserProfile.from_snapshot(self.profiles.document(user_id).get())
        except Exception as ex:
            logger.error("Error fetching user profile %s: %s", user_id, ex)
            return None
        if profile:
            self._profile_cache[user_id] = profile
        return profile

    def get_users_by_ids(self, user_ids: Iterable[str]) -> Dict[str, UserProfile]:
        """Batch-fetch profiles, serving what it can from the cache."""
        wanted = [uid for uid in dict.fromkeys(user_ids) if uid]
        result = {uid: self._profile_cache[uid] for uid in wanted if uid in self._profile_cache}
        missing = [uid for uid in wanted if uid not in result]

        for start in range(0, len(missing), IN_QUERY_CHUNK):
            chunk = missing[start:start + IN_QUERY_CHUNK]
            refs = [self.profiles.document(uid) for uid in chunk]
            try:
                for snapshot in self.db.get_all(refs):
                    profile = UserProfile.from_snapshot(snapshot)
                    if profile:
                        self._profile_cache[profile.uid] = profile
                        result[profile.uid] = profile
            except Exception as ex:
                logger.error("Error batch-fetching user profiles: %s", ex)
        return result

    def update_username(self, user_id: str, new_username: str) -> None:
        self.profiles.document(user_id).update({Fields.USERNAME: new_username})
        self._profile_cache[user_id] = UserProfile(uid=user_id, username=new_username)
        logger.info("Updated username for %s", user_id)

    def delete_account(self, user_id: str) -> None:
        """
        Remove every trace of a user: household memberships, FCM tokens,
        user documents and finally the Auth account. Raises on failure.
        """
        households = (
            self.db.collection(Collections.HOUSEHOLDS)
            .where(filter=FieldFilter(Fields.MEMBERS, "array_contains", user_id))
            .stream()
        )
        batch = self.db.batch()
        for doc in households:
            batch.update(doc.reference, {
                Fields.MEMBERS: firestore.ArrayRemove([user_id]),
                f"{Fields.MEMBER_ROLES}.{user_id}": firestore.DELETE_FIELD,
            })

        tokens = (
            self.db.collection(Collections.FCM_TOKENS)
            .where(filter=FieldFilter(Fields.USER_ID, "==", user_id))
            .stream()
        )
        for doc in tokens:
            batch.delete(doc.reference)
        batch.commit()

        self.document(user_id).delete()
        self.profiles.document(user_id).delete()
        self._profile_cache.pop(user_id, None)

        # Must be last; once the account is gone the client can't retry.
        auth.delete_user(user_id)
        logger.info("Deleted user account %s", user_id)

    def is_admin(self, user_id: str) -> bool:
        try:
            return self.db.collection(Collections.ADMINS).document(user_id).get().exists
        except Exception as ex:
            logger.error("Error checking admin status for %s: %s", user_id, ex)
            return False

    @classmethod
    def clear_cache(cls) -> None:
        cls._profile_cache.clear()
