import logging

import firebase_admin
from firebase_admin import credentials, firestore, storage

from .config import settings

logger = logging.getLogger(__name__)


def get_firebase_app() -> firebase_admin.App:
    """
    Return the default Firebase app, initializing it on first use.

    Uses the service account file from settings when configured, otherwise
    Application Default Credentials.
    """
    if firebase_admin._apps:
        return firebase_admin.get_app()

    if settings.FIREBASE_CREDENTIALS_PATH:
        cred = credentials.Certificate(settings.FIREBASE_CREDENTIALS_PATH)
    else:
        cred = credentials.ApplicationDefault()

    options = {}
    if settings.FIREBASE_PROJECT_ID:
        options["projectId"] = settings.FIREBASE_PROJECT_ID
    if settings.FIREBASE_STORAGE_BUCKET:
        options["storageBucket"] = settings.FIREBASE_STORAGE_BUCKET

    logger.info("Initializing Firebase app (project=%s)", settings.FIREBASE_PROJECT_ID)
    return firebase_admin.initialize_app(cred, options or None)


def get_db():
    """
    Firestore client dependency for FastAPI.
    The client is shared and thread-safe; nothing to close per request.
    """
    yield firestore.client(app=get_firebase_app())


def get_bucket():
    """Cloud Storage bucket dependency for product images."""
    return storage.bucket(app=get_firebase_app())
