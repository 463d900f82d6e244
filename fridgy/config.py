from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional

BASE_DIR = Path(__file__).resolve().parent.parent
ENV_FILE = BASE_DIR / ".env"


class Settings(BaseSettings):
    # Application
    PROJECT_NAME: str = "Fridgy"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Firebase
    # Leave the credentials path empty to use Application Default Credentials.
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_STORAGE_BUCKET: Optional[str] = None

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Products
    PRODUCT_CACHE_SIZE: int = 200
    IMAGE_MAX_DIMENSION: int = 1024
    IMAGE_JPEG_QUALITY: int = 85

    # Households
    INVITE_CODE_LENGTH: int = 6

    # Items
    EXPIRING_SOON_DAYS: int = 3

    # Notifications
    NOTIFICATIONS_LIMIT: int = 50

    # Shopping list presence
    PRESENCE_TIMEOUT_SECONDS: int = 30
    RECENT_VIEWER_TIMEOUT_MINUTES: int = 30
    STALE_PRESENCE_HOURS: int = 24

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE), case_sensitive=True, extra="ignore"
    )


settings = Settings()
