from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):

    # Application
    APP_NAME: str = "shiphook"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    # Database (MongoDB)
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DB_NAME: str = "shiphook"

    # Redis (optional, enables per-watch locking)
    REDIS_URL: Optional[str] = None
    WATCH_LOCK_TIMEOUT: int = 30

    # GitHub App
    GITHUB_API_URL: str = "https://api.github.com"
    GITHUB_APP_ID: Optional[str] = None
    GITHUB_APP_PRIVATE_KEY: Optional[str] = None
    GITHUB_APP_PRIVATE_KEY_FILE: Optional[str] = None
    GITHUB_WEBHOOK_SECRET: Optional[str] = None
    GITHUB_HTTP_TIMEOUT: float = 15.0

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
