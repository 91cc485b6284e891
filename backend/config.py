# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    DATABASE_URL: str = "sqlite:///./database_marketplace.db"

    # Local directory backing the object storage buckets
    STORAGE_ROOT: str = "static/storage"

    FRONTEND_URL: str = ""
    LOG_LEVEL: str = "INFO"

    # When False a profile update may not change its own role (buyer -> seller)
    ALLOW_ROLE_SELF_UPDATE: bool = False

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"

settings = Settings()
