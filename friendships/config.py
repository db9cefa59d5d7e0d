import os
from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    """Application settings."""
    # Base settings
    DEBUG: bool = False

    # CORS settings
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",  # Frontend development server
        "http://localhost:8000",  # Backend server
    ]

    # Database settings
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./friendships.db")
    DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "5"))
    DB_MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", "10"))
    DB_POOL_TIMEOUT: int = int(os.getenv("DB_POOL_TIMEOUT", "30"))
    DB_POOL_RECYCLE: int = int(os.getenv("DB_POOL_RECYCLE", "1800"))

    # Friendship write behaviour
    # Re-validate and retry this many times when a concurrent write wins the version check
    FRIENDSHIP_WRITE_RETRIES: int = int(os.getenv("FRIENDSHIP_WRITE_RETRIES", "3"))

    # Header carrying the acting user's identity at the HTTP boundary
    ACTOR_HEADER: str = os.getenv("ACTOR_HEADER", "X-User-ID")

    class Config:
        env_file = ".env"
        case_sensitive = True

# Create settings instance
settings = Settings()
