"""
Configuration settings for the Network Service
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "Professional Network Service"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 5000

    # MongoDB
    MONGODB_URL: str = "mongodb://localhost:27017"
    MONGODB_DATABASE: str = "professional_network"

    # JWT Settings
    JWT_SECRET_KEY: str = "your-secret-key-change-this-in-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # Password Settings
    PASSWORD_MIN_LENGTH: int = 6
    BCRYPT_ROUNDS: int = 12
    RESET_TOKEN_EXPIRE_MINUTES: int = 10

    # Notifications
    NOTIFICATION_RETENTION_DAYS: int = 30

    # Pagination
    DEFAULT_PAGE_SIZE: int = 10
    NOTIFICATION_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100
    SUGGESTION_LIMIT: int = 10

    # CORS
    CORS_ORIGINS: List[str] = ["*"]
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: List[str] = ["*"]
    CORS_ALLOW_HEADERS: List[str] = ["*"]

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
