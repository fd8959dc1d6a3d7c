from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List, Optional, Set

class Settings(BaseSettings):
    # Database settings
    DATABASE_URL: str = "sqlite:///./classroom.db"

    # JWT settings
    SECRET_KEY: str = "classroom-management-secret-key"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7
    BCRYPT_ROUNDS: int = 10

    # File upload settings
    UPLOAD_DIR: str = "uploads"
    UPLOAD_URL_PREFIX: str = "/uploads"
    MAX_UPLOAD_SIZE: int = 10_485_760  # 10MB in bytes
    ALLOWED_EXTENSIONS: Set[str] = {
        '.jpeg', '.jpg', '.png', '.gif', '.pdf', '.doc', '.docx', '.txt', '.zip'
    }
    ALLOWED_CONTENT_TYPES: Set[str] = {
        'image/jpeg',
        'image/jpg',
        'image/pjpeg',
        'image/png',
        'image/gif',
        'application/pdf',
        'application/msword',
        'application/vnd.ms-word',
        'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
        'text/plain',
        'application/zip',
        'application/x-zip-compressed',
    }

    # Server settings
    HOST: str = "127.0.0.1"
    PORT: int = 8000

    # API settings
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "Classroom API"
    DEBUG: bool = False
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

    # Rate limiting, only active when Redis is configured
    REDIS_URL: Optional[str] = None
    RATE_LIMIT_PER_MINUTE: int = 100

    # Logging
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"
    LOG_MAX_BYTES: int = 10_485_760  # 10MB per file before rotation
    LOG_BACKUP_COUNT: int = 5

    # Window used by the urgent deadline reminder
    URGENT_WINDOW_HOURS: int = 12

    class Config:
        env_file = ".env"
        case_sensitive = True

@lru_cache()
def get_settings() -> Settings:
    """
    Get settings instance with caching
    Returns:
        Settings instance
    """
    return Settings()
