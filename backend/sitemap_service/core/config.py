"""
Application configuration settings
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Application Settings
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    ALLOWED_HOSTS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Site configuration (locales, static routes, robots rules)
    SITE_CONFIG_FILE: str = "site.json"

    # Content source: none, cms, database
    CONTENT_SOURCE: str = "none"
    CONTENT_SOURCE_TIMEOUT: float = 10.0  # seconds

    # Headless CMS
    CMS_API_URL: Optional[str] = None
    CMS_API_TOKEN: Optional[str] = None
    CMS_PATH_PREFIX: str = "blog"
    CMS_PAGE_SIZE: int = 100

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./content.db"

    # Revalidation
    REVALIDATION_DEBOUNCE_SECONDS: float = 2.0
    REVALIDATION_SECRET: Optional[str] = None
    WARM_ON_STARTUP: bool = True

    # Scheduled revalidation (Celery beat)
    REDIS_URL: str = "redis://localhost:6379"
    SCHEDULED_REVALIDATION_MINUTES: int = 60
    SERVICE_URL: str = "http://localhost:8000"

    # Monitoring and Logging
    LOG_LEVEL: str = "INFO"


# Create settings instance
settings = Settings()

# Validate required settings in production
if settings.ENVIRONMENT == "production":
    required_settings = [
        "REVALIDATION_SECRET",
    ]

    missing_settings = []
    for setting in required_settings:
        if not getattr(settings, setting):
            missing_settings.append(setting)

    if missing_settings:
        raise ValueError(f"Missing required production settings: {', '.join(missing_settings)}")

# Database URL for SQLAlchemy
DATABASE_URL = settings.DATABASE_URL
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)
