"""
Configuration settings for the application
"""

from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Application
    SERVICE_NAME: str = "ChurrasApp API"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    HOST: str = "127.0.0.1"
    PORT: int = 3001

    # Database
    DATABASE_URL: str = "sqlite:///./churrasapp.db"
    DB_POOL_SIZE: int = 10
    DB_CONNECT_TIMEOUT: int = 5  # seconds
    DB_MAX_RETRIES: int = 5
    DB_RETRY_DELAY: float = 5.0  # seconds, doubled on every attempt

    # Shutdown
    SHUTDOWN_TIMEOUT: float = 10.0

    # CORS
    FRONTEND_URL: str = "http://localhost:3000"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"

    @property
    def allow_origins(self) -> List[str]:
        return [origin.strip() for origin in self.FRONTEND_URL.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


settings = Settings()
