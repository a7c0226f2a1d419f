from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional
from urllib.parse import quote_plus

from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file="saveit/.env",
        env_file_encoding="utf-8",
        extra="allow",
    )
    # Application
    APP_NAME: str = "SaveIt Tracker API"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USERNAME: str = "postgres"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DATABASE: str = "saveit"

    # Explicit URL override (sqlite in tests, etc.)
    DATABASE_URL: Optional[str] = None
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    @property
    def database_url(self) -> str:
        """Construct database URL from individual components"""
        if self.DATABASE_URL:
            return self.DATABASE_URL

        # URL encode the password to handle special characters
        encoded_password = quote_plus(self.POSTGRES_PASSWORD)
        return f"postgresql+psycopg2://{self.POSTGRES_USERNAME}:{encoded_password}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DATABASE}"

    # Security (tokens are issued by the hosted auth provider)
    SECRET_KEY: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Streak day boundaries are computed in this timezone
    STREAK_TIMEZONE: str = "UTC"

    # Read limits
    TRANSACTION_HISTORY_LIMIT: int = 100
    RECENT_TRANSACTIONS_LIMIT: int = 10
    STREAK_HISTORY_DAYS: int = 30

    ALLOWED_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])


settings = Settings()
