from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AnyHttpUrl, field_validator
import os

class Settings(BaseSettings):
    # Project Info
    PROJECT_NAME: str = "Event Analyzer"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "development"

    # Testing
    TESTING: bool = False

    # CORS
    BACKEND_CORS_ORIGINS: List[AnyHttpUrl] = []

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str] | str:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # Security Headers
    SECURITY_HEADERS: bool = True
    HSTS_MAX_AGE: int = 31536000  # 1 year

    # Request Validation
    MAX_CONTENT_LENGTH: int = 20 * 1024 * 1024  # 20MB, flyers arrive as base64

    # Database
    DATABASE_URL: str = os.environ.get("DATABASE_URL", "sqlite+aiosqlite:///./sqlite_db/app.db")
    SQL_ECHO: bool = False

    # Documentation
    SHOW_DOCS: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"

    # Event dates
    EVENTS_TIMEZONE: str = "America/Guatemala"
    RECURRENCE_MAX_MONTHS: int = 12

    # Vision model
    OPENAI_API_KEY: Optional[str] = None
    VISION_MODEL: str = "gpt-4o-mini"
    VISION_API_BASE: str = "https://api.openai.com/v1"
    VISION_TIMEOUT_SECONDS: float = 60.0
    VISION_MAX_TOKENS: int = 2048

    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env", env_file_encoding="utf-8", extra="ignore")

# Global instance
settings = Settings()
