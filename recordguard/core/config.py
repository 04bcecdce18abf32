# recordguard/core/config.py
from typing import Optional
from pathlib import Path
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Locate the .env file relative to the project root
BASE_DIR = Path(__file__).resolve().parent.parent.parent
ENV_FILE = BASE_DIR / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=str(ENV_FILE), extra="ignore")

    # Application
    PROJECT_NAME: str = "RecordGuard"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Encryption
    # Master key as base64, hex or raw text. Required in production.
    ENCRYPTION_KEY: Optional[str] = None

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./recordguard.db"
    DB_ECHO: bool = False

    # Migration
    MIGRATION_VERIFY: bool = True
    MIGRATION_MAX_CONCURRENCY: int = 4
    MIGRATION_PROGRESS_EVERY: int = 10

    @field_validator("ENVIRONMENT", "LOG_LEVEL", mode="before")
    @classmethod
    def normalize_case(cls, v, info):
        if isinstance(v, str):
            v = v.strip()
            return v.upper() if info.field_name == "LOG_LEVEL" else v.lower()
        return v

    @field_validator("MIGRATION_MAX_CONCURRENCY")
    @classmethod
    def at_least_one(cls, v: int) -> int:
        if v < 1:
            raise ValueError("MIGRATION_MAX_CONCURRENCY must be >= 1")
        return v

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


settings = Settings()
