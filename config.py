# backend/config.py
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings read from the environment (and .env)"""

    # No DATABASE_URL -> in-memory storage
    database_url: Optional[str] = None

    # Security
    secret_key: str = Field(default="change-me-in-production")
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 1440  # 24 hours

    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]
    seed_data: bool = True

    @field_validator("database_url")
    @classmethod
    def empty_url_is_unset(cls, v):
        return v or None

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, v):
        return v.upper()

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
