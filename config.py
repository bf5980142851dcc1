from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./coaching.db"

    # Bearer tokens issued by the auth provider
    jwt_secret_key: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24

    log_level: str = "INFO"
    cors_origins: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Pagination and planner limits
    library_page_size: int = 20
    routine_page_size: int = 20
    max_days_per_phase: int = 7
    expiring_default_days: int = 7


@lru_cache
def get_settings() -> Settings:
    return Settings()
