from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field
from functools import lru_cache

class Settings(BaseSettings):
    """Application configuration settings."""

    app_name: str = "Arrival Log"
    version: str = "0.1.0"
    debug: bool = False

    log_format: str = Field(default="json")  # Options: "json" or "console"
    log_level: str = Field(default="INFO")
    log_dir: Optional[str] = Field(default="logs")  # None disables the file handler

    # Database settings
    database_url: str = Field(default="sqlite:///./arrivals.db")
    db_echo: bool = False

    history_limit: int = Field(default=10, gt=0)

    # History view cache (redis)
    view_cache_enabled: bool = False
    view_cache_key: str = "arrivals:history"
    view_cache_ttl_seconds: int = 60
    view_invalidation_channel: str = "arrivals:invalidate"

    # Redis settings
    REDIS_HOST: str = Field(default="localhost")
    REDIS_PORT: int = Field(default=6379)
    class Config:
        env_file = ".env"
        case_sensitive = False
        env_file_encoding = "utf-8"
        extra = "allow"

@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
