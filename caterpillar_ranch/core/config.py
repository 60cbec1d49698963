"""Caterpillar Ranch Configuration"""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    # Application
    app_name: str = "Caterpillar Ranch"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # Mini-games
    game_duration_seconds: int = 25
    tick_interval_seconds: float = 1.0

    # Discounts
    discount_ttl_minutes: int = 30
    max_discount_badge_percent: int = 40

    # Cart
    max_line_quantity: int = Field(default=99, ge=1, le=99)

    # Persistence (None keeps the durable scope in memory)
    data_dir: Optional[str] = None

    # Browsing sessions
    session_max_age_hours: int = 24

    class Config:
        env_prefix = "RANCH_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    @property
    def discount_ttl_seconds(self) -> int:
        return self.discount_ttl_minutes * 60


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
