"""
Configuration management for the VironaX analytics backend
"""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings"""

    # Application
    app_name: str = "VironaX Marketing Efficiency API"
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"
    log_dir: str = ""  # Empty = console logging only

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Database
    database_url: str = "sqlite:///./vironax.db"

    # Analytics
    default_range_days: int = 7  # Window used when a request gives no range
    currency: str = "USD"

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
