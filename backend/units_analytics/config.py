"""
Configuration settings for the Units Analytics service.
"""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Upstream REST API serving the unit statistics endpoints
    analytics_api_base_url: str = "http://localhost:5000/api/v1/"
    analytics_api_token: str = ""
    request_timeout_seconds: float = 30.0

    # Quiet period before filter edits trigger a refetch
    refetch_debounce_seconds: float = 0.5

    # Dashboard frontend (CORS)
    frontend_url: str = ""

    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
