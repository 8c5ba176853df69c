from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import AppSettings


class Settings(BaseSettings):
    """Application settings loaded from environment + defaults"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    APP_NAME: str = AppSettings.APP_NAME
    ENVIRONMENT: str = AppSettings.ENVIRONMENT
    LOG_LEVEL: str = AppSettings.LOG_LEVEL
    BRIDGE_HOST: str = AppSettings.BRIDGE_HOST
    BRIDGE_PORT: int = AppSettings.BRIDGE_PORT
    BRIDGE_URL: str = AppSettings.BRIDGE_URL
    API_VERSION: str = AppSettings.API_VERSION

    @property
    def bridge_config(self) -> dict:
        return {
            "base_url": self.BRIDGE_URL,
            "api_version": self.API_VERSION,
        }

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
