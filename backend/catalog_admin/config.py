"""
Application settings loaded from environment variables.
"""

from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with type safety."""

    # Database (reference catalog service)
    DATABASE_URL: str = "sqlite+aiosqlite:///./catalog.db"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    DEBUG: bool = False

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"

    # Admin client
    CATALOG_API_URL: str = "http://localhost:8000/api"
    REQUEST_TIMEOUT: float = 30.0

    # Spec scraper
    SCRAPER_TIMEOUT: float = 30.0

    # Logging
    LOG_LEVEL: str = "INFO"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins into a list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=True, extra="ignore"
    )


# Global settings instance
settings = Settings()
