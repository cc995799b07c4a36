"""
Runtime configuration.

Every environment variable the service reads is declared and validated
here; a `.env` file in the working directory is honored.
"""
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    """Service settings, one field per environment variable."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Storage (None: asyncpg falls back to the PG* variables)
    DATABASE_URL: Optional[str] = None
    DB_INIT_SCHEMA: bool = False

    # Insight generation
    GOOGLE_API_KEY: Optional[str] = None
    INSIGHTS_MODEL: str = "gemini-2.5-flash"
    INSIGHTS_MODEL_TIMEOUT: float = Field(default=120.0, gt=0)  # seconds, per model call
    PREMIUM_MAX_TOKENS: int = Field(default=10000, gt=0)
    BASIC_MAX_TOKENS: int = Field(default=4000, gt=0)
    INSIGHTS_PRODUCT_ID: str = "product_a"
    RECENT_ROUNDS_LIMIT: int = Field(default=5, ge=1)

    # Auth
    AUTH_JWT_SECRET: Optional[str] = None
    AUTH_JWT_ALGORITHM: str = "HS256"

    # Round completion -> insights trigger
    INSIGHTS_FUNCTION_URL: Optional[str] = None
    INSIGHTS_FUNCTION_KEY: Optional[str] = None
    INSIGHTS_TRIGGER_TIMEOUT: float = Field(default=120.0, gt=0)  # seconds, HTTP trigger only

    # HTTP / logging
    CORS_ORIGINS: str = "*"  # comma-separated
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


# Global settings instance
settings = Settings()
