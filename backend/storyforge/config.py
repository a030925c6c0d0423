from __future__ import annotations
"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from urllib.parse import quote_plus

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """StoryForge application settings.

    Loaded from environment variables or .env file.
    """

    # --- Application ---
    APP_NAME: str = "StoryForge"
    DEBUG: bool = True
    USE_MOCK_API: bool = True
    AUTO_CREATE_TABLES: bool = True
    RECOVER_STUCK_ON_STARTUP: bool = True
    CORS_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"

    # --- Database (MySQL 8.0+) ---
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_USER: str = "root"
    DB_PASSWORD: str = ""
    DB_NAME: str = "storyforge"
    DB_URL: str = ""  # full SQLAlchemy async URL, overrides the DB_* parts

    @property
    def DATABASE_URL(self) -> str:
        """Async connection string; MySQL via asyncmy unless DB_URL is set."""
        if self.DB_URL:
            return self.DB_URL
        encoded_password = quote_plus(self.DB_PASSWORD)
        return (
            f"mysql+asyncmy://{self.DB_USER}:{encoded_password}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
            "?charset=utf8mb4"
        )

    @property
    def is_mysql(self) -> bool:
        return self.DATABASE_URL.startswith("mysql")

    # --- Media Volume (generated images and exports, served at /media) ---
    MEDIA_VOLUME: str = "media_volume"
    MEDIA_URL_PREFIX: str = "/media"

    # --- Image Provider ---
    IMAGE_PROVIDER: str = "bedrock"  # bedrock | flux
    IMAGE_GEN_MAX_RETRIES: int = 0
    IMAGE_GEN_TIMEOUT: float | None = None
    IMAGE_FALLBACK_TO_MOCK: bool = False

    # --- AWS Bedrock ---
    AWS_REGION: str = "us-east-1"
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    BEDROCK_MODEL_ID: str = "amazon.nova-canvas-v1:0"

    # --- Flux (OpenAI-compatible images endpoint) ---
    FLUX_API_BASE: str = "http://localhost:8080/api/v1"
    FLUX_API_KEY: str = ""
    FLUX_MODEL: str = "FLUX.1-schnell"
    FLUX_TIMEOUT: int = 120

    # --- Defaults for new records ---
    DEFAULT_VISUAL_STYLE: str = "anime cinematic realism"
    DEFAULT_BASE_MODEL: str = "SDXL"
    DEFAULT_SAMPLER: str = "DPM++"
    DEFAULT_NEGATIVE_PROMPT: str = "low quality, blurry, deformed"
    # Used for the first image when the request gave no negative prompt
    INITIAL_NEGATIVE_PROMPT: str = (
        "low quality, blurry, deformed, disfigured, bad anatomy, text, watermark"
    )
    MAX_VARIANTS: int = 4

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings singleton."""
    return Settings()
