"""
Configuration settings for PitchIQ.
"""
from typing import List, Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Application
    APP_NAME: str = "PitchIQ"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]

    # Gemini
    GEMINI_API_KEY: Optional[str] = None
    GOOGLE_API_KEY: Optional[str] = None  # accepted as a fallback key name
    GEMINI_MODEL: str = "gemini-2.5-flash"

    # Generation
    CHAT_TEMPERATURE: float = 0.7
    DRILL_TEMPERATURE: float = 0.5
    GENERATED_DRILL_COUNT: int = 3

    # Video
    INLINE_VIDEO_LIMIT_MB: int = 20  # larger clips go through the File API
    FILE_PROCESSING_TIMEOUT_S: int = 60
    FILE_POLL_INTERVAL_S: float = 3.0

    # Session defaults
    DEFAULT_LANGUAGE: str = "zh"

    @property
    def api_key(self) -> Optional[str]:
        return self.GEMINI_API_KEY or self.GOOGLE_API_KEY


settings = Settings()
