import os
import logging
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

from legallens.core.errors import ConfigurationError

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # App settings
    APP_NAME: str = "LegalLens 360"
    API_VERSION: str = "1.0.0"

    # Gemini settings
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", os.getenv("API_KEY", ""))

    # LLM settings
    GEMINI_MODEL: str = "gemini-2.5-pro"
    CHAT_MODEL: str = "gemini-2.5-pro"
    THINKING_BUDGET: int = 2048
    CHAT_TEMPERATURE: float = 0.3

    # Upload settings
    MAX_UPLOAD_BYTES: int = 20 * 1024 * 1024  # inline data limit per request
    ACCEPTED_MIME_TYPES: List[str] = [
        "application/pdf",
        "image/png",
        "image/jpeg",
        "image/webp",
        "image/heic",
        "image/heif",
    ]

    # Frontend
    API_URL: str = "http://localhost:8000"

    # Logging
    LOG_LEVEL: str = "INFO"


def require_api_key(config: Settings) -> str:
    """Return the Gemini API key or fail before any request is attempted."""
    key = (config.GEMINI_API_KEY or "").strip()
    if not key:
        raise ConfigurationError(
            "GEMINI_API_KEY is not set. Add it to the environment or a .env file."
        )
    return key


# Create settings instance
settings = Settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
