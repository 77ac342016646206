"""Application configuration using environment variables."""
import os
from functools import lru_cache
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Database (primary character store)
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./party_sheets.db")

    # Local JSON file used when the database is unreachable
    LOCAL_STORE_PATH: str = os.getenv("LOCAL_STORE_PATH", "./characters.json")

    # Server
    HOST: str = os.getenv("HOST", "127.0.0.1")
    PORT: int = int(os.getenv("PORT", "8000"))
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # CORS - Frontend URL
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:3000")

    # Uploads
    MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
