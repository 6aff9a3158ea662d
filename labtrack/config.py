# labtrack/config.py
"""
Application configuration using Pydantic-Settings.
All settings can be overridden via environment variables or .env file.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # ── Database ──────────────────────────────────────────────────────────
    DATABASE_URL: str = "sqlite:///./database/database.db"

    # ── Network ───────────────────────────────────────────────────────────
    BACKEND_HOST: str = "0.0.0.0"
    BACKEND_PORT: int = 8080

    # ── Security ──────────────────────────────────────────────────────────
    API_KEY: Optional[str] = None   # Set in .env to enable auth on admin endpoints
    MIN_PASSWORD_LENGTH: int = 6

    # ── Bootstrap administrator ───────────────────────────────────────────
    BOOTSTRAP_ADMIN_ID: int = 999999999
    BOOTSTRAP_ADMIN_PASSWORD: str = "admin123"
    BOOTSTRAP_ADMIN_FIRST_NAME: str = "Admin"
    BOOTSTRAP_ADMIN_LAST_NAME: str = "Account"

    # ── Roster import ─────────────────────────────────────────────────────
    IMPORT_BATCH_SIZE: int = 500     # rows per transaction

    # ── Logging ───────────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"           # relative to the project root

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
