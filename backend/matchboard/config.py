"""
backend/matchboard/config.py

Purpose:
    Central settings loading for the match service, logo lookup and the
    generative-text shortcut.

Dependencies:
    - pydantic-settings
    - pathlib
"""

import os
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

# Prefer backend/.env, fallback to project-root .env.
_BACKEND_DIR = Path(__file__).resolve().parent.parent
_BACKEND_ENV_FILE = _BACKEND_DIR / ".env"
_ROOT_ENV_FILE = _BACKEND_DIR.parent / ".env"


class Settings(BaseSettings):
    # Match data
    MATCHES_FILE: str = str(_BACKEND_DIR.parent / "matches.json")
    # Vercel-style deployments cannot write to disk
    READ_ONLY_FS: bool = bool(os.environ.get("VERCEL"))
    MATCH_WINDOW_DAYS: int = 7

    # Logo assets: one folder per league, one image per team
    LOGO_ROOT: str = str(_BACKEND_DIR.parent / "logo")
    LOGO_URL_PREFIX: str = "logo"
    LOGO_MAX_DISTANCE: int = 3
    PUBLIC_DIR: str = str(_BACKEND_DIR.parent / "public")

    # Optional MongoDB mirror of the match list (empty URI = file only)
    MONGO_URI: str = ""
    MONGO_DB: str = "matchboard"

    # Shared secret for /api; empty disables the check
    API_SECRET: str = Field(
        default="",
        validation_alias=AliasChoices("API_SECRET", "SECRET_MY", "SECRET-MY"),
    )

    # Gemini (natural-language "add match")
    GOOGLE_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GEMINI_API_VERSION: str = "v1"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com"
    GEMINI_TIMEOUT_SECONDS: float = 30.0
    GEMINI_MAX_RETRIES: int = 2

    LOG_LEVEL: str = "INFO"

    model_config = {
        "env_file": (str(_BACKEND_ENV_FILE), str(_ROOT_ENV_FILE)),
        "extra": "ignore",
        "populate_by_name": True,
    }


settings = Settings()
