"""Settings (pydantic-settings, loaded from env vars)."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # --- Perplexity ---
    PERPLEXITY_API_KEY: str = ""
    PERPLEXITY_MODEL: str = "sonar"

    # --- Gemini ---
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-3-flash-preview"

    # --- Transport ---
    HTTP_TIMEOUT_SECONDS: float = 60.0

    # --- Logging ---
    LOG_LEVEL: str = "WARNING"

    model_config = {
        "env_prefix": "",
        "case_sensitive": True,
        "env_file": ".env",
        "extra": "ignore",
        "frozen": True,
    }
