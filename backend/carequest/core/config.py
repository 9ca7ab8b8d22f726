"""Application configuration managed via environment variables."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "CareQuest Backend"
    debug: bool = False
    log_level: str = "INFO"
    generation_provider: str = "gemini"
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-2.5-flash-image-preview"
    openai_api_key: str | None = None
    openai_image_model: str = "gpt-image-1"
    generation_max_attempts: int = 3
    generation_initial_backoff_ms: int = 1000
    user_locale: str = "en"
    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "carequest"


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
