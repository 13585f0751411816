"""Configuration via pydantic-settings. Reads from .env or environment."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # ===== SERVER =====
    port: int = 3000
    log_level: str = "INFO"

    # ===== STORIES =====
    num_stories: int = 30  # Number of top stories to display

    # ===== HACKER NEWS API =====
    hn_api_base_url: str = "https://hacker-news.firebaseio.com/v0"
    hn_timeout: float = 30.0  # Seconds per upstream request

    # ===== RENDERING =====
    template_dir: str = ""  # Default: ./templates


settings = Settings()
