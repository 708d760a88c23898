"""
Chef Jul - Configuration and settings.

Settings are read from the environment (and .env) via pydantic-settings.
Use `get_settings()` for a cached instance or the lazy `settings` proxy.
"""

import logging
import sys
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # OpenAI
    openai_api_key: str = ""

    # Supabase (required when document_store == "supabase")
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_service_role_key: str = ""

    # "memory" keeps documents in-process (local dev only, lost on restart)
    document_store: Literal["supabase", "memory"] = "supabase"

    # Application
    chef_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # CHEF_LOG_PROMPTS=1 - log prompts to local files (dev only)
    chef_log_prompts: bool = False

    # Recipe generation
    recipe_batch_size: int = 5
    recipe_batch_delay_seconds: float = 0.5
    llm_timeout_seconds: float = 60.0

    # Web
    cors_origins: list[str] = [
        "http://localhost:5173",  # Vite dev server
        "http://127.0.0.1:5173",
    ]

    # Used by the CLI when no user is given
    dev_user_id: str = "dev-user"

    @property
    def is_development(self) -> bool:
        return self.chef_env == "development"

    @property
    def is_production(self) -> bool:
        return self.chef_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


class _SettingsProxy:
    """Lazy proxy for settings to avoid loading .env at import time."""

    _instance: Settings | None = None

    def __getattr__(self, name: str):
        if self._instance is None:
            self._instance = get_settings()
        return getattr(self._instance, name)


settings = _SettingsProxy()


def configure_logging(level: str | None = None) -> None:
    """Set up root logging for the server and CLI."""
    logging.basicConfig(
        level=level or settings.log_level,
        format="%(asctime)s [%(name)s] %(levelname)s %(message)s",
        datefmt="%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    # Quiet down noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
