"""Application configuration: reads from environment variables and Docker Swarm secrets."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


def _read_secret(name: str) -> str | None:
    """Read a Docker Swarm secret from /run/secrets/."""
    secret_path = Path(f"/run/secrets/{name}")
    if secret_path.exists():
        return secret_path.read_text().strip()
    return None


class Settings(BaseSettings):
    """Application settings with env var and secret support."""

    storage_backend: str = "local"
    data_dir: str = "./data"
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_table: str = "prompt_shop_records"
    ai_api_url: str = "https://api.perplexity.ai/chat/completions"
    ai_api_key: str = ""
    ai_model: str = "sonar-pro"
    ai_timeout: float = 60.0
    history_limit: int = 50
    port: int = 8500
    log_level: str = "INFO"
    log_format: str = "auto"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Override with Docker Swarm secrets if available
        if secret := _read_secret("supabase_url"):
            self.supabase_url = secret
        if secret := _read_secret("supabase_key"):
            self.supabase_key = secret
        if secret := _read_secret("ai_api_key"):
            self.ai_api_key = secret


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
