"""Application settings with environment variable support."""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from pathlib import Path


# Compute base_dir at module level
_BASE_DIR = Path(__file__).parent.parent.parent.resolve()


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="RM_",  # RM_DATABASE_URL, RM_OPENAI_API_KEY, etc.
    )

    # Paths - computed from base_dir
    base_dir: Path = _BASE_DIR
    data_dir: Path = _BASE_DIR / "data"
    sources_file: Path = _BASE_DIR / "config" / "sources.json"

    # Database
    database_url: str = f"sqlite:///{_BASE_DIR / 'data' / 'readmaster.db'}"

    # Ingestion
    fetch_timeout_seconds: float = 10.0
    user_agent: str = "ReadMasterBot/1.0"
    summary_max_length: int = 200
    youtube_feed_base_url: str = "https://www.youtube.com/feeds/videos.xml"

    # Sync
    sync_max_concurrency: int = 5
    default_sync_interval_seconds: int = 3600
    default_user_id: int = 1
    worker_poll_interval_seconds: int = 300
    slack_webhook_url: Optional[str] = None

    # Analysis (LLM)
    llm_provider: str = "openai"  # "openai" or "anthropic"
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    llm_model: str = "gpt-4o-mini"
    llm_max_tokens: int = 2000
    llm_temperature: float = 0.7
    llm_max_retries: int = 3


settings = Settings()
