"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Constructed once at process start and passed explicitly into the
    orchestrator, tool adapters and video pipeline.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # LLM provider
    openai_api_key: SecretStr | None = None
    openai_model: str = "gpt-4o"
    openai_fast_model: str = "gpt-4o-mini"

    # External APIs
    google_places_api_key: SecretStr | None = None
    google_search_api_key: SecretStr | None = None
    google_search_engine_id: str = ""
    youtube_api_key: SecretStr | None = None
    ticketmaster_api_key: SecretStr | None = None
    serpapi_api_key: SecretStr | None = None
    reddit_client_id: str = ""
    reddit_client_secret: SecretStr | None = None
    reddit_user_agent: str = "tripply-travel-assistant/1.0"

    # UI
    ui_origin: str = "http://localhost:3000"

    # Conversation
    history_window: int = 10
    max_place_cards: int = 6

    # Video enrichment
    video_result_limit: int = 4
    video_candidates_per_query: int = 10
    smart_video_max_topics: int = 5
    natural_response_word_budget: int = 250
    transcript_char_limit: int = 8000

    # Timeouts
    tool_timeout_ms: int = 8000
    http_timeout_seconds: float = 10.0
    turn_timeout_seconds: float = 120.0

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def secret_value(secret: SecretStr | None) -> str:
    """Unwrap an optional secret, returning "" when unset."""
    return secret.get_secret_value() if secret else ""
