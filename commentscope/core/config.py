"""
CommentScope Core Settings.

Comment stream analysis service: ingest a video's comments, classify each one,
index the corpus in a prefix trie and serve ranked, filtered search over it.

All values can be overridden with COMMENTSCOPE_* environment variables or a
local .env file. API keys additionally accept their conventional names.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8",
        env_prefix="COMMENTSCOPE_", case_sensitive=False,
        extra="ignore", populate_by_name=True,
    )

    # ── App ──────────────────────────────────────────────────────────────
    app_name: str = "CommentScope"
    app_version: str = "1.2.0"
    debug: bool = False
    log_level: str = "INFO"
    api_prefix: str = "/api"

    # ── YouTube Data API ─────────────────────────────────────────────────
    youtube_api_key: str = Field(
        "",
        validation_alias=AliasChoices(
            "COMMENTSCOPE_YOUTUBE_API_KEY", "YOUTUBE_API_KEY", "GOOGLE_API_KEY",
        ),
    )
    youtube_base_url: str = "https://www.googleapis.com/youtube/v3"
    youtube_page_size: int = 100
    youtube_page_delay: float = 0.1
    youtube_request_timeout: float = 15.0
    youtube_retry_total: int = 3
    youtube_retry_backoff: float = 0.5
    youtube_max_pages: Optional[int] = None  # None = walk until no nextPageToken

    # ── Enrichment (OpenRouter, OpenAI-compatible) ───────────────────────
    openrouter_api_key: str = Field(
        "",
        validation_alias=AliasChoices(
            "COMMENTSCOPE_OPENROUTER_API_KEY", "OPENROUTER_API_KEY",
        ),
    )
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    enrichment_enabled: bool = False
    enrichment_model: str = "gpt-3.5-turbo"
    enrichment_temperature: float = 0.3
    enrichment_max_tokens: int = 300
    enrichment_summary_max_tokens: int = 400
    enrichment_timeout: float = 30.0
    enrichment_call_delay: float = 0.2
    enrichment_batch_size: int = 5
    enrichment_batch_pause: float = 1.0
    enrichment_max_attempts: int = 3
    enrichment_backoff_base: float = 1.0
    enrichment_summary_sample_size: int = 20
    enrichment_referer: str = "https://commentscope.local"

    # ── Analysis / Search ────────────────────────────────────────────────
    top_words_limit: int = 20
    search_default_limit: int = 10
    search_max_limit: int = 100


@lru_cache()
def get_settings() -> Settings:
    return Settings()
