"""Application configuration using Pydantic settings."""
import os
from pydantic import Field
from pydantic_settings import BaseSettings
from typing import List, Literal, Optional


def _default_cache_enabled() -> bool:
    """In prod default to True when CACHE_ENABLED not set; in dev default False."""
    if os.getenv("CACHE_ENABLED") is not None:
        return os.getenv("CACHE_ENABLED", "").lower() in ("1", "true")
    return os.getenv("APP_ENV", "dev").lower() == "prod"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Environment: dev (CPU, relaxed) vs prod (GPU when available, strict)
    app_env: Literal["dev", "prod"] = Field(default="dev", description="APP_ENV: dev or prod")

    # API Keys
    gemini_api_key: Optional[str] = None  # Intent extraction and TTS; without it intent falls back to local rules

    # Database (voice history and preferences)
    database_url: str = "sqlite:///./data/voice_agent.db"

    # Redis
    redis_url: str = "redis://localhost:6379/0"

    # Cache (completions and TTS). Prod defaults True when CACHE_ENABLED not set.
    cache_enabled: bool = Field(default_factory=_default_cache_enabled, description="CACHE_ENABLED")

    # Application
    app_name: str = "Voice Ordering Assistant Backend"
    app_version: str = "1.0.0"
    debug: bool = False

    # LLM Settings (intent extraction)
    llm_model: str = "gemini-2.5-flash"
    llm_max_tokens: int = 512
    llm_temperature: float = 0.1  # Low: we want stable JSON, not creativity

    # TTS Settings (Gemini speech generation)
    tts_model: str = "gemini-2.5-flash-preview-tts"

    # STT Settings (local faster-whisper)
    stt_model_size: str = "small"  # Env: STT_MODEL_SIZE (tiny/base/small/medium/large-v3)
    stt_primary_language: str = "en-US"
    stt_alternative_languages: List[str] = ["ur-PK", "hi-IN"]
    # Per-language fallback order when the multi-language pass fails
    stt_candidate_languages: List[str] = ["en-US", "ur-PK", "hi-IN"]
    # Restaurant/food domain phrases that bias recognition
    stt_phrase_hints: List[str] = ["Ibrahim Foods", "burger", "order", "restaurant", "food delivery"]
    stt_phrase_boost: float = 20.0

    # Upload limits
    max_audio_size_mb: int = 10

    # Cache TTLs
    llm_cache_ttl: int = 86400  # 24 hours
    tts_cache_ttl: int = 604800  # 7 days

    # Timeouts (seconds); sync calls are run in executor and wrapped with asyncio.wait_for
    llm_timeout_seconds: int = 30
    stt_timeout_seconds: int = 90  # Covers Phase A plus up to three per-language retries
    tts_timeout_seconds: int = 45

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
        "extra": "ignore"  # Ignore extra environment variables
    }


settings = Settings()
