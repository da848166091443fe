"""Configuration and settings"""

import logging
from dataclasses import dataclass
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

THIRTY_DAYS_SECONDS = 60 * 60 * 24 * 30


class Settings(BaseSettings):
    """Application settings from environment variables"""

    # OpenAI API
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4"
    generation_temperature: float = 0.7
    idea_temperature: float = 0.9
    keepalive_interval_seconds: float = 15.0
    upstream_timeout_seconds: float = 300.0

    # Vercel KV
    kv_url: str = ""
    kv_rest_api_url: str = ""
    kv_rest_api_token: str = ""

    # Upstash Redis
    upstash_redis_rest_url: str = ""
    upstash_redis_rest_token: str = ""

    # Self-hosted Redis
    redis_url: str = ""

    # Content store
    content_ttl_seconds: int = THIRTY_DAYS_SECONDS
    preview_key_prefix: str = "preview_landing_page:"
    dynamic_key_prefix: str = "dynamic_landing_page:"

    # Rendered pages
    page_fetch_attempts: int = 3
    page_retry_delay_seconds: float = 1.0

    # Server
    frontend_url: str = "http://localhost:3000"
    log_level: str = "INFO"

    # API Configuration
    api_title: str = "Idea to Landing Page API"
    api_version: str = "0.1.0"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")


@dataclass(frozen=True)
class StoreConfig:
    """Key-value backend selected once at startup"""
    backend: str  # "vercel-kv" | "upstash" | "redis" | "memory"
    url: Optional[str] = None
    token: Optional[str] = None

    @property
    def persistent(self) -> bool:
        return self.backend != "memory"


# Picks the key-value backend from whichever credential set is present.
# Order: Vercel KV, Upstash REST, plain Redis URL, then the in-memory placeholder.
def resolve_store_config(settings: Settings) -> StoreConfig:
    """Resolve the persistence backend from configured credentials"""
    if settings.kv_url and settings.kv_rest_api_url and settings.kv_rest_api_token:
        logger.info("[CONFIG] Using Vercel KV (REST)")
        return StoreConfig(backend="vercel-kv", url=settings.kv_rest_api_url, token=settings.kv_rest_api_token)

    if settings.upstash_redis_rest_url and settings.upstash_redis_rest_token:
        logger.info(f"[CONFIG] Using Upstash Redis at {settings.upstash_redis_rest_url}")
        return StoreConfig(
            backend="upstash",
            url=settings.upstash_redis_rest_url,
            token=settings.upstash_redis_rest_token,
        )

    if settings.redis_url:
        logger.info("[CONFIG] Using Redis URL connection")
        return StoreConfig(backend="redis", url=settings.redis_url)

    logger.warning(
        "[CONFIG] No KV or Redis credentials found - using non-persistent in-memory store. "
        "Generated pages will be lost on restart."
    )
    return StoreConfig(backend="memory")


# Global settings instance
settings = Settings()
