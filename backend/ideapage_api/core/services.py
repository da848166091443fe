"""Service wiring - built once at startup from Settings"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Request
from openai import AsyncOpenAI

from ideapage_api.core.config import Settings, StoreConfig, resolve_store_config
from ideapage_api.core.content_store import ContentStore
from ideapage_api.core.kv import KVBackend, create_kv_backend
from ideapage_api.core.openai_client import OpenAIClient
from ideapage_api.core.pipeline import GenerationPipeline
from ideapage_api.core.streaming import ChatStreamClient
from ideapage_api.core.telemetry import LoggingObserver

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Long-lived collaborators shared by every request"""
    settings: Settings
    store_config: StoreConfig
    backend: KVBackend
    preview_store: ContentStore
    dynamic_store: ContentStore
    pipeline: GenerationPipeline
    openai_client: OpenAIClient

    async def close(self) -> None:
        try:
            await self.backend.close()
        except Exception as e:
            logger.warning(f"Error closing {self.backend.name} backend: {e}")
        try:
            await self.openai_client.close()
        except Exception as e:
            logger.warning(f"Error closing OpenAI client: {e}")


def get_services(request: Request) -> Services:
    """FastAPI dependency returning the services built at startup"""
    return request.app.state.services


def build_services(settings: Settings, backend: Optional[KVBackend] = None) -> Services:
    """Resolve the store backend and construct stores, clients and the pipeline"""
    store_config = resolve_store_config(settings)
    backend = backend or create_kv_backend(store_config)

    store_logger = logging.getLogger("ideapage_api.core.content_store")
    preview_store = ContentStore(
        backend,
        key_prefix=settings.preview_key_prefix,
        ttl_seconds=settings.content_ttl_seconds,
        strict=False,
        name="preview",
        observer=LoggingObserver(store_logger, component="STORE"),
    )
    dynamic_store = ContentStore(
        backend,
        key_prefix=settings.dynamic_key_prefix,
        ttl_seconds=settings.content_ttl_seconds,
        strict=True,
        name="dynamic",
        observer=LoggingObserver(store_logger, component="STORE"),
    )

    # One SDK client serves both the streaming generation and idea suggestion
    sdk = None
    if settings.openai_api_key:
        sdk = AsyncOpenAI(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            timeout=settings.upstream_timeout_seconds,
            max_retries=0,
        )
    stream_client = ChatStreamClient(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        temperature=settings.generation_temperature,
        keepalive_interval=settings.keepalive_interval_seconds,
        client=sdk,
    )
    openai_client = OpenAIClient(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        temperature=settings.idea_temperature,
        client=sdk,
    )

    logger.info(
        f"Services ready | store={store_config.backend} | persistent={store_config.persistent} | "
        f"model={settings.openai_model}"
    )
    return Services(
        settings=settings,
        store_config=store_config,
        backend=backend,
        preview_store=preview_store,
        dynamic_store=dynamic_store,
        pipeline=GenerationPipeline(stream_client, preview_store, dynamic_store),
        openai_client=openai_client,
    )
