"""Shared fixtures for the idea page service tests"""
import asyncio
import json
import sys
from pathlib import Path
from typing import Iterable, Optional

import httpx
import pytest
import pytest_asyncio

# Add backend to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "backend"))

from ideapage_api.core.config import Settings
from ideapage_api.core.kv import MemoryBackend
from ideapage_api.core.pipeline import GenerationPipeline
from ideapage_api.core.services import Services, build_services
from ideapage_api.core.streaming import StreamSignal
from ideapage_api.main import create_app


def make_settings(**overrides) -> Settings:
    """Settings isolated from the process environment and .env"""
    values = dict(
        openai_api_key="",
        kv_url="",
        kv_rest_api_url="",
        kv_rest_api_token="",
        upstash_redis_rest_url="",
        upstash_redis_rest_token="",
        redis_url="",
        page_retry_delay_seconds=0.0,
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


class FakeStreamClient:
    """Stands in for ChatStreamClient and replays fixed fragments"""

    def __init__(self, fragments: Iterable = ()):
        self.fragments = list(fragments)
        self.calls = []

    async def stream(self, messages, observer=None):
        self.calls.append(messages)
        for fragment in self.fragments:
            yield fragment


VALID_DOCUMENT = (
    '{"heroTitle": ["Cook", "Share", "Repeat"], '
    '"heroDescription": "Weekly meal kits from local farms", '
    '"features": [{"title": "Local", "content": "Sourced nearby", "icon": "🌱"}], '
    '"pricingTiers": [{"name": "Solo", "price": "$19", "description": "One person", "features": ["3 meals"]}], '
    '"faqs": [{"question": "Do you deliver?", "answer": "Yes"}]}'
)


def build_test_services(
    fragments: Iterable = (VALID_DOCUMENT, StreamSignal.DONE),
    backend: Optional[MemoryBackend] = None,
    **settings_overrides,
) -> Services:
    services = build_services(make_settings(**settings_overrides), backend=backend or MemoryBackend())
    services.pipeline = GenerationPipeline(
        FakeStreamClient(fragments),
        services.preview_store,
        services.dynamic_store,
    )
    return services


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def services(backend) -> Services:
    return build_test_services(backend=backend)


@pytest.fixture
def app(services):
    return create_app(settings=services.settings, services=services)


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


def parse_sse(body: str) -> list:
    """Split an SSE body into its frames (without the trailing blank line)"""
    return [frame for frame in body.split("\n\n") if frame]


def sse_chunk(content=None, finish_reason=None) -> str:
    """One chat.completion.chunk event as the upstream sends it"""
    delta = {} if content is None else {"content": content}
    chunk = {
        "id": "chatcmpl-test",
        "object": "chat.completion.chunk",
        "created": 0,
        "model": "gpt-test",
        "choices": [{"index": 0, "delta": delta, "finish_reason": finish_reason}],
    }
    return "data: " + json.dumps(chunk) + "\n\n"


FINISH = sse_chunk(finish_reason="stop") + "data: [DONE]\n\n"


class SlowStream(httpx.AsyncByteStream):
    """Response body that pauses before every chunk"""

    def __init__(self, chunks, delay):
        self.chunks = chunks
        self.delay = delay

    async def __aiter__(self):
        for chunk in self.chunks:
            await asyncio.sleep(self.delay)
            yield chunk.encode("utf-8")


def event_stream(body: str) -> httpx.Response:
    return httpx.Response(200, headers={"content-type": "text/event-stream"}, content=body.encode("utf-8"))


def slow_event_stream(chunks, delay) -> httpx.Response:
    return httpx.Response(200, headers={"content-type": "text/event-stream"}, stream=SlowStream(chunks, delay))
