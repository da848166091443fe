"""Tests for the server-rendered landing pages"""
import json

import httpx
import pytest

from conftest import build_test_services

from ideapage_api.core.kv import MemoryBackend
from ideapage_api.core.normalizer import normalize_content
from ideapage_api.main import create_app
from ideapage_api.models.errors import StoreUnavailableError


class CountingBackend(MemoryBackend):

    def __init__(self):
        super().__init__()
        self.gets = 0

    async def get(self, key):
        self.gets += 1
        return await super().get(key)


class DownBackend(CountingBackend):

    async def get(self, key):
        self.gets += 1
        raise StoreUnavailableError("backend down")


def client_for(services):
    app = create_app(settings=services.settings, services=services)
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver")


class TestLandingPages:

    @pytest.mark.asyncio
    async def test_preview_renders_sections_in_order(self, client, services):
        content = normalize_content({
            "heroTitle": ["Brew", "Sip", "Relax"],
            "heroDescription": "Tea subscriptions <for> everyone",
            "features": [{"title": "Loose leaf", "content": "Whole leaves", "icon": "🍃"}],
        }, idea="Tea")
        record = await services.preview_store.create(content)

        response = await client.get(f"/preview/{record.id}")
        html = response.text

        assert response.status_code == 200
        assert "Brew" in html and "Relax" in html
        assert "Tea subscriptions &lt;for&gt; everyone" in html
        assert "Loose leaf" in html
        positions = [html.index(f'id="{section}"') for section in ("hero", "features", "pricing", "testimonials", "faq", "cta")]
        assert positions == sorted(positions)

    @pytest.mark.asyncio
    async def test_dynamic_page_renders(self, client):
        created = (await client.post("/api/dynamic-lp", json={"heroTitle": ["One", "Two", "Three"]})).json()
        response = await client.get(f"/dynamic-lp/{created['id']}")
        assert response.status_code == 200
        assert "Your product description here..." in response.text

    @pytest.mark.asyncio
    async def test_missing_record_retries_then_404(self):
        backend = CountingBackend()
        async with client_for(build_test_services(backend=backend)) as client:
            response = await client.get("/preview/missing")

        assert response.status_code == 404
        assert "Content not found" in response.text
        assert backend.gets == 3

    @pytest.mark.asyncio
    async def test_invalid_record_is_404_without_retry(self):
        backend = CountingBackend()
        await backend.set("dynamic_landing_page:old", json.dumps({"id": "old"}), ex=60)
        async with client_for(build_test_services(backend=backend)) as client:
            response = await client.get("/dynamic-lp/old")

        assert response.status_code == 404
        assert backend.gets == 1

    @pytest.mark.asyncio
    async def test_store_unavailable_is_error_page(self):
        backend = DownBackend()
        async with client_for(build_test_services(backend=backend, page_fetch_attempts=2)) as client:
            response = await client.get("/preview/any")

        assert response.status_code == 500
        assert "Something went wrong" in response.text
        assert backend.gets == 2


class TestGeneratorPage:

    @pytest.mark.asyncio
    async def test_form_served(self, client):
        response = await client.get("/generator")
        assert response.status_code == 200
        assert 'id="idea-form"' in response.text
        assert "/api/generator" in response.text
