"""Integration tests for the enhancement and style endpoints."""

import base64
from datetime import datetime, timezone

import httpx
import pytest

from sceneit_engine.blobs.store import LocalBlobStore
from sceneit_engine.enhance.client import EnhancementClient
from sceneit_engine.storage.base import TransformationFilter


ENHANCED_BYTES = b"\x89PNG enhanced"


def image_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"candidates": [{"content": {"parts": [
        {"inlineData": {"mimeType": "image/png", "data": base64.b64encode(ENHANCED_BYTES).decode()}},
    ]}}]})


def refusal_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"candidates": [{"content": {"parts": [
        {"text": "I cannot modify this photo."},
    ]}}]})


def install_client(handler, api_key="test-google-key"):
    from sceneit_engine.common.config import get_settings
    from sceneit_engine.deps import override

    settings = get_settings().model_copy(update={"google_api_key": api_key})
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    override(enhancement_client=EnhancementClient(settings, http_client=http_client))


class FailingBlobStore(LocalBlobStore):
    async def put(self, key, data, content_type):
        raise ConnectionError("blob store unreachable")


@pytest.fixture
def enhance_body(png_data_url):
    return {
        "image": png_data_url,
        "prompt": "add plants",
        "opt_in": True,
        "session_id": "sess-1",
        "style_key": "coastal-modern",
    }


class TestStyles:
    async def test_list_styles(self, client):
        resp = await client.get("/api/styles")
        assert resp.status_code == 200
        styles = resp.json()
        assert len(styles) == 7
        assert set(styles[0]) == {"key", "name", "subtitle"}


class TestEnhanceRouter:
    async def test_success_records_transformation(self, client, storage, enhance_body):
        install_client(image_handler)
        resp = await client.post("/api/enhance", json=enhance_body)
        assert resp.status_code == 200
        data = resp.json()
        assert data["enhanced"] == "data:image/png;base64," + base64.b64encode(ENHANCED_BYTES).decode()
        assert data["transformation_id"]

        items, total = await storage.query_transformations(TransformationFilter())
        assert total == 1
        assert items[0].id == data["transformation_id"]
        assert items[0].style_key == "coastal-modern"
        assert items[0].style_name == "Coastal Modern"
        assert items[0].prompt_used == "add plants"
        assert items[0].enhanced_size_bytes == len(ENHANCED_BYTES)

    async def test_server_events_logged(self, client, storage, enhance_body):
        install_client(image_handler)
        resp = await client.post("/api/enhance", json=enhance_body)
        tid = resp.json()["transformation_id"]

        events = await storage.list_events()
        by_type = {e.event_type: e for e in events}
        assert set(by_type) == {"enhance_start", "enhance_complete"}
        assert by_type["enhance_complete"].transformation_id == tid
        assert by_type["enhance_complete"].session_id == "sess-1"
        assert by_type["enhance_complete"].event_data["style_key"] == "coastal-modern"

    async def test_empty_style_key_recorded_as_missing(self, client, storage, enhance_body):
        install_client(image_handler)
        resp = await client.post("/api/enhance", json={**enhance_body, "style_key": "", "style_tag": ""})
        assert resp.status_code == 200

        items, _ = await storage.query_transformations(TransformationFilter())
        assert items[0].style_key is None
        stats = (await storage.aggregate_all(datetime.now(timezone.utc))).style_counts
        assert stats == {"default": 1}

    async def test_no_opt_in_skips_recording(self, client, storage, enhance_body):
        install_client(image_handler)
        resp = await client.post("/api/enhance", json={**enhance_body, "opt_in": False})
        assert resp.status_code == 200
        assert "transformation_id" not in resp.json()
        assert (await storage.query_transformations(TransformationFilter(opt_in_only=False)))[1] == 0

    async def test_blob_failure_still_returns_image(self, client, storage, enhance_body, tmp_path):
        from sceneit_engine.deps import override
        override(blob_store=FailingBlobStore(tmp_path, "http://b.test"))
        install_client(image_handler)

        resp = await client.post("/api/enhance", json=enhance_body)
        assert resp.status_code == 200
        assert resp.json()["enhanced"].startswith("data:image/png;base64,")
        assert "transformation_id" not in resp.json()
        assert (await storage.query_transformations(TransformationFilter()))[1] == 0

    async def test_no_image(self, client, storage):
        install_client(image_handler)
        resp = await client.post("/api/enhance", json={"prompt": "x"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "No image provided"
        assert await storage.list_events() == []

    async def test_invalid_image(self, client):
        install_client(image_handler)
        resp = await client.post("/api/enhance", json={"image": "not-a-data-url"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid image format"

    async def test_not_configured(self, client, png_data_url):
        resp = await client.post("/api/enhance", json={"image": png_data_url})
        assert resp.status_code == 500
        assert resp.json()["error"] == "API key not configured"

    async def test_refusal_logged_as_error(self, client, storage, enhance_body):
        install_client(refusal_handler)
        resp = await client.post("/api/enhance", json=enhance_body)
        assert resp.status_code == 500
        assert resp.json()["error"] == "I cannot modify this photo."

        types = sorted(e.event_type for e in await storage.list_events())
        assert types == ["enhance_error", "enhance_start"]
        assert (await storage.query_transformations(TransformationFilter()))[1] == 0

    async def test_upstream_failure(self, client, enhance_body):
        install_client(lambda r: httpx.Response(503, text="down"))
        resp = await client.post("/api/enhance", json=enhance_body)
        assert resp.status_code == 502
        assert resp.json()["error"] == "Enhancement service unavailable. Check API key and quota."


class TestHealth:
    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert data["service"] == "sceneit-engine"
        assert data["storage"] == "sql"
