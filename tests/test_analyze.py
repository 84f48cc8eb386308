"""Tests for the /analyze and /session endpoints.

Network access is replaced by patching the loader's ``fetch_url`` so the
whole sanitize → load → present pipeline runs without internet access.
"""

import asyncio
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.routers.analyze import read_session
from app.services.loader import load
from app.services.session import AnalyzerSession

client = TestClient(app)

_FETCH = "app.services.loader.fetch_url"

_MANIFEST = {
    "metadata": {
        "site": {
            "name": "EdTech Joker",
            "description": "A course site",
            "logo": "files/logo.png",
            "created": 1700000000,
            "updated": 1704067200,
        },
        "theme": {"name": "clean-two", "variables": {"hexCode": "#e65100", "icon": "icons:face"}},
    },
    "items": [
        {
            "title": "Welcome",
            "description": "Start here",
            "slug": "welcome",
            "location": "pages/welcome/index.html",
            "metadata": {"images": ["/files/welcome.png"], "updated": 1700000000, "readtime": 3},
        },
        {
            "title": "Videos",
            "description": "",
            "slug": "/videos",
            "metadata": {"videos": ["https://youtu.be/a", "https://youtu.be/b"]},
        },
    ],
}


@pytest.fixture(autouse=True)
def reset_state():
    """Clear the slowapi in-memory counter and start every test with a fresh session."""
    app.state.limiter._storage.reset()
    app.state.session = AnalyzerSession()
    yield


def _post(url: str = "example.com/sites/edtech"):
    return client.post("/analyze", json={"url": url})


class TestAnalyzeSuccess:
    def test_returns_overview_and_cards(self):
        with patch(_FETCH, new=AsyncMock(return_value=json.dumps(_MANIFEST))) as fetch:
            resp = _post()

        assert resp.status_code == 200
        fetch.assert_awaited_once_with("https://example.com/sites/edtech/site.json")
        data = resp.json()
        assert data["url"] == "https://example.com/sites/edtech/site.json"
        assert data["base_url"] == "https://example.com"
        assert data["total_pages"] == 2
        assert data["site"] == {
            "site_name": "EdTech Joker",
            "description": "A course site",
            "logo": "https://example.com/files/logo.png",
            "theme": "clean-two",
            "created": "11/14/2023",
            "last_updated": "1/1/2024",
            "hex_code": "#e65100",
            "icon": "icons:face",
        }

        welcome, videos = data["cards"]
        assert welcome["image_url"] == "https://example.com/files/welcome.png"
        assert welcome["page_url"] == "https://example.com/welcome"
        assert welcome["source_url"] == "https://example.com/pages/welcome/index.html"
        assert welcome["read_time_label"] == "3 min read"
        assert welcome["image_count_label"] == "Contains 1 images"

        assert videos["image_url"] == "https://example.com/files/logo.png"
        assert videos["source_url"] == "https://example.com/videos/index.html"
        assert videos["source_url_origin"] == "index_suffix"
        assert videos["video_count"] == 2
        assert videos["read_time_label"] is None
        assert videos["last_updated"] == "Unknown"

    def test_session_reflects_last_load(self):
        with patch(_FETCH, new=AsyncMock(return_value=json.dumps(_MANIFEST))):
            _post("http://example.com/sites/edtech/site.json")

        data = client.get("/session").json()
        assert data["loading"] is False
        assert data["raw_url"] == "http://example.com/sites/edtech/site.json"
        assert data["url"] == "https://example.com/sites/edtech/site.json"
        assert data["site"]["site_name"] == "EdTech Joker"
        assert data["total_pages"] == 2
        assert [c["title"] for c in data["cards"]] == ["Welcome", "Videos"]
        assert data["error"] is None


class TestAnalyzeInvalidUrl:
    @pytest.mark.parametrize("raw", ["", "   ", "exa mple.com", "ftp://example.com"])
    def test_invalid_input_never_hits_the_network(self, raw):
        fetch = AsyncMock(side_effect=AssertionError("fetch must not be called"))
        with patch(_FETCH, new=fetch):
            resp = _post(raw)

        assert resp.status_code == 400
        assert resp.json()["detail"]["error"] == "InvalidUrl"
        fetch.assert_not_called()

    def test_invalid_input_leaves_session_untouched(self):
        with patch(_FETCH, new=AsyncMock(return_value=json.dumps(_MANIFEST))):
            _post()
        _post("")

        data = client.get("/session").json()
        assert data["site"]["site_name"] == "EdTech Joker"
        assert data["total_pages"] == 2
        assert data["error"] is None


class TestAnalyzeLoadFailures:
    def test_missing_items_is_a_schema_error(self):
        with patch(_FETCH, new=AsyncMock(return_value=json.dumps({"metadata": {}}))):
            resp = _post()

        assert resp.status_code == 502
        assert resp.json()["detail"] == {
            "error": "SchemaError",
            "message": "Invalid site.json schema.",
        }

    def test_failure_clears_previous_cards(self):
        with patch(_FETCH, new=AsyncMock(return_value=json.dumps(_MANIFEST))):
            _post()
        with patch(_FETCH, new=AsyncMock(return_value=json.dumps({"items": []}))):
            _post()

        data = client.get("/session").json()
        assert data["cards"] == []
        assert data["site"] is None
        assert data["error"] == "Invalid site.json schema."
        assert data["loading"] is False

    def test_upstream_http_error(self):
        request = httpx.Request("GET", "https://example.com/site.json")
        error = httpx.HTTPStatusError(
            "Server Error", request=request, response=httpx.Response(500, request=request)
        )
        with patch(_FETCH, new=AsyncMock(side_effect=error)):
            resp = _post()

        assert resp.status_code == 502
        detail = resp.json()["detail"]
        assert detail["error"] == "FetchError"
        assert "HTTP 500" in detail["message"]

    def test_upstream_timeout(self):
        with patch(_FETCH, new=AsyncMock(side_effect=httpx.ReadTimeout("slow"))):
            resp = _post()

        assert resp.status_code == 504
        assert resp.json()["detail"]["error"] == "FetchError"

    def test_non_json_body(self):
        with patch(_FETCH, new=AsyncMock(return_value="<!DOCTYPE html><html></html>")):
            resp = _post()

        assert resp.status_code == 502
        assert resp.json()["detail"]["error"] == "FetchError"


class TestSessionDuringLoad:
    def test_cards_keep_the_base_url_of_the_load_that_produced_them(self):
        session = AnalyzerSession()
        request = SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace(session=session)))
        manifest = json.dumps({"metadata": {"site": {"name": "A"}}, "items": [{"slug": "page"}]})

        async def scenario():
            gate = asyncio.Event()

            async def fake_fetch(url):
                if "b.example" in url:
                    await gate.wait()
                return manifest

            with patch(_FETCH, new=AsyncMock(side_effect=fake_fetch)):
                await load(session, "https://a.example/site.json")
                second = asyncio.create_task(load(session, "https://b.example/site.json"))
                await asyncio.sleep(0)
                during = await read_session(request)
                gate.set()
                await second
            return during

        during = asyncio.run(scenario())

        assert during.loading is True
        assert during.site.site_name == "A"
        assert during.url == "https://a.example/site.json"
        assert during.base_url == "https://a.example"
        assert during.cards[0].page_url == "https://a.example/page"
        assert during.cards[0].source_url == "https://a.example/page/index.html"


class TestHealth:
    def test_root(self):
        assert client.get("/").json() == {"message": "Hello from Site Analyzer"}
