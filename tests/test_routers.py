"""API tests for the HTTP routes, served in-process over ASGI."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest
import pytest_asyncio

from app.main import app
from app.routers.rss_proxy import parse_feed
from app.services import build_services

DATA = "https://data.test"

RSS = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Georgia Politics</title>
    <link>https://news.example</link>
    <description>Statewide coverage</description>
    <item>
      <title>Early voting opens - Example News</title>
      <link>https://news.example/early-voting</link>
      <pubDate>Tue, 13 Oct 2026 12:00:00 GMT</pubDate>
      <author>desk@news.example (Politics Desk)</author>
      <description>&lt;p&gt;Lines were long&lt;/p&gt;</description>
    </item>
  </channel>
</rss>
"""


@pytest.fixture
def dataset(upstream):
    upstream.add(f"{DATA}/candidates/index.json", json=[
        {"id": "jane-doe", "filename": "jane-doe.json"},
        {"id": "sam-smith", "filename": "sam-smith.json"},
    ])
    upstream.add(f"{DATA}/candidates/jane-doe.json", json={
        "id": "jane-doe", "name": "Jane Doe", "party": "Democrat", "race": "ga_governor",
    })
    upstream.add(f"{DATA}/candidates/sam-smith.json", json={
        "id": "sam-smith", "name": "Sam Smith", "party": "Republican", "race": "ga_governor",
    })
    upstream.add(f"{DATA}/races/index.json", json=[
        {"id": "governor", "filename": "governor.json"},
    ])
    upstream.add(f"{DATA}/races/governor.json", json={
        "id": "governor", "title": "Governor", "raceFilter": "ga_governor",
        "raceTags": ["statewide"],
    })
    upstream.add(f"{DATA}/races/raceCategories.json", json={"categories": {
        "statewide": {"id": "statewide", "title": "Statewide", "raceTags": ["statewide"]},
    }})
    upstream.add(f"{DATA}/metadata/last-updated.json", json={
        "lastUpdated": "2026-10-01T12:00:00Z", "version": "1.4.0",
    })
    upstream.add(f"{DATA}/financials/state-financials.json", json={
        "lastUpdated": "2026-09-30",
        "candidates": {
            "jane_doe": {"contributions": "$2,500", "loans": "$0", "expenditures": "$500"},
        },
    })
    upstream.add(f"{DATA}/news/rss-feeds.json", json={"feeds": [
        {"id": "ajc", "name": "AJC", "url": "https://ajc.example/rss", "raceTags": ["all"]},
    ]})
    upstream.add(f"{DATA}/news/featured-articles.json", json={"articles": [
        {"id": "f1", "title": "Debate recap", "link": "https://x/1", "category": "ga_governor"},
    ]})
    upstream.add("https://proxy.test/fetch-rss", json={"status": "ok", "items": [
        {"title": "Polls open - AJC", "link": "https://ajc.example/1",
         "pubDate": "Tue, 13 Oct 2026 12:00:00 GMT"},
    ]})
    return upstream


@pytest_asyncio.fixture
async def client(cache, settings):
    """HTTP client against the app with services wired to the test cache."""
    app.state.services = build_services(cache, settings)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
    del app.state.services


class TestRaceRoutes:
    """Tests for race, category and metadata routes."""

    @pytest.mark.asyncio
    async def test_list_races(self, client, dataset):
        response = await client.get("/races")

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 1
        assert body["races"]["governor"]["raceFilter"] == "ga_governor"

    @pytest.mark.asyncio
    async def test_unknown_race_is_404(self, client, dataset):
        response = await client.get("/races/mayor")

        assert response.status_code == 404
        assert "mayor" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_race_candidates(self, client, dataset):
        response = await client.get("/races/governor/candidates")

        body = response.json()
        assert body["raceFilter"] == "ga_governor"
        assert [c["id"] for c in body["candidates"]] == ["jane-doe", "sam-smith"]

    @pytest.mark.asyncio
    async def test_race_financials(self, client, dataset):
        response = await client.get("/races/governor/financials")

        body = response.json()
        assert body["raceName"] == "Governor"
        assert body["isUnopposed"] is True
        assert [c["candidateId"] for c in body["candidates"]] == ["jane-doe"]
        assert body["candidates"][0]["display"] == {
            "raised": "$3K", "spent": "$500", "cashOnHand": "$2K",
        }

    @pytest.mark.asyncio
    async def test_categories_and_metadata(self, client, dataset):
        categories = (await client.get("/categories")).json()
        metadata = (await client.get("/metadata/last-updated")).json()

        assert categories["categories"]["statewide"]["raceTags"] == ["statewide"]
        assert metadata["version"] == "1.4.0"


class TestCandidateRoutes:
    """Tests for candidate routes."""

    @pytest.mark.asyncio
    async def test_filter_by_race(self, client, dataset):
        body = (await client.get("/candidates", params={"race": "ga_senate_sd18"})).json()

        assert body["count"] == 0

    @pytest.mark.asyncio
    async def test_candidate_financials(self, client, dataset):
        body = (await client.get("/candidates/jane-doe/financials")).json()

        assert body["status"] == "available"
        assert body["financials"]["source"] == "transparencyUSA"
        assert body["summary"] == "Raised $3K | Spent $500 | Cash $2K"

    @pytest.mark.asyncio
    async def test_candidate_without_financials(self, client, dataset):
        body = (await client.get("/candidates/sam-smith/financials")).json()

        assert body["status"] == "not_yet_available"
        assert body["financials"] is None
        assert body["summary"] == "No financial data available"

    @pytest.mark.asyncio
    async def test_upstream_failure_is_502(self, client, upstream):
        upstream.add(f"{DATA}/candidates/index.json", status_code=500, json={})

        response = await client.get("/candidates")

        assert response.status_code == 502
        assert response.json()["upstreamStatus"] == 500


class TestNewsRoutes:
    """Tests for news and cache maintenance routes."""

    @pytest.mark.asyncio
    async def test_news(self, client, dataset):
        body = (await client.get("/news", params={"race_filter": "ga_governor"})).json()

        assert [a["id"] for a in body["featured"]] == ["f1"]
        assert body["live"][0]["title"] == "Polls open"

    @pytest.mark.asyncio
    async def test_clear_cache(self, client, dataset):
        await client.get("/races")

        body = (await client.post("/cache/clear")).json()
        await client.get("/races")

        assert body["cleared"] == {"dataset": True, "news": True, "finance": True}
        assert dataset.count(f"{DATA}/races/index.json") == 2


class TestRSSProxy:
    """Tests for the RSS-to-JSON proxy."""

    def test_parse_feed(self):
        envelope = parse_feed(RSS)

        assert envelope["status"] == "ok"
        assert envelope["feed"]["title"] == "Georgia Politics"
        item = envelope["items"][0]
        assert item["title"] == "Early voting opens - Example News"
        assert item["link"] == "https://news.example/early-voting"
        assert item["pubDate"] == "Tue, 13 Oct 2026 12:00:00 GMT"
        assert item["description"] == "<p>Lines were long</p>"

    def test_parse_garbage_raises(self):
        with pytest.raises(ValueError):
            parse_feed(b"this is not xml at all <<<")

    @pytest.mark.asyncio
    async def test_missing_url_is_400(self, client):
        response = await client.get("/api/fetch-rss")

        assert response.status_code == 400
        assert response.json()["status"] == "error"

    @pytest.mark.asyncio
    async def test_fetch_rss(self, client):
        feed_url = "https://news.example/rss"
        fake = AsyncMock(return_value=httpx.Response(
            200, content=RSS, request=httpx.Request("GET", feed_url)
        ))

        with patch("app.routers.rss_proxy.http_get", fake):
            response = await client.get("/api/fetch-rss", params={"url": feed_url})

        assert response.status_code == 200
        assert response.json()["items"][0]["link"] == "https://news.example/early-voting"
        assert fake.await_args.args[0] == feed_url
        assert "User-Agent" in fake.await_args.kwargs["headers"]

    @pytest.mark.asyncio
    async def test_upstream_error_is_502(self, client):
        feed_url = "https://news.example/rss"
        fake = AsyncMock(return_value=httpx.Response(
            404, request=httpx.Request("GET", feed_url)
        ))

        with patch("app.routers.rss_proxy.http_get", fake):
            response = await client.get("/api/fetch-rss", params={"url": feed_url})

        assert response.status_code == 502
        assert response.json()["items"] == []
