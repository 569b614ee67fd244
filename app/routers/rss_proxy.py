"""RSS-to-JSON proxy used by the news aggregation service."""

import logging

import feedparser
import httpx
from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from app.services.http import http_get

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["rss"])

# Some publishers reject requests that don't look like a browser
HEADERS: dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
    ),
    "Accept": "application/rss+xml, application/xml, text/xml, */*",
}


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        content={"status": "error", "items": [], "message": message},
        status_code=status_code,
    )


def entry_to_item(entry) -> dict:
    """Flatten a feedparser entry into the proxy's item shape."""
    item = {
        "title": entry.get("title", ""),
        "link": entry.get("link", ""),
        "pubDate": entry.get("published") or entry.get("updated") or "",
    }
    source = entry.get("source")
    if source and source.get("title"):
        item["source"] = source["title"]
    if entry.get("author"):
        item["author"] = entry["author"]
    if entry.get("summary"):
        item["description"] = entry["summary"]
    return item


def parse_feed(content: bytes) -> dict:
    """Parse RSS/Atom bytes into the proxy envelope.

    Raises:
        ValueError: If the document is not a readable feed.
    """
    parsed = feedparser.parse(content)
    if parsed.bozo and not parsed.entries:
        raise ValueError(f"Malformed feed: {parsed.get('bozo_exception')}")

    feed = parsed.feed
    return {
        "status": "ok",
        "feed": {
            "title": feed.get("title", ""),
            "description": feed.get("description") or feed.get("subtitle", ""),
            "link": feed.get("link", ""),
        },
        "items": [entry_to_item(entry) for entry in parsed.entries],
    }


@router.get("/fetch-rss")
async def fetch_rss(
    url: str = Query(default=None, description="Feed URL to fetch"),
) -> JSONResponse:
    """Fetch a remote feed and return it as JSON."""
    if not url:
        return _error("Missing url parameter", 400)

    try:
        response = await http_get(url, headers=HEADERS)
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error("Error fetching feed %s: %s", url, e)
        return _error(f"Failed to fetch feed: {e}", 502)

    try:
        envelope = parse_feed(response.content)
    except ValueError as e:
        logger.error("Error parsing feed %s: %s", url, e)
        return _error(str(e), 502)

    return JSONResponse(content=envelope)
