"""RSS news aggregation over the RSS-to-JSON proxy.

Feeds are fetched concurrently and merged into one newest-first list.
Failures are contained per feed: a feed that cannot be refreshed serves
its last cached articles regardless of age, or nothing at all.
"""

import asyncio
import logging
import re
from datetime import datetime, timezone
from typing import Optional, Union

from bs4 import BeautifulSoup
from dateutil.parser import parse as parse_date

from app.config import Settings, get_settings
from app.exceptions import ElectionDataError, ParseError, RSSFetchError
from app.models import FeaturedArticle, FeedDescriptor, NewsArticle
from app.services.cache_config import (
    NO_EXPIRY,
    CacheKeys,
    CachedResponse,
    CacheStorage,
    CacheTTL,
    get_ttl_timedelta,
)
from app.services.cache_manager import CacheManager
from app.services.data_service import DataService
from app.services.http import get_json

logger = logging.getLogger(__name__)

# Google News appends " - Source Name" to every title
_SOURCE_SUFFIX = re.compile(r"\s-\s[^-]+$")

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)

FEATURED_LIMIT = 4
LIVE_LIMIT = 10


def clean_title(title: str) -> str:
    return _SOURCE_SUFFIX.sub("", title or "").strip()


def strip_html(html: str) -> str:
    if not html:
        return ""
    return BeautifulSoup(html, "html.parser").get_text()


def published_at(article: NewsArticle) -> datetime:
    """Publication time for sorting; unparseable dates sort last."""
    try:
        dt = parse_date(article.pub_date)
    except (ValueError, OverflowError, TypeError):
        return _OLDEST
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def dedupe_by_title(articles: list[NewsArticle]) -> list[NewsArticle]:
    """Drop articles whose title was already seen; first one wins."""
    seen: set[str] = set()
    unique = []
    for article in articles:
        if article.title in seen:
            continue
        seen.add(article.title)
        unique.append(article)
    return unique


def feed_matches_race(feed: FeedDescriptor, race_filter: Union[str, list[str]]) -> bool:
    """Whether a feed belongs on a race page (string) or category page (tags).

    Feeds tagged ``all`` match everything.
    """
    if "all" in feed.race_tags:
        return True
    if isinstance(race_filter, str):
        return feed.race_filter == race_filter
    return any(tag in race_filter for tag in feed.race_tags)


def filter_featured_articles(
    articles: list[FeaturedArticle], race_filter: Union[str, list[str]] = "all"
) -> list[FeaturedArticle]:
    """Featured articles for a race filter, tag list, or ``all``."""
    if race_filter == "all":
        return list(articles)
    if isinstance(race_filter, str):
        race_filter = [race_filter]
    return [a for a in articles if a.category == "all" or a.category in race_filter]


class RSSService:
    """Fetches, cleans and merges configured RSS feeds."""

    def __init__(self, cache: CacheManager, settings: Optional[Settings] = None):
        self.cache = cache
        self.settings = settings or get_settings()
        self.duration = get_ttl_timedelta(CacheTTL.RSS)

    @staticmethod
    def _cache_key(feed: FeedDescriptor) -> str:
        return f"{CacheKeys.RSS_PREFIX}{feed.id}"

    async def _read_cached(self, feed: FeedDescriptor, duration) -> Optional[list[NewsArticle]]:
        cached = await self.cache.get(
            self._cache_key(feed), duration=duration, storage=CacheStorage.DURABLE
        )
        if cached is None:
            return None
        try:
            return [NewsArticle.from_dict(item) for item in cached]
        except (TypeError, AttributeError) as e:
            logger.error("Cache parse error for %s: %s", feed.id, e)
            return None

    async def _fetch_from_proxy(self, feed: FeedDescriptor) -> list[NewsArticle]:
        logger.info("Fetching RSS for %s via proxy", feed.name)
        data = await get_json(
            self.settings.rss_proxy_url,
            params={"url": feed.url},
            client=self.cache.http_client,
        )

        if not isinstance(data, dict) or data.get("status") != "ok":
            message = data.get("message") if isinstance(data, dict) else None
            raise RSSFetchError(f"RSS fetch error: {message or 'Unknown error'}")

        try:
            return [
                NewsArticle(
                    title=clean_title(item.get("title", "")),
                    link=item.get("link", ""),
                    pub_date=item.get("pubDate", ""),
                    source=item.get("source") or item.get("author") or feed.name,
                    description=strip_html(item.get("description") or ""),
                )
                for item in data.get("items") or []
                if isinstance(item, dict)
            ]
        except (TypeError, AttributeError, ValueError) as e:
            raise ParseError(f"Malformed RSS items for {feed.id}: {e!r}") from e

    async def fetch_feed_response(
        self, feed: FeedDescriptor
    ) -> CachedResponse[list[NewsArticle]]:
        """Articles for one feed, flagged stale when served after a failure."""
        cached = await self._read_cached(feed, self.duration)
        if cached is not None:
            logger.debug("RSS cache hit for %s", feed.name)
            return CachedResponse.fresh(cached)

        try:
            articles = await self._fetch_from_proxy(feed)
        except ElectionDataError as e:
            logger.error("Error fetching RSS for %s: %s", feed.name, e)
            stale = await self._read_cached(feed, NO_EXPIRY)
            if stale is not None:
                logger.warning("Using stale cache for %s", feed.name)
                return CachedResponse.stale(stale, data_type="news feed")
            return CachedResponse.fresh([])

        if articles:
            await self.cache.set(
                self._cache_key(feed),
                [a.to_dict() for a in articles],
                duration=self.duration,
                storage=CacheStorage.DURABLE,
            )
        return CachedResponse.fresh(articles)

    async def fetch_feed(self, feed: FeedDescriptor) -> list[NewsArticle]:
        """Articles for one feed; never raises."""
        response = await self.fetch_feed_response(feed)
        return response.data

    async def fetch_multiple_feeds(
        self, feeds: list[FeedDescriptor], limit: int = LIVE_LIMIT
    ) -> list[NewsArticle]:
        """Merge feeds newest first, deduplicated by title.

        A limit of 0 returns everything.
        """
        results = await asyncio.gather(
            *[self.fetch_feed(feed) for feed in feeds], return_exceptions=True
        )

        articles: list[NewsArticle] = []
        for feed, result in zip(feeds, results):
            if isinstance(result, Exception):
                logger.error("Skipping feed %s: %s", feed.id, result)
                continue
            articles.extend(result)

        articles.sort(key=published_at, reverse=True)
        unique = dedupe_by_title(articles)
        return unique[:limit] if limit else unique

    async def fetch_by_race_filter(
        self,
        feeds: list[FeedDescriptor],
        race_filter: Union[str, list[str]],
        limit: int = LIVE_LIMIT,
    ) -> list[NewsArticle]:
        matching = [f for f in feeds if feed_matches_race(f, race_filter)]
        return await self.fetch_multiple_feeds(matching, limit)

    async def fetch_by_candidate_id(
        self, feeds: list[FeedDescriptor], candidate_id: str, limit: int = 5
    ) -> list[NewsArticle]:
        matching = [f for f in feeds if f.candidate_id == candidate_id]
        return await self.fetch_multiple_feeds(matching, limit)

    async def fetch_by_category(
        self, feeds: list[FeedDescriptor], category: str, limit: int = 5
    ) -> list[NewsArticle]:
        matching = [f for f in feeds if f.category == category]
        return await self.fetch_multiple_feeds(matching, limit)

    async def clear_cache(self) -> None:
        await self.cache.clear_by_prefix(CacheKeys.RSS_PREFIX, storage=CacheStorage.DURABLE)


class NewsFeedService:
    """Assembles the news page: featured picks plus live headlines."""

    def __init__(self, data_service: DataService, rss_service: RSSService):
        self.data_service = data_service
        self.rss_service = rss_service

    async def get_news(
        self,
        race_filter: Union[str, list[str]] = "all",
        candidate_id: Optional[str] = None,
        category: Optional[str] = None,
        limit: int = LIVE_LIMIT,
    ) -> dict[str, list]:
        """Featured and live articles for a page.

        Dataset failures propagate; feed failures only shrink the live list.
        """
        featured = await self.data_service.get_featured_articles()
        feed_config = await self.data_service.get_rss_feeds()
        feeds = feed_config.feeds

        if candidate_id:
            live = await self.rss_service.fetch_by_candidate_id(feeds, candidate_id, limit)
        elif category:
            live = await self.rss_service.fetch_by_category(feeds, category, limit)
        elif race_filter and race_filter != "all":
            live = await self.rss_service.fetch_by_race_filter(feeds, race_filter, limit)
        else:
            live = await self.rss_service.fetch_multiple_feeds(feeds, limit)

        return {
            "featured": filter_featured_articles(featured, race_filter)[:FEATURED_LIMIT],
            "live": live,
        }
