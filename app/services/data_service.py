"""Core dataset client for candidates, races, feeds and metadata.

Collections are published as an index document plus one JSON file per
item. Each item is cached under its own key so one edited file does not
invalidate the rest of the collection.
"""

import asyncio
import logging
from typing import Optional

from app.config import Settings, get_settings
from app.exceptions import NotFound, ParseError
from app.models import (
    Candidate,
    Category,
    DataMetadata,
    FeaturedArticle,
    FeedConfig,
    Race,
)
from app.services.cache_config import (
    CacheKeys,
    CacheStorage,
    CacheTTL,
    get_ttl_timedelta,
)
from app.services.cache_manager import CacheManager

logger = logging.getLogger(__name__)


class DataService:
    """Read-through access to the static election dataset."""

    def __init__(self, cache: CacheManager, settings: Optional[Settings] = None):
        self.cache = cache
        self.settings = settings or get_settings()
        self.duration = get_ttl_timedelta(CacheTTL.DATA)

    async def _fetch(self, path: str, key: str):
        return await self.cache.fetch_with_cache(
            self.settings.data_url(path),
            key,
            duration=self.duration,
            storage=CacheStorage.DURABLE,
        )

    async def _fetch_index(self, collection: str, key: str) -> list[dict]:
        index = await self._fetch(f"{collection}/index.json", key)
        if not isinstance(index, list) or not all(
            isinstance(entry, dict) and "id" in entry and "filename" in entry
            for entry in index
        ):
            raise ParseError(f"Malformed {collection} index")
        return index

    async def get_all_candidates(self) -> list[Candidate]:
        """Fetch every candidate listed in the candidate index.

        Documents are fetched concurrently; any failure fails the call.
        """
        index = await self._fetch_index("candidates", CacheKeys.CANDIDATES_INDEX)

        documents = await asyncio.gather(*[
            self._fetch(
                f"candidates/{entry['filename']}",
                f"{CacheKeys.CANDIDATE_PREFIX}{entry['id']}",
            )
            for entry in index
        ])

        return [Candidate.from_dict(doc) for doc in documents]

    async def get_candidates_by_race(self, race_filter: str) -> list[Candidate]:
        """Candidates whose ``race`` equals *race_filter* exactly."""
        candidates = await self.get_all_candidates()
        return [c for c in candidates if c.race == race_filter]

    async def get_candidate_by_id(self, candidate_id: str) -> Candidate:
        candidates = await self.get_all_candidates()
        for candidate in candidates:
            if candidate.id == candidate_id:
                return candidate
        raise NotFound(f"Candidate not found: {candidate_id}")

    async def get_all_races(self) -> dict[str, Race]:
        """Fetch every race, keyed by its index id."""
        index = await self._fetch_index("races", CacheKeys.RACES_INDEX)

        documents = await asyncio.gather(*[
            self._fetch(
                f"races/{entry['filename']}",
                f"{CacheKeys.RACE_PREFIX}{entry['id']}",
            )
            for entry in index
        ])

        races: dict[str, Race] = {}
        for entry, doc in zip(index, documents):
            if not isinstance(doc, dict):
                raise ParseError(f"Malformed race document: {entry['filename']}")
            races[entry["id"]] = Race.from_dict({"id": entry["id"], **doc})
        return races

    async def get_race_by_id(self, race_id: str) -> Race:
        """Look up one race by its index id.

        Raises:
            NotFound: If no race has that id.
        """
        races = await self.get_all_races()
        race = races.get(race_id)
        if race is None:
            raise NotFound(f"Race not found: {race_id}")
        return race

    async def get_categories(self) -> dict[str, Category]:
        data = await self._fetch("races/raceCategories.json", CacheKeys.CATEGORIES)
        if not isinstance(data, dict):
            raise ParseError("Malformed race categories document")

        categories = data.get("categories", data)
        if not isinstance(categories, dict):
            raise ParseError("Malformed race categories document")
        return {
            key: Category.from_dict({"id": key, **value})
            for key, value in categories.items()
            if isinstance(value, dict)
        }

    async def get_rss_feeds(self) -> FeedConfig:
        data = await self._fetch("news/rss-feeds.json", CacheKeys.RSS_FEEDS)
        return FeedConfig.from_dict(data)

    async def get_last_updated(self) -> DataMetadata:
        data = await self._fetch("metadata/last-updated.json", CacheKeys.LAST_UPDATED)
        if not isinstance(data, dict):
            raise ParseError("Malformed metadata document")
        return DataMetadata.from_dict(data)

    async def get_featured_articles(self) -> list[FeaturedArticle]:
        data = await self._fetch(
            "news/featured-articles.json", CacheKeys.FEATURED_ARTICLES
        )
        if not isinstance(data, dict):
            raise ParseError("Malformed featured articles document")
        return [FeaturedArticle.from_dict(a) for a in data.get("articles") or []]

    async def clear_cache(self) -> None:
        """Purge every dataset entry from the durable cache."""
        for prefix in (CacheKeys.CANDIDATE_PREFIX, CacheKeys.RACE_PREFIX):
            await self.cache.clear_by_prefix(prefix, storage=CacheStorage.DURABLE)

        for key in (
            CacheKeys.CANDIDATES_INDEX,
            CacheKeys.RACES_INDEX,
            CacheKeys.CATEGORIES,
            CacheKeys.RSS_FEEDS,
            CacheKeys.FEATURED_ARTICLES,
            CacheKeys.LAST_UPDATED,
        ):
            await self.cache.remove(key, storage=CacheStorage.DURABLE)

        logger.info("Dataset cache cleared")
