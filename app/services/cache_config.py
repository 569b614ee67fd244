"""Centralized cache configuration for dataset and API data.

TTL values are defined in minutes for each data type:
- Data: 60 minutes (candidates, races, categories, metadata)
- RSS: 30 minutes (feeds change more often)
- API: 60 minutes (OpenFEC and state finance responses)
"""

from dataclasses import dataclass
from enum import Enum
from datetime import timedelta
from typing import Generic, TypeVar, Optional

T = TypeVar('T')


@dataclass
class CachedResponse(Generic[T]):
    """Wrapper for responses that may come from cache.

    Attributes:
        data: The actual response data
        is_stale: True if data is from expired cache (served due to a failed refresh)
        warning: Human-readable warning message if data is stale
    """

    data: T
    is_stale: bool = False
    warning: Optional[str] = None

    @classmethod
    def fresh(cls, data: T) -> "CachedResponse[T]":
        """Create a response with fresh data."""
        return cls(data=data, is_stale=False, warning=None)

    @classmethod
    def stale(cls, data: T, data_type: str = "data") -> "CachedResponse[T]":
        """Create a response with stale cached data."""
        return cls(
            data=data,
            is_stale=True,
            warning=f"This {data_type} may be outdated. Unable to fetch latest data from the source."
        )


class CacheTTL(Enum):
    """Cache TTL values in minutes for different data types."""

    DATA = 60          # 1 hour - dataset documents
    RSS = 30           # 30 minutes - RSS feeds
    API = 60           # 1 hour - finance API responses


class CacheStorage(str, Enum):
    """Where a cache entry lives."""

    DURABLE = "durable"    # database table, survives restarts
    MEMORY = "memory"      # process lifetime only


class CacheKeys:
    """Cache key names and namespace prefixes."""

    CANDIDATES_INDEX = "candidates-index"
    CANDIDATE_PREFIX = "candidate-"

    RACES_INDEX = "races-index"
    RACE_PREFIX = "race-"
    CATEGORIES = "categories"

    RSS_PREFIX = "rss-"
    RSS_FEEDS = "feed-config"
    FEATURED_ARTICLES = "featured-articles"

    LAST_UPDATED = "last-updated"

    OPENFEC_PREFIX = "openfec-"
    STATE_FINANCE_PREFIX = "transparency-"


# Reads with this duration accept entries of any age
NO_EXPIRY = timedelta.max


def get_ttl_timedelta(ttl: CacheTTL) -> timedelta:
    """Get timedelta for a cache TTL value.

    Args:
        ttl: CacheTTL enum value

    Returns:
        timedelta representing the TTL duration
    """
    return timedelta(minutes=ttl.value)


def is_cache_valid(timestamp: Optional[int], duration: timedelta, now: int) -> bool:
    """Check if a cache entry is still fresh.

    Args:
        timestamp: Epoch milliseconds when the entry was written
        duration: Freshness window requested by the reader
        now: Current epoch milliseconds

    Returns:
        True if ``now - timestamp < duration``
    """
    if timestamp is None:
        return False
    if duration == NO_EXPIRY:
        return True

    return now - timestamp < duration / timedelta(milliseconds=1)
