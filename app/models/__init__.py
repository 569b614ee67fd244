"""Database and domain models."""

from app.models.cache_entry import CacheEntry
from app.models.candidate import Candidate
from app.models.race import Race, Category
from app.models.news import FeedDescriptor, FeedConfig, NewsArticle, FeaturedArticle
from app.models.finance import (
    FinanceSource,
    FinanceStatus,
    FinanceLookup,
    FinancialSummary,
    RaceFinancialSummary,
)
from app.models.metadata import DataMetadata

__all__ = [
    "CacheEntry",
    "Candidate",
    "Race",
    "Category",
    "FeedDescriptor",
    "FeedConfig",
    "NewsArticle",
    "FeaturedArticle",
    "FinanceSource",
    "FinanceStatus",
    "FinanceLookup",
    "FinancialSummary",
    "RaceFinancialSummary",
    "DataMetadata",
]
