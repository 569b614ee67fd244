"""Service wiring and unified cache invalidation.

``build_services`` constructs every data-access service around one
``CacheManager`` so the whole application shares a single cache.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from app.config import Settings, get_settings
from app.services.cache_manager import CacheManager
from app.services.data_service import DataService
from app.services.fec_api import FECAPIClient
from app.services.finance_service import FinanceService
from app.services.rss_service import NewsFeedService, RSSService
from app.services.state_finance import StateFinanceClient

logger = logging.getLogger(__name__)


class CacheSection(str, Enum):
    """Cacheable data sections that can be cleared."""

    DATASET = "dataset"
    NEWS = "news"
    FINANCE = "finance"


@dataclass
class Services:
    """Every service, sharing one cache."""

    cache: CacheManager
    data: DataService
    rss: RSSService
    news: NewsFeedService
    finance: FinanceService


def build_services(
    cache: CacheManager, settings: Optional[Settings] = None
) -> Services:
    settings = settings or get_settings()
    data = DataService(cache, settings)
    rss = RSSService(cache, settings)
    finance = FinanceService(
        FECAPIClient(cache, settings),
        StateFinanceClient(cache, settings),
        settings,
    )
    return Services(
        cache=cache,
        data=data,
        rss=rss,
        news=NewsFeedService(data, rss),
        finance=finance,
    )


async def clear_section(services: Services, section: CacheSection) -> None:
    """Invalidate cache for one section.

    Args:
        services: Application services
        section: Which cache section to clear
    """
    if section == CacheSection.DATASET:
        await services.data.clear_cache()
    elif section == CacheSection.NEWS:
        await services.rss.clear_cache()
    elif section == CacheSection.FINANCE:
        await services.finance.clear_cache()


async def clear_all_sections(services: Services) -> dict[str, bool]:
    """Clear every section.

    Returns:
        Dict mapping section name to success status
    """
    results = {}

    for section in CacheSection:
        try:
            await clear_section(services, section)
            results[section.value] = True
        except Exception as e:
            logger.error("Error clearing %s cache: %s", section.value, e)
            results[section.value] = False

    return results
