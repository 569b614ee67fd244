"""Data-access services layered over one shared cache."""

from app.services.cache_manager import CacheManager
from app.services.data_service import DataService
from app.services.fec_api import FECAPIClient
from app.services.state_finance import StateFinanceClient
from app.services.finance_service import FinanceService
from app.services.rss_service import RSSService, NewsFeedService
from app.services.cache_service import CacheSection, Services, build_services, clear_section

__all__ = [
    "CacheManager",
    "DataService",
    "FECAPIClient",
    "StateFinanceClient",
    "FinanceService",
    "RSSService",
    "NewsFeedService",
    "CacheSection",
    "Services",
    "build_services",
    "clear_section",
]
