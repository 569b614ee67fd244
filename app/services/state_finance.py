"""State campaign finance client.

State figures are scraped from TransparencyUSA into one consolidated
document, ``financials/state-financials.json``::

    {
      "lastUpdated": "2026-09-30",
      "candidates": {
        "jane_doe": {"name": "...", "race": "...", "party": "...",
                     "contributions": "$1,250.00", "loans": "$0",
                     "expenditures": "$300.00", "status": "active"}
      }
    }
"""

import logging
import re
from typing import Optional

from app.config import Settings, get_settings
from app.exceptions import ElectionDataError, ParseError
from app.models import FinanceLookup, FinanceSource, FinancialSummary
from app.services.cache_config import (
    NO_EXPIRY,
    CacheKeys,
    CacheStorage,
    CacheTTL,
    get_ttl_timedelta,
)
from app.services.cache_manager import CacheManager

logger = logging.getLogger(__name__)

STATE_FINANCIALS_PATH = "financials/state-financials.json"

_CURRENCY_JUNK = re.compile(r"[$,\s]")


def normalize_candidate_id(candidate_id: str) -> str:
    """Map dataset ids (``jane-doe``) onto finance ids (``jane_doe``)."""
    return candidate_id.replace("-", "_")


def parse_currency(value) -> float:
    """Parse ``"$1,234.56"`` style amounts; blanks and junk count as 0."""
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)

    cleaned = _CURRENCY_JUNK.sub("", str(value))
    if cleaned.startswith("(") and cleaned.endswith(")"):
        cleaned = f"-{cleaned[1:-1]}"
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


class StateFinanceClient:
    """Looks up state candidates in the consolidated finance document."""

    def __init__(self, cache: CacheManager, settings: Optional[Settings] = None):
        self.cache = cache
        self.settings = settings or get_settings()
        self.duration = get_ttl_timedelta(CacheTTL.API)
        self.cache_key = f"{CacheKeys.STATE_FINANCE_PREFIX}state-financials"

    async def get_document(self) -> dict:
        """The consolidated document, falling back to a stale copy on failure.

        Raises:
            ElectionDataError: If the fetch fails and nothing is cached.
        """
        try:
            data = await self.cache.fetch_with_cache(
                self.settings.data_url(STATE_FINANCIALS_PATH),
                self.cache_key,
                duration=self.duration,
                storage=CacheStorage.MEMORY,
            )
        except ElectionDataError as e:
            stale = await self.cache.get(
                self.cache_key, duration=NO_EXPIRY, storage=CacheStorage.MEMORY
            )
            if stale is None:
                raise
            logger.warning("Using stale state finance data: %s", e)
            data = stale

        return data if isinstance(data, dict) else {}

    @staticmethod
    def find_record(candidates: dict, candidate_id: str) -> Optional[dict]:
        """Look up by id as given, then by its normalized form."""
        for key in (candidate_id, normalize_candidate_id(candidate_id)):
            record = candidates.get(key)
            if isinstance(record, dict):
                return record
        return None

    async def fetch_financial_summary(
        self, candidate_id: str, candidate_name: str
    ) -> FinanceLookup:
        try:
            document = await self.get_document()
            candidates = document.get("candidates") or {}
            if not isinstance(candidates, dict):
                raise ParseError("State financials 'candidates' must be an object")
        except ElectionDataError as e:
            logger.error("Error fetching state financials for %s: %s", candidate_id, e)
            return FinanceLookup.failed(str(e))

        record = self.find_record(candidates, candidate_id)
        if record is None:
            logger.warning("No financial data found for %s", candidate_id)
            return FinanceLookup.not_yet_available()

        contributions = max(0.0, parse_currency(record.get("contributions")))
        loans = max(0.0, parse_currency(record.get("loans")))
        expenditures = max(0.0, parse_currency(record.get("expenditures")))
        raised = contributions + loans

        return FinanceLookup.available(FinancialSummary(
            candidate_id=candidate_id,
            candidate_name=candidate_name or record.get("name", ""),
            total_raised=raised,
            total_spent=expenditures,
            cash_on_hand=max(0.0, raised - expenditures),
            last_updated=document.get("lastUpdated") or "",
            source=FinanceSource.TRANSPARENCY_USA,
        ))

    async def get_financial_summary(
        self, candidate_id: str, candidate_name: str
    ) -> Optional[FinancialSummary]:
        lookup = await self.fetch_financial_summary(candidate_id, candidate_name)
        return lookup.summary

    async def clear_cache(self) -> None:
        await self.cache.clear_by_prefix(
            CacheKeys.STATE_FINANCE_PREFIX, storage=CacheStorage.MEMORY
        )
