"""OpenFEC API client for federal campaign finance data."""

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Optional

from app.config import Settings, get_settings
from app.exceptions import ElectionDataError
from app.models import FinanceLookup, FinanceSource, FinancialSummary
from app.services.cache_config import (
    CacheKeys,
    CacheStorage,
    CacheTTL,
    get_ttl_timedelta,
)
from app.services.cache_manager import CacheManager

logger = logging.getLogger(__name__)


def _amount(value) -> float:
    """Non-negative float from an OpenFEC numeric field."""
    try:
        return max(0.0, float(value or 0))
    except (TypeError, ValueError):
        return 0.0


class FECAPIClient:
    """Client for OpenFEC.

    Every (endpoint, params) combination is cached separately in memory.
    """

    def __init__(self, cache: CacheManager, settings: Optional[Settings] = None):
        self.cache = cache
        self.settings = settings or get_settings()
        self.base_url = self.settings.fec_api_base_url
        self.api_key = self.settings.fec_api_key
        self.duration = get_ttl_timedelta(CacheTTL.API)

    def _get_params(self, **kwargs) -> dict:
        params = {"api_key": self.api_key}
        params.update(kwargs)
        return params

    @staticmethod
    def _cache_key(endpoint: str, params: dict) -> str:
        return f"{CacheKeys.OPENFEC_PREFIX}{endpoint}?{json.dumps(params, sort_keys=True)}"

    async def _fetch(self, endpoint: str, **params) -> dict:
        data = await self.cache.fetch_with_cache(
            f"{self.base_url}{endpoint}",
            self._cache_key(endpoint, params),
            duration=self.duration,
            storage=CacheStorage.MEMORY,
            params=self._get_params(**params),
        )
        return data if isinstance(data, dict) else {}

    async def search_candidate(
        self,
        name: str,
        state: Optional[str] = None,
        office: Optional[str] = None,
        page: int = 1,
    ) -> list[dict]:
        """Search candidates by name, state and office ("H" or "S")."""
        params = {"state": state or self.settings.home_state, "per_page": 20, "page": page}
        if name:
            params["name"] = name
        if office:
            params["office"] = office

        data = await self._fetch("/candidates/search/", **params)
        return data.get("results") or []

    async def get_candidate_by_id(self, candidate_id: str) -> Optional[dict]:
        try:
            data = await self._fetch(f"/candidate/{candidate_id}/")
        except ElectionDataError as e:
            logger.error("Error fetching candidate %s: %s", candidate_id, e)
            return None

        results = data.get("results") or []
        return results[0] if results else None

    async def get_candidate_totals(
        self, candidate_id: str, cycle: Optional[int] = None
    ) -> Optional[dict]:
        """Financial totals for one cycle, or None if nothing is filed.

        Raises:
            ElectionDataError: If OpenFEC could not be read.
        """
        data = await self._fetch(
            f"/candidate/{candidate_id}/totals/",
            cycle=cycle or self.settings.election_cycle,
            sort_hide_null="false",
        )
        results = data.get("results") or []
        return results[0] if results else None

    async def get_house_candidates(
        self, district: str, state: Optional[str] = None, cycle: Optional[int] = None
    ) -> list[dict]:
        data = await self._fetch(
            "/candidates/search/",
            state=state or self.settings.home_state,
            district=district,
            office="H",
            cycle=cycle or self.settings.election_cycle,
            per_page=50,
        )
        return data.get("results") or []

    async def get_senate_candidates(
        self, state: Optional[str] = None, cycle: Optional[int] = None
    ) -> list[dict]:
        data = await self._fetch(
            "/candidates/search/",
            state=state or self.settings.home_state,
            office="S",
            cycle=cycle or self.settings.election_cycle,
            per_page=50,
        )
        return data.get("results") or []

    async def fetch_financial_summary(
        self, candidate_id: str, candidate_name: str, cycle: Optional[int] = None
    ) -> FinanceLookup:
        """Normalized totals for a candidate, as a FinanceLookup."""
        cycle = cycle or self.settings.election_cycle
        try:
            totals = await self.get_candidate_totals(candidate_id, cycle)
        except ElectionDataError as e:
            logger.error("Error fetching financials for %s: %s", candidate_id, e)
            return FinanceLookup.failed(str(e))

        if not totals:
            logger.info("No OpenFEC totals for %s in %s", candidate_id, cycle)
            return FinanceLookup.not_yet_available()

        coverage_end = totals.get("coverage_end_date")
        return FinanceLookup.available(FinancialSummary(
            candidate_id=candidate_id,
            candidate_name=candidate_name,
            total_raised=_amount(totals.get("receipts")),
            total_spent=_amount(totals.get("disbursements")),
            cash_on_hand=_amount(totals.get("cash_on_hand_end_period")),
            last_updated=coverage_end or datetime.now(timezone.utc).isoformat(),
            source=FinanceSource.OPEN_FEC,
            cycle_year=cycle,
            filing_period=coverage_end,
        ))

    async def get_financial_summary(
        self, candidate_id: str, candidate_name: str, cycle: Optional[int] = None
    ) -> Optional[FinancialSummary]:
        """Normalized totals for a candidate, or None when unavailable."""
        lookup = await self.fetch_financial_summary(candidate_id, candidate_name, cycle)
        return lookup.summary

    async def is_race_unopposed(
        self, candidate_ids: list[str], cycle: Optional[int] = None
    ) -> bool:
        """True if at most one of the candidates has raised money."""
        lookups = await asyncio.gather(*[
            self.fetch_financial_summary(cid, "", cycle) for cid in candidate_ids
        ])
        active = [
            lookup for lookup in lookups
            if lookup.summary and lookup.summary.total_raised > 0
        ]
        return len(active) <= 1

    async def clear_cache(self) -> None:
        await self.cache.clear_by_prefix(CacheKeys.OPENFEC_PREFIX, storage=CacheStorage.MEMORY)
