"""Unified finance service combining OpenFEC (federal) and state data."""

import asyncio
import logging
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from app.config import Settings, get_settings
from app.exceptions import ElectionDataError
from app.models import (
    Candidate,
    FinanceLookup,
    FinanceStatus,
    FinancialSummary,
    RaceFinancialSummary,
)
from app.services.fec_api import FECAPIClient
from app.services.state_finance import StateFinanceClient

logger = logging.getLogger(__name__)


def _round_half_up(value: float, places: str = "1") -> Decimal:
    return Decimal(str(value)).quantize(Decimal(places), rounding=ROUND_HALF_UP)


def format_currency(amount: float) -> str:
    """Compact dollar amount: ``$1.5M``, ``$3K``, ``$999``."""
    if amount >= 1_000_000:
        return f"${_round_half_up(amount / 1_000_000, '0.1')}M"
    if amount >= 1_000:
        return f"${_round_half_up(amount / 1_000)}K"
    return f"${_round_half_up(amount)}"


def get_financial_summary_text(summary: Optional[FinancialSummary]) -> str:
    """One-line description of a candidate's finances."""
    if not summary:
        return "No financial data available"

    if summary.total_raised == 0:
        return "No funds reported"

    return (
        f"Raised {format_currency(summary.total_raised)} | "
        f"Spent {format_currency(summary.total_spent)} | "
        f"Cash {format_currency(summary.cash_on_hand)}"
    )


def is_unopposed(summaries: list[FinancialSummary]) -> bool:
    """At most one candidate has raised any money."""
    return sum(1 for s in summaries if s.total_raised > 0) <= 1


class FinanceService:
    """Routes candidates to the right finance source by race type."""

    def __init__(
        self,
        fec_client: FECAPIClient,
        state_client: StateFinanceClient,
        settings: Optional[Settings] = None,
    ):
        self.fec_client = fec_client
        self.state_client = state_client
        self.settings = settings or get_settings()

    async def _resolve_fec_id(self, candidate: Candidate) -> Optional[str]:
        """Stored OpenFEC id, else the first name/state/office search hit."""
        fec_id = candidate.external_ids.get("openFEC")
        if fec_id:
            return fec_id

        office = "S" if "senate" in candidate.race else "H"
        results = await self.fec_client.search_candidate(
            candidate.name, state=self.settings.home_state, office=office
        )
        if results:
            return results[0].get("candidate_id")
        return None

    async def lookup_candidate_financials(self, candidate: Candidate) -> FinanceLookup:
        """Finance data for a candidate, telling "nothing filed" from "failed"."""
        if not candidate.is_federal:
            return await self.state_client.fetch_financial_summary(
                candidate.id, candidate.name
            )

        try:
            fec_id = await self._resolve_fec_id(candidate)
        except ElectionDataError as e:
            logger.error("OpenFEC search failed for %s: %s", candidate.name, e)
            return FinanceLookup.failed(str(e))

        if not fec_id:
            logger.info("No OpenFEC candidate found for %s", candidate.name)
            return FinanceLookup.not_yet_available()

        return await self.fec_client.fetch_financial_summary(fec_id, candidate.name)

    async def get_candidate_financials(
        self, candidate: Candidate
    ) -> Optional[FinancialSummary]:
        """Financial summary for a candidate, or None when there is none."""
        lookup = await self.lookup_candidate_financials(candidate)
        return lookup.summary

    async def get_race_financials(
        self, race_filter: str, candidates: list[Candidate]
    ) -> RaceFinancialSummary:
        """Summaries for every candidate in a race plus the unopposed flag."""
        lookups = await asyncio.gather(*[
            self.lookup_candidate_financials(c) for c in candidates
        ])

        summaries = [
            lookup.summary for lookup in lookups
            if lookup.status == FinanceStatus.AVAILABLE and lookup.summary
        ]

        return RaceFinancialSummary(
            race_id=race_filter,
            race_name=race_filter,
            candidates=summaries,
            is_unopposed=is_unopposed(summaries),
            last_updated=datetime.now(timezone.utc).isoformat(),
        )

    async def is_race_unopposed(
        self, race_filter: str, candidates: list[Candidate]
    ) -> bool:
        summary = await self.get_race_financials(race_filter, candidates)
        return summary.is_unopposed

    async def clear_cache(self) -> None:
        await self.fec_client.clear_cache()
        await self.state_client.clear_cache()
