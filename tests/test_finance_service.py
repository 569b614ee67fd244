"""Unit tests for the unified finance service."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.exceptions import NetworkError
from app.models import (
    Candidate,
    FinanceLookup,
    FinanceSource,
    FinanceStatus,
    FinancialSummary,
)
from app.services.fec_api import FECAPIClient
from app.services.finance_service import (
    FinanceService,
    format_currency,
    get_financial_summary_text,
    is_unopposed,
)
from app.services.state_finance import StateFinanceClient


def make_summary(candidate_id="c1", raised=0.0, spent=0.0, cash=0.0):
    return FinancialSummary(
        candidate_id=candidate_id,
        candidate_name=candidate_id,
        total_raised=raised,
        total_spent=spent,
        cash_on_hand=cash,
        last_updated="2026-06-30",
        source=FinanceSource.OPEN_FEC,
    )


def make_candidate(candidate_id, race, external_ids=None):
    return Candidate(
        id=candidate_id,
        name=candidate_id.replace("-", " ").title(),
        party="Independent",
        race=race,
        external_ids=external_ids or {},
    )


@pytest.fixture
def fec_client():
    client = MagicMock(spec=FECAPIClient)
    client.fetch_financial_summary = AsyncMock(
        return_value=FinanceLookup.available(make_summary("fed", raised=10))
    )
    client.search_candidate = AsyncMock(return_value=[])
    client.clear_cache = AsyncMock()
    return client


@pytest.fixture
def state_client():
    client = MagicMock(spec=StateFinanceClient)
    client.fetch_financial_summary = AsyncMock(
        return_value=FinanceLookup.available(make_summary("state", raised=5))
    )
    client.clear_cache = AsyncMock()
    return client


@pytest.fixture
def service(fec_client, state_client, settings):
    return FinanceService(fec_client, state_client, settings)


class TestFormatCurrency:
    """Tests for compact dollar formatting."""

    @pytest.mark.parametrize("amount,expected", [
        (1_500_000, "$1.5M"),
        (2_500, "$3K"),
        (999, "$999"),
        (0, "$0"),
        (12_340, "$12K"),
    ])
    def test_format(self, amount, expected):
        assert format_currency(amount) == expected


class TestSummaryText:
    def test_none(self):
        assert get_financial_summary_text(None) == "No financial data available"

    def test_nothing_raised(self):
        assert get_financial_summary_text(make_summary()) == "No funds reported"

    def test_totals(self):
        summary = make_summary(raised=1_500_000, spent=2_500, cash=999)
        assert get_financial_summary_text(summary) == "Raised $1.5M | Spent $3K | Cash $999"


class TestIsUnopposed:
    """At most one candidate with money means unopposed."""

    def test_one_fundraiser(self):
        summaries = [make_summary(raised=100), make_summary(), make_summary()]
        assert is_unopposed(summaries) is True

    def test_two_fundraisers(self):
        assert is_unopposed([make_summary(raised=100), make_summary(raised=50)]) is False

    def test_empty(self):
        assert is_unopposed([]) is True


class TestRouting:
    """Candidates are routed to a source by race."""

    @pytest.mark.asyncio
    async def test_state_race_uses_state_client(self, service, fec_client, state_client):
        candidate = make_candidate("jane-doe", "ga_governor")

        summary = await service.get_candidate_financials(candidate)

        assert summary.candidate_id == "state"
        state_client.fetch_financial_summary.assert_awaited_once_with("jane-doe", "Jane Doe")
        fec_client.fetch_financial_summary.assert_not_called()

    @pytest.mark.asyncio
    async def test_federal_race_uses_stored_fec_id(self, service, fec_client, state_client):
        candidate = make_candidate(
            "sam-smith", "us_house_ga05", external_ids={"openFEC": "H6GA05000"}
        )

        summary = await service.get_candidate_financials(candidate)

        assert summary.candidate_id == "fed"
        fec_client.fetch_financial_summary.assert_awaited_once_with("H6GA05000", "Sam Smith")
        fec_client.search_candidate.assert_not_called()
        state_client.fetch_financial_summary.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("race,office", [
        ("us_senate_ga", "S"),
        ("us_house_ga05", "H"),
    ])
    async def test_federal_race_searches_by_office(self, service, fec_client, race, office):
        fec_client.search_candidate.return_value = [{"candidate_id": "X123"}]
        candidate = make_candidate("sam-smith", race)

        await service.get_candidate_financials(candidate)

        fec_client.search_candidate.assert_awaited_once_with(
            "Sam Smith", state="GA", office=office
        )
        fec_client.fetch_financial_summary.assert_awaited_once_with("X123", "Sam Smith")

    @pytest.mark.asyncio
    async def test_no_search_hit_is_not_yet_available(self, service, fec_client):
        candidate = make_candidate("sam-smith", "us_house_ga05")

        lookup = await service.lookup_candidate_financials(candidate)

        assert lookup.status == FinanceStatus.NOT_YET_AVAILABLE
        assert await service.get_candidate_financials(candidate) is None
        fec_client.fetch_financial_summary.assert_not_called()

    @pytest.mark.asyncio
    async def test_search_failure_is_failed(self, service, fec_client):
        fec_client.search_candidate.side_effect = NetworkError("down")
        candidate = make_candidate("sam-smith", "us_senate_ga")

        lookup = await service.lookup_candidate_financials(candidate)

        assert lookup.status == FinanceStatus.FAILED
        assert lookup.summary is None


class TestRaceFinancials:
    """Tests for race-level aggregation."""

    @pytest.mark.asyncio
    async def test_only_available_summaries_are_kept(self, service, state_client):
        state_client.fetch_financial_summary.side_effect = [
            FinanceLookup.available(make_summary("a", raised=100)),
            FinanceLookup.not_yet_available(),
            FinanceLookup.failed("boom"),
        ]
        candidates = [
            make_candidate("a", "ga_senate_sd18"),
            make_candidate("b", "ga_senate_sd18"),
            make_candidate("c", "ga_senate_sd18"),
        ]

        result = await service.get_race_financials("ga_senate_sd18", candidates)

        assert [s.candidate_id for s in result.candidates] == ["a"]
        assert result.race_id == "ga_senate_sd18"
        assert result.is_unopposed is True

    @pytest.mark.asyncio
    async def test_contested_race(self, service, state_client):
        state_client.fetch_financial_summary.side_effect = [
            FinanceLookup.available(make_summary("a", raised=100)),
            FinanceLookup.available(make_summary("b", raised=50)),
        ]
        candidates = [make_candidate("a", "ga_governor"), make_candidate("b", "ga_governor")]

        assert await service.is_race_unopposed("ga_governor", candidates) is False

    @pytest.mark.asyncio
    async def test_empty_race_is_unopposed(self, service):
        result = await service.get_race_financials("ga_governor", [])

        assert result.candidates == []
        assert result.is_unopposed is True

    @pytest.mark.asyncio
    async def test_clear_cache_clears_both_sources(self, service, fec_client, state_client):
        await service.clear_cache()

        fec_client.clear_cache.assert_awaited_once()
        state_client.clear_cache.assert_awaited_once()
