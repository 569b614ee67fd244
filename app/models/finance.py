"""Campaign finance summaries normalized across sources."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class FinanceSource(str, Enum):
    """Where a financial summary came from."""

    OPEN_FEC = "openFEC"
    TRANSPARENCY_USA = "transparencyUSA"


@dataclass
class FinancialSummary:
    """Totals for one candidate, all amounts non-negative."""

    candidate_id: str
    candidate_name: str
    total_raised: float
    total_spent: float
    cash_on_hand: float
    last_updated: str
    source: FinanceSource
    cycle_year: Optional[int] = None
    filing_period: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "candidateId": self.candidate_id,
            "candidateName": self.candidate_name,
            "totalRaised": self.total_raised,
            "totalSpent": self.total_spent,
            "cashOnHand": self.cash_on_hand,
            "lastUpdated": self.last_updated,
            "source": self.source.value,
            "cycleYear": self.cycle_year,
            "filingPeriod": self.filing_period,
        }


@dataclass
class RaceFinancialSummary:
    """Finance totals for every candidate in a race that has data."""

    race_id: str
    race_name: str
    candidates: list[FinancialSummary] = field(default_factory=list)
    is_unopposed: bool = True
    last_updated: str = ""

    def to_dict(self) -> dict:
        return {
            "raceId": self.race_id,
            "raceName": self.race_name,
            "candidates": [c.to_dict() for c in self.candidates],
            "isUnopposed": self.is_unopposed,
            "lastUpdated": self.last_updated,
        }


class FinanceStatus(str, Enum):
    """Outcome of a finance lookup."""

    AVAILABLE = "available"
    NOT_YET_AVAILABLE = "not_yet_available"
    FAILED = "failed"


@dataclass
class FinanceLookup:
    """Result of asking a finance source about one candidate.

    ``NOT_YET_AVAILABLE`` means nothing has been filed (normal for new
    candidates); ``FAILED`` means the source could not be read.
    """

    status: FinanceStatus
    summary: Optional[FinancialSummary] = None
    error: Optional[str] = None

    @classmethod
    def available(cls, summary: FinancialSummary) -> "FinanceLookup":
        return cls(status=FinanceStatus.AVAILABLE, summary=summary)

    @classmethod
    def not_yet_available(cls) -> "FinanceLookup":
        return cls(status=FinanceStatus.NOT_YET_AVAILABLE)

    @classmethod
    def failed(cls, error: str) -> "FinanceLookup":
        return cls(status=FinanceStatus.FAILED, error=error)
