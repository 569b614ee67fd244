"""Routes for candidate profiles and their campaign finance."""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from app.dependencies import get_data_service, get_finance_service
from app.services import DataService, FinanceService
from app.services.finance_service import get_financial_summary_text

router = APIRouter(prefix="/candidates", tags=["candidates"])


@router.get("")
async def list_candidates(
    race: str = Query(default=None, description="Race filter, e.g. ga_governor"),
    data: DataService = Depends(get_data_service),
) -> JSONResponse:
    """All candidates, optionally restricted to one race filter."""
    if race:
        candidates = await data.get_candidates_by_race(race)
    else:
        candidates = await data.get_all_candidates()

    return JSONResponse(content={
        "race": race,
        "count": len(candidates),
        "candidates": [c.to_dict() for c in candidates],
    })


@router.get("/{candidate_id}")
async def get_candidate(
    candidate_id: str, data: DataService = Depends(get_data_service)
) -> JSONResponse:
    candidate = await data.get_candidate_by_id(candidate_id)
    return JSONResponse(content=candidate.to_dict())


@router.get("/{candidate_id}/financials")
async def get_candidate_financials(
    candidate_id: str,
    data: DataService = Depends(get_data_service),
    finance: FinanceService = Depends(get_finance_service),
) -> JSONResponse:
    """Finance summary; ``financials`` is null when nothing is available."""
    candidate = await data.get_candidate_by_id(candidate_id)
    lookup = await finance.lookup_candidate_financials(candidate)

    return JSONResponse(content={
        "candidateId": candidate.id,
        "status": lookup.status.value,
        "financials": lookup.summary.to_dict() if lookup.summary else None,
        "summary": get_financial_summary_text(lookup.summary),
    })
