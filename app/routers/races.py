"""Routes for races, race categories and dataset metadata."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.dependencies import get_data_service, get_finance_service
from app.services import DataService, FinanceService
from app.services.finance_service import format_currency

router = APIRouter(tags=["races"])


@router.get("/races")
async def list_races(data: DataService = Depends(get_data_service)) -> JSONResponse:
    """All races keyed by id."""
    races = await data.get_all_races()
    return JSONResponse(content={
        "count": len(races),
        "races": {key: race.to_dict() for key, race in races.items()},
    })


@router.get("/races/{race_id}")
async def get_race(
    race_id: str, data: DataService = Depends(get_data_service)
) -> JSONResponse:
    race = await data.get_race_by_id(race_id)
    return JSONResponse(content=race.to_dict())


@router.get("/races/{race_id}/candidates")
async def get_race_candidates(
    race_id: str, data: DataService = Depends(get_data_service)
) -> JSONResponse:
    """Candidates running in a race, matched on its race filter."""
    race = await data.get_race_by_id(race_id)
    candidates = await data.get_candidates_by_race(race.race_filter)
    return JSONResponse(content={
        "raceFilter": race.race_filter,
        "count": len(candidates),
        "candidates": [c.to_dict() for c in candidates],
    })


@router.get("/races/{race_id}/financials")
async def get_race_financials(
    race_id: str,
    data: DataService = Depends(get_data_service),
    finance: FinanceService = Depends(get_finance_service),
) -> JSONResponse:
    """Finance comparison for every candidate in a race."""
    race = await data.get_race_by_id(race_id)
    candidates = await data.get_candidates_by_race(race.race_filter)
    summary = await finance.get_race_financials(race.race_filter, candidates)

    content = summary.to_dict()
    content["raceName"] = race.title or race.race_filter
    for item, candidate in zip(content["candidates"], summary.candidates):
        item["display"] = {
            "raised": format_currency(candidate.total_raised),
            "spent": format_currency(candidate.total_spent),
            "cashOnHand": format_currency(candidate.cash_on_hand),
        }
    return JSONResponse(content=content)


@router.get("/categories")
async def list_categories(data: DataService = Depends(get_data_service)) -> JSONResponse:
    categories = await data.get_categories()
    return JSONResponse(content={
        "categories": {key: c.to_dict() for key, c in categories.items()},
    })


@router.get("/metadata/last-updated")
async def last_updated(data: DataService = Depends(get_data_service)) -> JSONResponse:
    metadata = await data.get_last_updated()
    return JSONResponse(content=metadata.to_dict())
