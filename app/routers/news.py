"""Routes for aggregated news and cache maintenance."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from app.dependencies import get_news_service, get_services
from app.services import NewsFeedService, Services
from app.services.cache_service import clear_all_sections

router = APIRouter(tags=["news"])


@router.get("/news")
async def get_news(
    race_filter: str = Query(default="all", description="Race filter or 'all'"),
    tag: Optional[list[str]] = Query(default=None, description="Race tags (category pages)"),
    candidate_id: str = Query(default=None, description="Candidate id"),
    category: str = Query(default=None, description="Feed category"),
    limit: int = Query(default=10, ge=0, le=100, description="Max live articles, 0 = all"),
    news: NewsFeedService = Depends(get_news_service),
) -> JSONResponse:
    """Featured and live articles for a race, category page or candidate."""
    result = await news.get_news(
        race_filter=tag or race_filter,
        candidate_id=candidate_id,
        category=category,
        limit=limit,
    )
    return JSONResponse(content={
        "featured": [a.to_dict() for a in result["featured"]],
        "live": [a.to_dict() for a in result["live"]],
    })


@router.post("/cache/clear")
async def clear_cache(services: Services = Depends(get_services)) -> JSONResponse:
    """Clear every cached namespace."""
    results = await clear_all_sections(services)
    return JSONResponse(content={"cleared": results})
