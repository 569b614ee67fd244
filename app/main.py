"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.database import async_session, init_db
from app.exceptions import ElectionDataError, FetchFailed, NotFound
from app.routers import candidates, news, races, rss_proxy
from app.services import CacheManager, build_services

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the cache table and wire every service to one cache."""
    await init_db()
    async with httpx.AsyncClient() as http_client:
        cache = CacheManager(async_session, http_client=http_client)
        app.state.services = build_services(cache, settings)
        yield


app = FastAPI(
    title="Georgia Election Hub",
    description="Candidates, races, campaign finance and news for Georgia's 2026 elections",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(content={"error": str(exc)}, status_code=404)


@app.exception_handler(ElectionDataError)
async def upstream_error_handler(request: Request, exc: ElectionDataError):
    content = {"error": str(exc)}
    if isinstance(exc, FetchFailed):
        content["upstreamStatus"] = exc.status_code
    return JSONResponse(content=content, status_code=502)


app.include_router(races.router)
app.include_router(candidates.router)
app.include_router(news.router)
app.include_router(rss_proxy.router)


@app.get("/")
async def index():
    """Service summary."""
    return {"name": app.title, "version": app.version}
