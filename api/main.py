"""FastAPI application serving the live incident feed."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request

from api import queries
from api.models import CategoryCount, FeedView, FilterOptions, IncidentRow
from feed.config import configure_logging, get_settings
from feed.models import Category
from feed.session import FeedSession


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings.log_level)
    session = FeedSession.from_settings(settings)
    await session.start()
    app.state.session = session
    try:
        yield
    finally:
        await session.stop()


app = FastAPI(
    title="Incident Feed API",
    description="Crime incidents with category filters, refreshed on a fixed interval",
    version="0.1.0",
    lifespan=lifespan,
)


def _session(request: Request) -> FeedSession:
    return request.app.state.session


@app.get("/")
def root():
    return {
        "message": "Incident Feed API",
        "endpoints": [
            "/filters", "/feed", "/incidents", "/counts",
            "/filters/{category}/toggle", "/refresh",
        ],
    }


@app.get("/filters", response_model=FilterOptions)
def filters(request: Request):
    """Crime categories and their enabled flags."""
    return queries.get_filter_options(_session(request))


@app.get("/feed", response_model=FeedView)
def feed(request: Request):
    return queries.get_feed(_session(request))


@app.get("/incidents", response_model=list[IncidentRow])
def incidents(request: Request):
    """Visible incidents of the latest snapshot, in source order."""
    return queries.get_incidents(_session(request))


@app.get("/counts", response_model=list[CategoryCount])
def counts(request: Request):
    return queries.get_counts(_session(request))


@app.post("/filters/{category}/toggle", response_model=FeedView)
async def toggle_filter(category: str, request: Request):
    if Category.parse(category) is None:
        raise HTTPException(status_code=404, detail=f"Unknown category: {category}")
    return await queries.toggle_category(_session(request), category)


@app.post("/refresh", response_model=FeedView)
async def refresh(request: Request):
    return await queries.refresh(_session(request))
