"""FastAPI application for Massachusetts police arrest logs."""

from __future__ import annotations

import json
import logging

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse

from api.cache import ResponseCache
from api.models import AggregateBundle, ArrestPage, FilterOptions, HeatmapResponse
from arrests.aggregate import aggregate, get_heatmap
from arrests.config import Settings, load_settings
from arrests.errors import ArrestLogError, TransientQueryError
from arrests.filters import Filter
from arrests.listing import list_arrests
from arrests.source import ArrestSource, get_filter_options

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Massachusetts Arrest Log API",
    description="Arrest records, city heatmap, and aggregate statistics for Massachusetts municipalities",
    version="0.1.0",
)

cache = ResponseCache()


def get_settings() -> Settings:
    return load_settings()


def get_source(settings: Settings = Depends(get_settings)) -> ArrestSource:
    return ArrestSource.from_settings(settings)


@app.exception_handler(ArrestLogError)
async def arrest_log_error(request: Request, exc: ArrestLogError) -> JSONResponse:
    logger.error("%s failed (%s): %s", request.url.path, exc.kind, exc.details)
    status = 503 if isinstance(exc, TransientQueryError) else 500
    return JSONResponse(
        status_code=status,
        content={"error": exc.message, "kind": exc.kind, "details": exc.details},
    )


def _cache_key(endpoint: str, source: ArrestSource, f: Filter, **extra) -> str:
    return json.dumps(
        {"endpoint": endpoint, "source": source.path, "filter": f.cache_key(), **extra},
        sort_keys=True,
    )


@app.get("/")
def root():
    return {
        "message": "Massachusetts Arrest Log API",
        "endpoints": ["/filters", "/arrests", "/arrests/stats", "/arrests/heatmap"],
    }


@app.get("/filters", response_model=FilterOptions)
def filters(
    source: ArrestSource = Depends(get_source),
    settings: Settings = Depends(get_settings),
):
    """Towns present in the data and the available date range."""
    return cache.get_or_compute(
        _cache_key("filters", source, Filter()),
        lambda: get_filter_options(source),
        ttl=settings.cache_ttl,
    )


@app.get("/arrests", response_model=ArrestPage)
def arrests(
    page: int = Query(1, description="1-indexed page number"),
    limit: int | None = Query(None, description="Page size"),
    town: str | None = Query(None, description="Town/city prefix"),
    city: str | None = Query(None, description="Alias of town"),
    search: str | None = Query(None, description="Text in name or charges"),
    date_from: str | None = Query(None, alias="dateFrom", description="YYYY-MM-DD, inclusive"),
    date_to: str | None = Query(None, alias="dateTo", description="YYYY-MM-DD, inclusive"),
    source: ArrestSource = Depends(get_source),
    settings: Settings = Depends(get_settings),
):
    f = Filter.from_params(city or town, date_from, date_to)
    page_size = limit if limit is not None else settings.page_size
    return cache.get_or_compute(
        _cache_key("arrests", source, f, page=page, limit=page_size, search=search or ""),
        lambda: list_arrests(
            source, f, page, page_size, search, max_page_size=settings.max_page_size
        ),
        ttl=settings.cache_ttl,
    )


@app.get("/arrests/stats", response_model=AggregateBundle)
def arrest_stats(
    town: str | None = Query(None, description="Town/city prefix"),
    date_from: str | None = Query(None, alias="dateFrom", description="YYYY-MM-DD, inclusive"),
    date_to: str | None = Query(None, alias="dateTo", description="YYYY-MM-DD, inclusive"),
    source: ArrestSource = Depends(get_source),
    settings: Settings = Depends(get_settings),
):
    f = Filter.from_params(town, date_from, date_to)
    return cache.get_or_compute(
        _cache_key("stats", source, f),
        lambda: aggregate(source, f, max_workers=settings.max_workers),
        ttl=settings.cache_ttl,
    )


@app.get("/arrests/heatmap", response_model=HeatmapResponse)
def arrest_heatmap(
    town: str | None = Query(None, description="Town/city prefix"),
    city: str | None = Query(None, description="Alias of town"),
    date_from: str | None = Query(None, alias="dateFrom", description="YYYY-MM-DD, inclusive"),
    date_to: str | None = Query(None, alias="dateTo", description="YYYY-MM-DD, inclusive"),
    source: ArrestSource = Depends(get_source),
    settings: Settings = Depends(get_settings),
):
    f = Filter.from_params(city or town, date_from, date_to)
    return cache.get_or_compute(
        _cache_key("heatmap", source, f),
        lambda: {"cityCounts": get_heatmap(source, f)},
        ttl=settings.cache_ttl,
    )
