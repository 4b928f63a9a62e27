"""DevFest Redirect API - FastAPI service.

Serves slug redirects, the directory listing, the table view and the map
view from the configured backing store. Listing results are cached at this
boundary for the configured TTL; the directory service itself never caches.
"""

import logging
import os
import time
from typing import Any
from urllib.parse import urlencode

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel

from src.core.config import Config
from src.core.directory import (
    SORT_DIRECTIONS,
    SORT_KEYS,
    list_countries,
)
from src.core.entry import Entry, country_flag, display_name, entry_to_dict, format_date
from src.core.errors import StoreUnavailable
from src.core.geo import Coordinate
from src.core.retrieval import RetrievalResult
from src.directory_service import DirectoryService, build_store
from src.shell.config_loader import load_config


log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="DevFest Redirect API",
    description="Slug redirects and directory data for DevFest events",
    version="1.0.0",
)


# Shared cache directive for successful redirects and listings
PUBLIC_CACHE_CONTROL = "public, s-maxage=3600, stale-while-revalidate=86400"


# ===== Response Models =====

class CenterOut(BaseModel):
    lat: float
    lng: float


class BoundsOut(BaseModel):
    min_latitude: float
    max_latitude: float
    min_longitude: float
    max_longitude: float


class NearestOut(BaseModel):
    slug: str
    name: str
    distance_km: float
    latitude: float
    longitude: float
    destinationUrl: str


class DirectoryRow(BaseModel):
    slug: str
    name: str
    date: str
    devfestDate: str | None = None
    gdgChapter: str | None = None
    gdgUrl: str | None = None
    city: str | None = None
    countryName: str | None = None
    countryCode: str | None = None
    flag: str = ""
    destinationUrl: str


class DirectoryOut(BaseModel):
    entries: list[DirectoryRow]
    count: int
    countries: list[str]


class MapOut(BaseModel):
    center: CenterOut | None
    observer: CenterOut | None = None
    markers: list[dict[str, Any]]
    nearest: list[NearestOut]
    bounds: BoundsOut | None = None


# ===== Service Wiring =====

_config: Config | None = None
_service: DirectoryService | None = None


def get_config() -> Config:
    """Load configuration once per process."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def get_service() -> DirectoryService:
    """Create the directory service once per process."""
    global _service
    if _service is None:
        _service = DirectoryService(build_store(get_config().store))
        logger.info("Directory service initialized with %s store", get_config().store.backend)
    return _service


# ===== Listing Cache =====

_listing_cache: RetrievalResult | None = None
_cache_timestamp: float = 0


def _is_cache_valid(ttl_seconds: int) -> bool:
    """Check if the listing cache is still valid."""
    if _listing_cache is None:
        return False
    return time.time() - _cache_timestamp < ttl_seconds


def _invalidate_cache() -> None:
    """Invalidate the listing cache."""
    global _listing_cache, _cache_timestamp
    _listing_cache = None
    _cache_timestamp = 0


def _get_directory(service: DirectoryService, config: Config, fresh: bool = False) -> RetrievalResult:
    """Get the directory from cache or the store.

    Raises:
        StoreUnavailable: If the store cannot be reached
    """
    global _listing_cache, _cache_timestamp

    if not fresh and _is_cache_valid(config.cache_ttl_seconds):
        return _listing_cache

    result = service.fetch_directory()
    _listing_cache = result
    _cache_timestamp = time.time()
    return result


def _store_error_response() -> JSONResponse:
    """Body returned by every listing endpoint when the store is down."""
    logger.exception("Failed to fetch redirects")
    return JSONResponse({"error": "Failed to fetch redirects"}, status_code=500)


# ===== Helper Functions =====

def _directory_row(entry: Entry) -> DirectoryRow:
    """Convert an Entry to a table row with display fields."""
    return DirectoryRow(
        slug=entry.slug,
        name=display_name(entry),
        date=format_date(entry.devfest_date),
        devfestDate=entry.devfest_date,
        gdgChapter=entry.gdg_chapter,
        gdgUrl=entry.gdg_url,
        city=entry.city,
        countryName=entry.country_name,
        countryCode=entry.country_code,
        flag=country_flag(entry.country_code),
        destinationUrl=entry.destination_url,
    )


def _center_out(coordinate: Coordinate | None) -> CenterOut | None:
    if coordinate is None:
        return None
    return CenterOut(lat=coordinate.latitude, lng=coordinate.longitude)


def _fallback_url(config: Config, **params: str) -> str:
    return f"{config.fallback_path}?{urlencode(params)}"


# ===== Public Endpoints =====

@app.get("/health")
async def health_check():
    """Health check endpoint for Cloud Run."""
    return {"status": "healthy"}


@app.get("/api/redirects")
def list_redirects(
    fresh: bool = Query(default=False),
    service: DirectoryService = Depends(get_service),
    config: Config = Depends(get_config),
):
    """Full directory as a JSON array of stored records."""
    try:
        result = _get_directory(service, config, fresh)
    except StoreUnavailable:
        return _store_error_response()

    return JSONResponse(
        [entry_to_dict(e) for e in result.entries],
        headers={
            "Cache-Control": PUBLIC_CACHE_CONTROL,
            "X-Malformed-Records": str(result.malformed_count),
        },
    )


@app.get("/api/directory", response_model=DirectoryOut)
def get_directory(
    q: str | None = Query(default=None),
    country: str | None = Query(default=None),
    sort: str | None = Query(default=None),
    direction: str = Query(default="asc"),
    fresh: bool = Query(default=False),
    service: DirectoryService = Depends(get_service),
    config: Config = Depends(get_config),
):
    """Table view: searchable, sortable rows plus the country facet."""
    if sort is not None and sort not in SORT_KEYS:
        raise HTTPException(status_code=400, detail=f"sort must be one of {list(SORT_KEYS)}")
    if direction not in SORT_DIRECTIONS:
        raise HTTPException(status_code=400, detail=f"direction must be one of {list(SORT_DIRECTIONS)}")

    try:
        all_entries = _get_directory(service, config, fresh).entries
    except StoreUnavailable:
        return _store_error_response()

    entries = service.list_all(q, sort, direction, country, entries=all_entries)

    return DirectoryOut(
        entries=[_directory_row(e) for e in entries],
        count=len(entries),
        countries=list_countries(all_entries),
    )


@app.get("/api/map", response_model=MapOut)
def get_map(
    lat: float | None = Query(default=None, ge=-90, le=90),
    lng: float | None = Query(default=None, ge=-180, le=180),
    k: int | None = Query(default=None, ge=1, le=50),
    country: str | None = Query(default=None),
    fresh: bool = Query(default=False),
    service: DirectoryService = Depends(get_service),
    config: Config = Depends(get_config),
):
    """Map view: center, markers and the events nearest an observer."""
    if (lat is None) != (lng is None):
        raise HTTPException(status_code=400, detail="lat and lng must be given together")

    observer = Coordinate(latitude=lat, longitude=lng) if lat is not None else None
    try:
        entries = _get_directory(service, config, fresh).entries
    except StoreUnavailable:
        return _store_error_response()

    view = service.map_view(
        observer=observer,
        k=k or config.nearest_count,
        country=country,
        entries=entries,
    )

    bounds = None
    if view.bounds is not None:
        bounds = BoundsOut(
            min_latitude=view.bounds.min_latitude,
            max_latitude=view.bounds.max_latitude,
            min_longitude=view.bounds.min_longitude,
            max_longitude=view.bounds.max_longitude,
        )

    return MapOut(
        center=_center_out(view.center),
        observer=_center_out(view.observer),
        markers=[entry_to_dict(e) for e in view.entries],
        nearest=[
            NearestOut(
                slug=r.entry.slug,
                name=display_name(r.entry),
                distance_km=round(r.distance_km, 1),
                latitude=r.entry.latitude,
                longitude=r.entry.longitude,
                destinationUrl=r.entry.destination_url,
            )
            for r in view.nearest
        ],
        bounds=bounds,
    )


@app.get("/{slug}")
def redirect_slug(
    slug: str,
    service: DirectoryService = Depends(get_service),
    config: Config = Depends(get_config),
):
    """Redirect a slug to its destination URL."""
    try:
        destination = service.resolve(slug)
    except StoreUnavailable:
        logger.exception("Error handling redirect for %s", slug)
        return RedirectResponse(_fallback_url(config, error="true"), status_code=302)

    if destination is None:
        return RedirectResponse(
            _fallback_url(config, notFound=slug),
            status_code=302,
            headers={"Cache-Control": "no-cache"},
        )

    return RedirectResponse(
        destination,
        status_code=302,
        headers={"Cache-Control": PUBLIC_CACHE_CONTROL},
    )
