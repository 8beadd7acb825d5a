"""FastAPI application serving corrected resort forecasts.

Provides REST API endpoints for:
- Resort catalogue
- Per-resort and per-band corrected forecasts
- Archived snowfall
- Health checks and cache control

Example:
    >>> from powdercast.api import create_app
    >>> app = create_app()
    >>> # Run with: uvicorn powdercast.api.app:app --reload
"""

import asyncio
import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from powdercast.api.schemas import (
    BandForecastOut,
    ErrorResponse,
    HealthResponse,
    HistoryDayOut,
    HistoryResponse,
    ResortForecastOut,
    ResortInfo,
)
from powdercast.config import DEFAULT_FORECAST_DAYS, EXTERNAL_SOURCE_COUNTRIES
from powdercast.fetch.client import FetchClient, get_fetch_client
from powdercast.fetch.errors import FetchError
from powdercast.forecast.nws import NWSSnowSource
from powdercast.forecast.service import (
    blend_band,
    fetch_band_forecast,
    fetch_historical,
    fetch_resort_forecast,
)
from powdercast.models import ElevationBand, Resort
from powdercast.resorts import RESORTS, get_resort
from powdercast.utils.dates import date_range_back, today_iso_in_timezone

logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"
DEFAULT_HISTORY_DAYS = 30

UPSTREAM_ERROR_RESPONSES = {
    404: {"model": ErrorResponse, "description": "Unknown resort or band"},
    502: {"model": ErrorResponse, "description": "Upstream weather service failed"},
}


def _resort_or_404(slug: str) -> Resort:
    resort = get_resort(slug)
    if resort is None:
        raise HTTPException(status_code=404, detail=f"Unknown resort: {slug}")
    return resort


def _band_or_404(band: str) -> ElevationBand:
    try:
        return ElevationBand(band.lower())
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown elevation band: {band}")


def create_app(fetch_client: Optional[FetchClient] = None) -> FastAPI:
    """Create FastAPI application.

    Args:
        fetch_client: Fetch client for upstream requests (the shared one by default)

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Powdercast API",
        description="Multi-model mountain forecasts with elevation-corrected snowfall",
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    client = fetch_client or get_fetch_client()

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Handle HTTP exceptions with custom response."""
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=f"HTTP_{exc.status_code}",
                message=str(exc.detail),
            ).model_dump(),
        )

    @app.exception_handler(FetchError)
    async def fetch_error_handler(request: Request, exc: FetchError):
        """Upstream failures surface as 502 with the failing sub-request named."""
        logger.error(f"Upstream failure on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=502,
            content=ErrorResponse(
                error="UPSTREAM_ERROR",
                message=str(exc),
                detail=exc.label,
            ).model_dump(),
        )

    @app.get("/", tags=["info"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Powdercast API",
            "version": API_VERSION,
            "docs": "/docs",
        }

    @app.get("/health", response_model=HealthResponse, tags=["info"])
    async def health_check():
        """Health check endpoint."""
        return HealthResponse(
            status="healthy",
            version=API_VERSION,
            cache_size=client.cache_size,
            inflight=client.inflight_count,
        )

    @app.get("/resorts", response_model=list[ResortInfo], tags=["resorts"])
    async def list_resorts():
        """All resorts in the catalogue."""
        return [ResortInfo.from_domain(r) for r in RESORTS]

    @app.get(
        "/resorts/{slug}/forecast",
        response_model=ResortForecastOut,
        responses=UPSTREAM_ERROR_RESPONSES,
        tags=["forecasts"],
    )
    async def resort_forecast(
        slug: str,
        days: int = Query(DEFAULT_FORECAST_DAYS, ge=1, le=16),
        past_days: int = Query(0, ge=0, le=92),
        blend: bool = Query(True, description="Blend daily snowfall with NWS (US only)"),
    ):
        """Corrected forecast for every elevation band.

        Bands fail independently; a failed band is listed under ``errors``.
        """
        resort = _resort_or_404(slug)
        forecast = await fetch_resort_forecast(
            resort,
            forecast_days=days,
            past_days=past_days,
            blend_external=blend,
            client=client,
        )
        return ResortForecastOut.from_domain(forecast)

    @app.get(
        "/resorts/{slug}/forecast/{band}",
        response_model=BandForecastOut,
        responses=UPSTREAM_ERROR_RESPONSES,
        tags=["forecasts"],
    )
    async def band_forecast(
        slug: str,
        band: str,
        days: int = Query(DEFAULT_FORECAST_DAYS, ge=1, le=16),
        past_days: int = Query(0, ge=0, le=92),
        blend: bool = Query(True, description="Blend daily snowfall with NWS (US only)"),
    ):
        """Corrected forecast for one elevation band."""
        resort = _resort_or_404(slug)
        elevation_band = _band_or_404(band)

        tasks = [
            fetch_band_forecast(
                resort, elevation_band, forecast_days=days, past_days=past_days, client=client
            )
        ]
        if blend and resort.country.upper() in EXTERNAL_SOURCE_COUNTRIES:
            tasks.append(NWSSnowSource(client).daily_snowfall(resort.lat, resort.lon, resort.timezone))

        results = await asyncio.gather(*tasks, return_exceptions=True)
        forecast = results[0]
        if isinstance(forecast, BaseException):
            raise forecast

        if len(results) > 1:
            external = results[1]
            if isinstance(external, Exception):
                logger.warning(f"{resort.name}: NWS snowfall discarded ({external!r}); skipping blend")
            elif isinstance(external, BaseException):
                raise external
            else:
                forecast = blend_band(forecast, external)
        return BandForecastOut.from_domain(forecast)

    @app.get(
        "/resorts/{slug}/history",
        response_model=HistoryResponse,
        responses={400: {"model": ErrorResponse, "description": "Invalid date range"}, **UPSTREAM_ERROR_RESPONSES},
        tags=["history"],
    )
    async def resort_history(
        slug: str,
        start: Optional[str] = Query(None, description="First date (YYYY-MM-DD)"),
        end: Optional[str] = Query(None, description="Last date (YYYY-MM-DD)"),
        band: str = Query("mid"),
    ):
        """Archived daily snowfall; defaults to the last 30 days."""
        resort = _resort_or_404(slug)
        elevation_band = _band_or_404(band)

        try:
            end_date = end or today_iso_in_timezone(resort.timezone)
            start_date = start or date_range_back(end_date, DEFAULT_HISTORY_DAYS)[0]
            days = await fetch_historical(
                resort.lat,
                resort.lon,
                resort.elevation(elevation_band),
                start_date,
                end_date,
                resort.timezone,
                client=client,
            )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        return HistoryResponse(
            resort=resort.slug,
            band=elevation_band.value,
            start=start_date,
            end=end_date,
            days=[HistoryDayOut.from_domain(d) for d in days],
        )

    @app.post("/cache/clear", tags=["info"])
    async def clear_cache():
        """Drop every cached upstream response."""
        dropped = client.cache_size
        client.clear()
        return {"cleared": dropped}

    return app


# Default app instance for uvicorn
app = create_app()
