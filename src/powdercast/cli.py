"""Command-line interface for powdercast.

Usage:
    powdercast resorts
    powdercast forecast alta
    powdercast forecast alta --band top --days 10 --json
    powdercast history alta --start 2025-01-01 --end 2025-01-31
"""

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict
from typing import Optional, Sequence

from powdercast.config import DEFAULT_FORECAST_DAYS
from powdercast.fetch.client import FetchClient
from powdercast.fetch.errors import FetchError
from powdercast.forecast.service import fetch_historical, fetch_resort_forecast
from powdercast.models import BandForecast, ElevationBand, ResortForecast
from powdercast.recalc.rollup import snow_days, split_day_periods
from powdercast.resorts import RESORTS, get_resort
from powdercast.utils.dates import date_range_back, today_iso_in_timezone

logger = logging.getLogger(__name__)


def print_resorts() -> None:
    """Print the resort catalogue."""
    print(f"{'Slug':<18} {'Name':<22} {'Country':<8} {'Base':>6} {'Mid':>6} {'Top':>6}")
    print("-" * 70)
    for r in RESORTS:
        print(
            f"{r.slug:<18} {r.name:<22} {r.country:<8} "
            f"{r.base_elevation:>6.0f} {r.mid_elevation:>6.0f} {r.top_elevation:>6.0f}"
        )


def print_band(forecast: BandForecast) -> None:
    """Print a daily snow table for one band."""
    big_days = set(snow_days(forecast.daily))
    blended = ", NWS blend" if forecast.blended else ""
    print(
        f"\n{forecast.band.value.upper()} ({forecast.elevation:.0f} m) "
        f"- models: {', '.join(forecast.models)}{blended}"
    )
    print(f"{'Date':<12} {'Snow cm':>8} {'AM':>6} {'PM':>6} {'Night':>6} {'Rain mm':>8} {'Max C':>6} {'Min C':>6}")
    for day in forecast.daily:
        periods = split_day_periods(day.date, forecast.hourly)
        marker = " *" if day.date in big_days else ""
        print(
            f"{day.date:<12} {day.snowfall_sum:>8.1f} {periods.am:>6.1f} {periods.pm:>6.1f} "
            f"{periods.overnight:>6.1f} {day.rain_sum:>8.1f} "
            f"{day.temperature_max:>6.1f} {day.temperature_min:>6.1f}{marker}"
        )
    print(f"{'Total':<12} {forecast.total_snowfall:>8.1f}")


def forecast_to_dict(forecast: ResortForecast) -> dict:
    """JSON-ready view of a resort forecast."""
    return {
        "resort": forecast.resort.slug,
        "fetched_at": forecast.fetched_at.isoformat(),
        "bands": {
            band.value: {
                "elevation": b.elevation,
                "models": b.models,
                "blended": b.blended,
                "total_snowfall": b.total_snowfall,
                "daily": [asdict(d) for d in b.daily],
            }
            for band, b in forecast.bands.items()
        },
        "errors": {band.value: message for band, message in forecast.errors.items()},
    }


async def _run_forecast(args: argparse.Namespace) -> int:
    resort = get_resort(args.slug)
    if resort is None:
        logger.error(f"Unknown resort: {args.slug}")
        return 2

    async with FetchClient() as client:
        forecast = await fetch_resort_forecast(
            resort,
            forecast_days=args.days,
            past_days=args.past_days,
            blend_external=not args.no_blend,
            client=client,
        )

    if args.json:
        print(json.dumps(forecast_to_dict(forecast), indent=2))
    else:
        print(f"{resort.name} ({resort.country})")
        bands = [ElevationBand(args.band)] if args.band else list(ElevationBand)
        for band in bands:
            if band in forecast.bands:
                print_band(forecast.bands[band])
            else:
                print(f"\n{band.value.upper()}: unavailable ({forecast.errors.get(band, 'not requested')})")

    return 0 if forecast.complete else 1


async def _run_history(args: argparse.Namespace) -> int:
    resort = get_resort(args.slug)
    if resort is None:
        logger.error(f"Unknown resort: {args.slug}")
        return 2

    end = args.end or today_iso_in_timezone(resort.timezone)
    start = args.start or date_range_back(end, args.days)[0]
    band = ElevationBand(args.band or "mid")

    async with FetchClient() as client:
        days = await fetch_historical(
            resort.lat,
            resort.lon,
            resort.elevation(band),
            start,
            end,
            resort.timezone,
            client=client,
        )

    print(f"{resort.name} {band.value} ({resort.elevation(band):.0f} m): {start} to {end}")
    print(f"{'Date':<12} {'Snow cm':>8} {'Depth m':>8}")
    for day in days:
        print(f"{day.date:<12} {day.snowfall:>8.1f} {day.snow_depth:>8.2f}")
    print(f"{'Total':<12} {sum(d.snowfall for d in days):>8.1f}")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Multi-model mountain forecasts with elevation-corrected snowfall",
        epilog="""
Examples:
  powdercast resorts                          # List resorts
  powdercast forecast alta                    # All bands, 7 days
  powdercast forecast alta --band top --json  # Raw JSON
  powdercast history alta --days 14           # Last two weeks
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress output except errors",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("resorts", help="List resorts")

    forecast_parser = subparsers.add_parser("forecast", help="Corrected forecast for a resort")
    forecast_parser.add_argument("slug", help="Resort slug (see 'resorts')")
    forecast_parser.add_argument(
        "--band",
        choices=[b.value for b in ElevationBand],
        default=None,
        help="Only print one elevation band",
    )
    forecast_parser.add_argument(
        "--days",
        type=int,
        default=DEFAULT_FORECAST_DAYS,
        help=f"Forecast days (default: {DEFAULT_FORECAST_DAYS})",
    )
    forecast_parser.add_argument(
        "--past-days",
        type=int,
        default=0,
        help="Include recent past days",
    )
    forecast_parser.add_argument(
        "--no-blend",
        action="store_true",
        help="Skip the NWS snowfall blend",
    )
    forecast_parser.add_argument(
        "--json",
        action="store_true",
        help="Print JSON instead of tables",
    )

    history_parser = subparsers.add_parser("history", help="Archived snowfall for a resort")
    history_parser.add_argument("slug", help="Resort slug (see 'resorts')")
    history_parser.add_argument("--start", default=None, help="First date (YYYY-MM-DD)")
    history_parser.add_argument("--end", default=None, help="Last date (YYYY-MM-DD, default: today)")
    history_parser.add_argument(
        "--days",
        type=int,
        default=30,
        help="Days back from --end when --start is omitted (default: 30)",
    )
    history_parser.add_argument(
        "--band",
        choices=[b.value for b in ElevationBand],
        default="mid",
        help="Elevation band (default: mid)",
    )

    args = parser.parse_args(argv)

    # Configure logging
    if args.quiet:
        level = logging.ERROR
    elif args.verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if args.command == "resorts":
        print_resorts()
        return 0

    try:
        if args.command == "forecast":
            return asyncio.run(_run_forecast(args))
        return asyncio.run(_run_history(args))
    except (FetchError, ValueError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
