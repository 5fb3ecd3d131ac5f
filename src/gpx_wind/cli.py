import argparse
import json
import logging
import sys
from dataclasses import replace
from datetime import timedelta

from gpx_wind import __version_date__, get_git_hash
from gpx_wind.analyzer import analyze_gpx
from gpx_wind.config import load_config, params_from_config
from gpx_wind.errors import WindAnalysisError
from gpx_wind.formatters import format_statistics
from gpx_wind.series import SERIES_FIELDS, bin_series, chart_series


def build_parser(config: dict | None = None) -> argparse.ArgumentParser:
    """Build argument parser with defaults from config file."""
    defaults = params_from_config(config)

    parser = argparse.ArgumentParser(
        description="Analyze the wind faced along a recorded GPX track."
    )
    parser.add_argument("gpx_file", help="Path to GPX file")
    parser.add_argument(
        "--interval",
        type=float,
        default=defaults.wind_interval.total_seconds() / 60,
        help=f"Minutes between wind samples (default: {defaults.wind_interval.total_seconds() / 60:g})",
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=defaults.request_delay_s,
        help=f"Seconds to wait between weather requests (default: {defaults.request_delay_s})",
    )
    parser.add_argument(
        "--max-speed",
        type=float,
        default=defaults.max_realistic_speed_kmh,
        help=f"Speeds above this (km/h) are treated as GPS errors (default: {defaults.max_realistic_speed_kmh})",
    )
    parser.add_argument(
        "--no-weather",
        action="store_true",
        help="Skip weather lookups and assume the default wind everywhere",
    )
    parser.add_argument(
        "--profile",
        choices=SERIES_FIELDS,
        default=None,
        help="Also print a binned profile of this field against distance",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Write the enriched track, wind samples and statistics as JSON",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Log progress (-v) or debug details (-vv) to stderr",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"gpx-wind {__version_date__} ({get_git_hash()})",
    )
    return parser


def _report_progress(current: int, total: int) -> None:
    pct = current / total * 100 if total else 100.0
    print(f"\rFetching wind data: {current}/{total} ({pct:.0f}%)", end="", file=sys.stderr, flush=True)
    if current >= total:
        print(file=sys.stderr)


def main(argv: list[str] | None = None) -> None:
    config = load_config()
    parser = build_parser(config)
    args = parser.parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    if args.interval <= 0:
        parser.error("--interval must be positive")

    params = replace(
        params_from_config(config),
        wind_interval=timedelta(minutes=args.interval),
        request_delay_s=args.delay,
        max_realistic_speed_kmh=args.max_speed,
    )

    try:
        result = analyze_gpx(
            args.gpx_file,
            params,
            fetch_weather=not args.no_weather,
            progress=None if args.json else _report_progress,
        )
    except FileNotFoundError:
        print(f"Error: File not found: {args.gpx_file}", file=sys.stderr)
        sys.exit(1)
    except WindAnalysisError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.json:
        json.dump(result.to_dict(), sys.stdout, indent=2)
        print()
        return

    print("=== GPX Wind Analysis ===")
    print(f"Points:         {len(result.points)}")
    defaulted = sum(1 for s in result.wind_samples if s.is_default)
    if args.no_weather:
        print(
            f"Wind samples:   none (assuming {params.default_wind_speed_kmh:.0f} km/h "
            f"from {params.default_wind_direction_deg:.0f}°)"
        )
    else:
        print(f"Wind samples:   {len(result.wind_samples)} ({defaulted} defaulted)")
    for label, value in format_statistics(result.statistics):
        print(f"{label + ':':<20}{value}")

    if args.profile:
        xs, ys = chart_series(result.points, args.profile, x_axis="distance")
        print("")
        print(f"--- {args.profile} by distance ---")
        for b in bin_series(xs, ys):
            print(f"{b.x:8.2f} km  {b.mean:8.2f} ± {b.sem:.2f}  (n={b.count})")
