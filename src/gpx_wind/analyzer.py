import logging
import threading
from collections.abc import Iterable

from gpx_wind.ingest import build_track
from gpx_wind.kinematics import derive_kinematics, log_speed_summary
from gpx_wind.models import AnalysisParams, RawPoint, RouteStatistics, TrackPoint, WindAnalysis
from gpx_wind.parser import parse_gpx
from gpx_wind.weather_api import WeatherProvider, cache_stats
from gpx_wind.wind import ProgressCallback, apply_wind, sample_wind

logger = logging.getLogger(__name__)


def calculate_route_statistics(points: list[TrackPoint]) -> RouteStatistics:
    """Reduce an enriched track to summary statistics.

    Average speed only counts moving points. Wind averages are taken over all
    points that carry wind data.
    """
    if not points:
        return RouteStatistics(
            total_distance_km=0.0,
            total_duration_hours=0.0,
            avg_speed_kmh=0.0,
            avg_wind_speed_kmh=0.0,
            avg_wind_faced_kmh=0.0,
            max_headwind_kmh=0.0,
            max_tailwind_kmh=0.0,
            headwind_percentage=0.0,
        )

    if points[0].time is not None and points[-1].time is not None:
        duration_hours = (points[-1].time - points[0].time).total_seconds() / 3600
    else:
        duration_hours = 0.0

    speeds = [p.speed_kmh for p in points if p.speed_kmh > 0]
    wind_speeds = [p.wind_speed_kmh for p in points if p.wind_speed_kmh is not None]
    wind_faced = [p.wind_faced_kmh for p in points if p.wind_faced_kmh is not None]

    return RouteStatistics(
        total_distance_km=points[-1].distance_km,
        total_duration_hours=duration_hours,
        avg_speed_kmh=sum(speeds) / len(speeds) if speeds else 0.0,
        avg_wind_speed_kmh=sum(wind_speeds) / len(wind_speeds) if wind_speeds else 0.0,
        avg_wind_faced_kmh=sum(wind_faced) / len(wind_faced) if wind_faced else 0.0,
        max_headwind_kmh=max(0.0, max(wind_faced)) if wind_faced else 0.0,
        max_tailwind_kmh=max(0.0, -min(wind_faced)) if wind_faced else 0.0,
        headwind_percentage=(
            sum(1 for w in wind_faced if w >= 0) / len(wind_faced) * 100 if wind_faced else 0.0
        ),
    )


def analyze_track(
    records: Iterable[RawPoint],
    params: AnalysisParams | None = None,
    provider: WeatherProvider | None = None,
    progress: ProgressCallback | None = None,
    cancel_event: threading.Event | None = None,
    fetch_weather: bool = True,
) -> WindAnalysis:
    """Run the full pipeline on raw point records.

    With fetch_weather=False no requests are made and every point gets the
    default wind.

    Raises:
        EmptyTrackError: If no record has valid coordinates.
        MissingTimestampsError: If no record has a usable timestamp.
        AnalysisCancelledError: If cancel_event is set during wind sampling.
    """
    if params is None:
        params = AnalysisParams()

    track = derive_kinematics(build_track(records), params)
    log_speed_summary(track)

    if fetch_weather:
        samples = sample_wind(track, params, provider=provider, progress=progress, cancel_event=cancel_event)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Weather cache: %s", cache_stats())
    else:
        samples = []

    enriched = apply_wind(track, samples, params)
    return WindAnalysis(
        points=enriched,
        wind_samples=samples,
        statistics=calculate_route_statistics(enriched),
    )


def analyze_gpx(filepath: str, params: AnalysisParams | None = None, **kwargs) -> WindAnalysis:
    """Parse a GPX file and run the full pipeline on it.

    Keyword arguments are passed through to analyze_track.

    Raises:
        FileNotFoundError: If the file does not exist.
        InvalidFormatError: If the file is not valid GPX.
        EmptyTrackError, MissingTimestampsError: As for analyze_track.
    """
    records = parse_gpx(filepath)
    logger.info("Parsed %s points from %s", len(records), filepath)
    return analyze_track(records, params, **kwargs)
