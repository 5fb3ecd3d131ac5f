"""Wind sampling along a track and per-point wind exposure.

Wind is fetched on a coarse time grid (every 30 minutes by default), then
linearly interpolated onto each track point's timestamp. The component of
the wind along the direction of travel is what the rider actually faces.
"""

import logging
import math
import threading
import time
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timedelta
from functools import partial

from gpx_wind.errors import AnalysisCancelledError
from gpx_wind.models import AnalysisParams, TrackPoint, WindSample
from gpx_wind.weather_api import HourlyWind, WeatherProvider, fetch_hourly_wind

logger = logging.getLogger(__name__)

# |wind_faced| below this (km/h) counts as crosswind when classifying
CROSSWIND_BAND_KMH = 2.0

ProgressCallback = Callable[[int, int], None]


def log_wind_profile(speed: float, params: AnalysisParams) -> float:
    """Scale a wind speed from the reference height to rider height.

    Uses the logarithmic wind profile: v(h) = v(ref) * ln(h/z0) / ln(ref/z0).
    """
    z0 = params.roughness_length_m
    return speed * math.log(params.effective_height_m / z0) / math.log(params.reference_height_m / z0)


def wind_at_time(hourly: HourlyWind, target: datetime, params: AnalysisParams) -> tuple[float, float]:
    """Pick the hourly reading closest to target.

    Returns (wind speed in km/h at rider height, direction in degrees).
    Missing values in the chosen reading count as 0.
    """
    closest_idx = 0
    min_diff = None
    for i, t in enumerate(hourly.times):
        diff = abs((t - target).total_seconds())
        if min_diff is None or diff < min_diff:
            min_diff = diff
            closest_idx = i

    speed_10m_kmh = (hourly.wind_speed_ms[closest_idx] or 0.0) * 3.6
    direction = hourly.wind_direction_deg[closest_idx] or 0.0
    return log_wind_profile(speed_10m_kmh, params), float(direction)


def wind_grid(start: datetime, end: datetime, interval: timedelta) -> list[datetime]:
    """Times from start to end inclusive, spaced by interval."""
    if interval <= timedelta(0):
        raise ValueError(f"Wind sampling interval must be positive, got {interval}")
    grid = []
    current = start
    while current <= end:
        grid.append(current)
        current += interval
    return grid


def find_closest_point(points: list[TrackPoint], target: datetime) -> TrackPoint:
    """Return the point whose time is closest to target; ties go to the earliest."""
    closest = points[0]
    min_diff = abs((closest.time - target).total_seconds())
    for point in points:
        diff = abs((point.time - target).total_seconds())
        if diff < min_diff:
            min_diff = diff
            closest = point
    return closest


def default_wind_sample(when: datetime, point: TrackPoint, params: AnalysisParams) -> WindSample:
    return WindSample(
        time=when,
        lat=point.lat,
        lon=point.lon,
        wind_speed_kmh=params.default_wind_speed_kmh,
        wind_direction_deg=params.default_wind_direction_deg,
        is_default=True,
    )


def _pause(seconds: float, cancel_event: threading.Event | None) -> None:
    if seconds <= 0:
        return
    if cancel_event is not None:
        cancel_event.wait(seconds)
    else:
        time.sleep(seconds)


def sample_wind(
    points: list[TrackPoint],
    params: AnalysisParams | None = None,
    provider: WeatherProvider | None = None,
    progress: ProgressCallback | None = None,
    cancel_event: threading.Event | None = None,
) -> list[WindSample]:
    """Fetch one wind sample per grid time across the track's time range.

    Requests are issued one at a time with params.request_delay_s between
    them. Any failure to fetch or read a step is replaced by the default
    sample, so one bad grid step never fails the run. progress(current,
    total) is called with (0, total) up front and after every step.

    Raises:
        AnalysisCancelledError: If cancel_event is set before sampling finishes.
    """
    if params is None:
        params = AnalysisParams()
    if not points:
        return []
    if provider is None:
        provider = partial(fetch_hourly_wind, url=params.archive_url, timeout=params.request_timeout_s)

    grid = wind_grid(points[0].time, points[-1].time, params.wind_interval)
    total = len(grid)
    logger.info("Starting wind data fetch for %s time points", total)
    if progress is not None:
        progress(0, total)

    samples: list[WindSample] = []
    for step, when in enumerate(grid, start=1):
        if step > 1:
            _pause(params.request_delay_s, cancel_event)
        if cancel_event is not None and cancel_event.is_set():
            raise AnalysisCancelledError(f"Wind sampling cancelled after {step - 1} of {total} steps")

        closest = find_closest_point(points, when)
        try:
            hourly = provider(closest.lat, closest.lon, when.date())
            speed, direction = wind_at_time(hourly, when, params)
            samples.append(
                WindSample(
                    time=when,
                    lat=closest.lat,
                    lon=closest.lon,
                    wind_speed_kmh=speed,
                    wind_direction_deg=direction,
                )
            )
        except AnalysisCancelledError:
            raise
        except Exception as e:
            logger.warning("Error getting wind data for %s: %s", when.isoformat(), e)
            samples.append(default_wind_sample(when, closest, params))

        if progress is not None:
            progress(step, total)

    failed = sum(1 for s in samples if s.is_default)
    logger.info("Retrieved wind data for %s time points (%s defaulted)", len(samples), failed)
    return samples


def find_surrounding_samples(
    samples: list[WindSample], target: datetime
) -> tuple[WindSample | None, WindSample | None]:
    """Find the first consecutive pair of samples bracketing target."""
    for before, after in zip(samples, samples[1:]):
        if before.time <= target <= after.time:
            return before, after
    return None, None


def interpolate_between(before: WindSample, after: WindSample, target: datetime) -> tuple[float, float]:
    """Linearly interpolate speed and direction between two samples.

    Direction is interpolated as a plain number, so a pair straddling north
    (e.g. 350 and 10 degrees) interpolates through south.
    """
    total = (after.time - before.time).total_seconds()
    ratio = (target - before.time).total_seconds() / total if total > 0 else 0.0
    speed = before.wind_speed_kmh + (after.wind_speed_kmh - before.wind_speed_kmh) * ratio
    direction = before.wind_direction_deg + (after.wind_direction_deg - before.wind_direction_deg) * ratio
    return speed, direction


def interpolate_wind(
    samples: list[WindSample], target: datetime, params: AnalysisParams | None = None
) -> tuple[float, float]:
    """Return (wind speed km/h, wind direction deg) at target time."""
    if params is None:
        params = AnalysisParams()
    if not samples:
        return params.default_wind_speed_kmh, params.default_wind_direction_deg
    if len(samples) == 1:
        return samples[0].wind_speed_kmh, samples[0].wind_direction_deg

    before, after = find_surrounding_samples(samples, target)
    if before is not None and after is not None:
        return interpolate_between(before, after, target)

    # Outside the sampled range: hold the nearest end
    closest = samples[0] if target < samples[0].time else samples[-1]
    return closest.wind_speed_kmh, closest.wind_direction_deg


def relative_wind_angle(wind_direction_deg: float, bearing_deg: float) -> float:
    """Angle of the wind source relative to the direction of travel, in (-180, 180]."""
    angle = (wind_direction_deg - bearing_deg + 180) % 360 - 180
    return 180.0 if angle == -180 else angle


def wind_component(wind_speed_kmh: float, wind_direction_deg: float, bearing_deg: float) -> float:
    """Wind speed along the direction of travel; positive is headwind."""
    angle = relative_wind_angle(wind_direction_deg, bearing_deg)
    return wind_speed_kmh * math.cos(math.radians(angle))


def apply_wind(
    points: list[TrackPoint], samples: list[WindSample], params: AnalysisParams | None = None
) -> list[TrackPoint]:
    """Attach interpolated wind and the faced wind component to every point."""
    if params is None:
        params = AnalysisParams()

    enriched = []
    for point in points:
        speed, direction = interpolate_wind(samples, point.time, params)
        enriched.append(
            replace(
                point,
                wind_speed_kmh=speed,
                wind_direction_deg=direction,
                wind_faced_kmh=wind_component(speed, direction, point.bearing_deg),
            )
        )
    logger.info("Calculated relative wind for %s points", len(enriched))
    return enriched


def classify_wind(wind_faced_kmh: float, crosswind_band: float = CROSSWIND_BAND_KMH) -> str:
    """Label a faced-wind value as 'headwind', 'tailwind' or 'crosswind'."""
    if wind_faced_kmh > crosswind_band:
        return "headwind"
    if wind_faced_kmh < -crosswind_band:
        return "tailwind"
    return "crosswind"
