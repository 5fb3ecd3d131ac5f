"""Fetch historical hourly wind from the Open-Meteo archive API."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime

import requests

from gpx_wind.cache import DictCache
from gpx_wind.errors import WeatherDataError
from gpx_wind.ingest import parse_timestamp
from gpx_wind.models import OPEN_METEO_ARCHIVE_URL

logger = logging.getLogger(__name__)

HOURLY_VARIABLES = ["wind_speed_10m", "wind_direction_10m"]

# Archive data is final, so a day-long TTL only bounds memory
_hourly_cache = DictCache(max_size=256, ttl_seconds=24 * 3600)


@dataclass(frozen=True)
class HourlyWind:
    """One day of hourly 10 m wind readings for a location."""
    times: list[datetime]  # aware UTC
    wind_speed_ms: list[float | None]
    wind_direction_deg: list[float | None]  # direction the wind blows from


# (lat, lon, UTC date) -> HourlyWind
WeatherProvider = Callable[[float, float, date], HourlyWind]


def parse_hourly_wind(data: dict) -> HourlyWind:
    """Parse an Open-Meteo hourly response.

    Raises:
        WeatherDataError: If the response has no hourly series or the series
            are inconsistent or hold non-numeric values.
    """
    hourly = data.get("hourly") or {}
    if not isinstance(hourly, dict):
        raise WeatherDataError(f"Hourly data is not an object: {type(hourly).__name__}")
    raw_times = hourly.get("time") or []
    if not raw_times:
        raise WeatherDataError("No hourly data available")

    speeds = hourly.get("wind_speed_10m") or []
    directions = hourly.get("wind_direction_10m") or []
    if len(speeds) != len(raw_times) or len(directions) != len(raw_times):
        raise WeatherDataError(
            f"Hourly series lengths differ: {len(raw_times)} times, "
            f"{len(speeds)} speeds, {len(directions)} directions"
        )

    for name, series in (("wind_speed_10m", speeds), ("wind_direction_10m", directions)):
        for value in series:
            if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
                raise WeatherDataError(f"Invalid {name} value: {value!r}")

    times = []
    for raw in raw_times:
        parsed = parse_timestamp(raw)
        if parsed is None:
            raise WeatherDataError(f"Invalid hourly time: {raw!r}")
        times.append(parsed)

    return HourlyWind(times=times, wind_speed_ms=list(speeds), wind_direction_deg=list(directions))


def fetch_hourly_wind(
    lat: float,
    lon: float,
    day: date,
    url: str = OPEN_METEO_ARCHIVE_URL,
    timeout: float = 30.0,
    use_cache: bool = True,
) -> HourlyWind:
    """Fetch hourly wind speed (m/s) and direction for one UTC day.

    Responses are cached per location (to ~1 km) and day.

    Raises:
        requests.RequestException: If the request fails.
        WeatherDataError: If the response holds no usable hourly data.
    """
    cache_key = (round(lat, 2), round(lon, 2), day.isoformat(), url)
    if use_cache:
        cached = _hourly_cache.get(cache_key)
        if cached is not None:
            return cached

    response = requests.get(
        url,
        params={
            "latitude": lat,
            "longitude": lon,
            "start_date": day.isoformat(),
            "end_date": day.isoformat(),
            "hourly": ",".join(HOURLY_VARIABLES),
            "wind_speed_unit": "ms",
            "timezone": "UTC",
        },
        timeout=timeout,
    )
    response.raise_for_status()

    hourly = parse_hourly_wind(response.json())
    logger.debug("Fetched %s hourly wind readings for %.4f,%.4f on %s", len(hourly.times), lat, lon, day)

    if use_cache:
        _hourly_cache.set(cache_key, hourly)
    return hourly


def clear_cache() -> int:
    """Drop cached weather responses. Returns number of entries cleared."""
    return _hourly_cache.clear()


def cache_stats() -> dict:
    return _hourly_cache.stats().to_dict()
