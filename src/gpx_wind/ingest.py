"""Track ingestion: coordinate validation, timestamp repair and ordering.

Per-point defects are absorbed here (bad coordinates drop the point, bad
elevation becomes 0, bad time becomes None). Only a track with no usable
coordinates or no usable timestamps is rejected.
"""

import logging
import math
import re
from collections.abc import Iterable
from datetime import datetime, timezone

from gpx_wind.errors import EmptyTrackError, MissingTimestampsError
from gpx_wind.models import RawPoint, TrackPoint

logger = logging.getLogger(__name__)

# Timestamps on or before this year come from unset device clocks
MIN_VALID_YEAR = 2000

_SPACE_SEPARATED_RE = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$")
_UTC_SUFFIX_RE = re.compile(r"\s*(?:UTC|GMT|z)$")
_FRACTION_RE = re.compile(r"(T\d{2}:\d{2}:\d{2})[.,](\d+)")


def _repair_time_string(text: str) -> str:
    """Rewrite common non-ISO timestamp spellings into ISO-8601."""
    if _SPACE_SEPARATED_RE.match(text):
        return text.replace(" ", "T") + "+00:00"
    text = _UTC_SUFFIX_RE.sub("+00:00", text)
    # Comma decimal mark, and more fractional digits than microseconds hold
    return _FRACTION_RE.sub(lambda m: f"{m.group(1)}.{m.group(2)[:6].ljust(6, '0')}", text)


def parse_timestamp(value: datetime | str | None) -> datetime | None:
    """Parse a timestamp into an aware UTC datetime.

    Timestamps without an offset are taken to be UTC. Returns None when the
    value is missing or cannot be parsed even after repair.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            try:
                parsed = datetime.fromisoformat(_repair_time_string(text))
            except ValueError:
                return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def has_valid_time(point: TrackPoint) -> bool:
    return point.time is not None and point.time.year > MIN_VALID_YEAR


def _parse_number(value) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def is_valid_coordinate(lat: float | None, lon: float | None) -> bool:
    return (
        lat is not None
        and lon is not None
        and -90 <= lat <= 90
        and -180 <= lon <= 180
    )


def parse_elevation(value) -> float:
    """Parse an elevation in meters, defaulting to 0 when absent or invalid."""
    elevation = _parse_number(value)
    return elevation if elevation is not None else 0.0


def extract_points(records: Iterable[RawPoint]) -> list[TrackPoint]:
    """Convert raw records to TrackPoints, dropping invalid coordinates.

    Raises:
        EmptyTrackError: If no record has valid coordinates.
    """
    points: list[TrackPoint] = []
    skipped = 0
    for index, record in enumerate(records):
        lat = _parse_number(record.lat)
        lon = _parse_number(record.lon)
        if not is_valid_coordinate(lat, lon):
            logger.debug("Skipping point %s with invalid coordinates: %r, %r", index, record.lat, record.lon)
            skipped += 1
            continue

        time = parse_timestamp(record.time)
        if time is None and record.time is not None:
            logger.debug("Could not parse time for point %s: %r", index, record.time)

        points.append(
            TrackPoint(
                lat=lat,
                lon=lon,
                elevation=parse_elevation(record.elevation),
                time=time,
            )
        )

    if skipped:
        logger.warning("Skipped %s points with invalid coordinates", skipped)
    if not points:
        raise EmptyTrackError("No valid GPS points with coordinates found in file")
    return points


def validate_timestamps(points: list[TrackPoint]) -> None:
    """Reject tracks where no point has a usable timestamp.

    Raises:
        MissingTimestampsError: If no point is dated after MIN_VALID_YEAR.
    """
    timed = sum(1 for p in points if p.time is not None)
    logger.info("Points with timestamps: %s/%s", timed, len(points))
    if not any(has_valid_time(p) for p in points):
        raise MissingTimestampsError()


def sort_points(points: list[TrackPoint]) -> list[TrackPoint]:
    """Sort points by time.

    The sort is stable: points sharing a timestamp keep their input order,
    and points without a time go last in their input order.
    """
    return sorted(points, key=lambda p: (p.time is None, p.time or datetime.min.replace(tzinfo=timezone.utc)))


def build_track(records: Iterable[RawPoint]) -> list[TrackPoint]:
    """Validate raw records and return the time-ordered track.

    Every point in the returned track carries a valid time (after the year
    2000), so points whose time is missing or unusable are removed here
    rather than kept at the end of the sort.

    Raises:
        EmptyTrackError: If no record has valid coordinates.
        MissingTimestampsError: If no record has a usable timestamp.
    """
    points = extract_points(records)
    validate_timestamps(points)

    track = [p for p in sort_points(points) if has_valid_time(p)]
    dropped = len(points) - len(track)
    if dropped:
        logger.warning("Dropped %s points without a usable timestamp", dropped)

    logger.info("Time range: %s to %s", track[0].time.isoformat(), track[-1].time.isoformat())
    return track
